"""Application configuration."""
from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings."""

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    DEBUG: bool = True

    # Crew backend
    API_BASE_URL: str = "http://localhost:8080/api"
    REQUEST_TIMEOUT_SECONDS: float = 10.0
    CREW_DETAIL_CONCURRENCY: int = 5  # parallel day-detail requests for the crew calendar

    # Session
    TOKEN_STORE_PATH: str = ".seasonroom/tokens.json"
    LOGIN_PATH: str = "/"

    # Calendar
    TIMEZONE: Optional[str] = None  # None keeps the local wall clock
    SEASON_START: str = "2025-10"
    SEASON_END: str = "2026-05"

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
