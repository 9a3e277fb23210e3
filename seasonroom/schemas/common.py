"""Backend envelope and session schemas."""
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Optional


class ApiEnvelope(BaseModel):
    """Uniform ``{code, message, data}`` wrapper returned by the crew backend."""

    code: int
    message: Optional[str] = None
    data: Any = None


class TokenPair(BaseModel):
    """Access/refresh token pair issued after social login or refresh."""

    access_token: str = Field(alias="accessToken")
    refresh_token: Optional[str] = Field(default=None, alias="refreshToken")

    model_config = ConfigDict(populate_by_name=True)
