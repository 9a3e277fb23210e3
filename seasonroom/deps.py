"""FastAPI dependencies and error translation."""
import logging

from fastapi import HTTPException

from seasonroom.core.config import settings
from seasonroom.core.exceptions import (
    CrewApiError,
    InvalidTransitionError,
    ReservationValidationError,
    SessionExpiredError,
)
from seasonroom.services.crew_session import CrewSession, crew_session

logger = logging.getLogger(__name__)


def get_session() -> CrewSession:
    """The process-wide session; every caller acts as the same signed-in user."""
    return crew_session


def to_http_error(error: Exception) -> HTTPException:
    """Translate a domain error into the HTTP error the front-end expects."""
    if isinstance(error, ReservationValidationError):
        return HTTPException(status_code=400, detail=str(error))
    if isinstance(error, InvalidTransitionError):
        return HTTPException(status_code=409, detail=str(error))
    if isinstance(error, SessionExpiredError):
        return HTTPException(
            status_code=401,
            detail={"message": str(error), "login": settings.LOGIN_PATH},
        )
    if isinstance(error, CrewApiError):
        return HTTPException(status_code=502, detail=f"Crew backend error: {error.message}")
    logger.error(f"Unexpected error: {error}", exc_info=error)
    return HTTPException(status_code=500, detail=str(error))
