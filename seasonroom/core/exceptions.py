"""Errors raised by the crew client and the reservation flow."""
from typing import Optional


class CrewApiError(Exception):
    """The crew backend could not be reached or rejected a request."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code


class SessionExpiredError(Exception):
    """Tokens could not be refreshed; the session has been cleared."""


class ReservationValidationError(ValueError):
    """A reservation request was rejected before reaching the backend."""


class InvalidTransitionError(Exception):
    """A reservation command is not allowed in the day's current state."""
