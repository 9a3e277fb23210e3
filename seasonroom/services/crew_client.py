"""Crew backend API client.

All endpoints answer with a ``{code, message, data}`` envelope. Requests
carry the stored access token as a bearer token; an expired token is
refreshed once through :class:`TokenRefreshCoordinator` and the request
replayed. Requests are never retried otherwise.
"""
import logging
from datetime import date
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from seasonroom.core.config import settings
from seasonroom.core.exceptions import CrewApiError, SessionExpiredError
from seasonroom.schemas.common import ApiEnvelope, TokenPair
from seasonroom.schemas.crew import CrewDetail
from seasonroom.schemas.reservation import (
    CancelReservationRequest,
    CreateReservationRequest,
    GuestDetail,
    GuestInfo,
    MyCalendarResponse,
    MyReservation,
    ReservationDetail,
    ReservationResponse,
)
from seasonroom.schemas.user import UserDetail
from seasonroom.services.calendar_dates import format_iso_date
from seasonroom.services.token_refresh import TokenRefreshCoordinator
from seasonroom.services.token_store import TokenStore

logger = logging.getLogger(__name__)

# Message the backend attaches to 401 responses for an expired access token
TOKEN_EXPIRED_MARKER = "만료된 JWT 토큰"


class CrewApiClient:
    """Client for the crew reservation backend."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token_store: Optional[TokenStore] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the crew client."""
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.REQUEST_TIMEOUT_SECONDS
        self.token_store = token_store or TokenStore()
        self.refresher = TokenRefreshCoordinator(self.token_store, self._request_refresh)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

        self.endpoints = {
            "me": "/users/me",
            "my_reservations": "/users/me/reservations",
            "crew": "/crews/{crew_id}",
            "reservations": "/crews/{crew_id}/reservations",
            "teaching": "/crews/{crew_id}/reservations/{reservation_id}/teaching",
            "reservation_detail": "/crews/{crew_id}/reservations/detail",
            "my_calendar": "/crews/{crew_id}/calendar/my",
            "guests": "/guests",
            "refresh": "/auth/refresh",
        }

    def _http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
                headers={"Content-Type": "application/json"},
            )
        return self._client

    async def close(self):
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.close()

    async def _send(
        self,
        method: str,
        path: str,
        access_token: Optional[str],
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        headers = {}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"

        logger.info(f"Making {method} request to {path}")
        try:
            return await self._http().request(
                method=method,
                url=path,
                params=params,
                json=json_data,
                headers=headers,
            )
        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise CrewApiError(f"Request to {path} failed: {e}") from e

    @staticmethod
    def _envelope(response: httpx.Response) -> Optional[ApiEnvelope]:
        try:
            return ApiEnvelope.model_validate(response.json())
        except (ValueError, ValidationError):
            return None

    def _is_token_expired(self, response: httpx.Response) -> bool:
        if response.status_code != 401:
            return False
        envelope = self._envelope(response)
        if envelope is None:
            return True
        return envelope.code == 401 or TOKEN_EXPIRED_MARKER in (envelope.message or "")

    def _unwrap(self, response: httpx.Response) -> Any:
        envelope = self._envelope(response)

        if response.status_code >= 400:
            message = envelope.message if envelope and envelope.message else response.reason_phrase
            raise CrewApiError(
                message,
                status_code=response.status_code,
                code=envelope.code if envelope else None,
            )

        if envelope is None:
            if not response.content:
                return None
            raise CrewApiError(
                "Malformed response from crew backend",
                status_code=response.status_code,
            )

        if not 200 <= envelope.code < 300:
            raise CrewApiError(
                envelope.message or "Request rejected",
                status_code=response.status_code,
                code=envelope.code,
            )

        return envelope.data

    async def _make_request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json_data: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Make an authenticated request and return the envelope's ``data``.

        Args:
            method: HTTP method (GET, POST, etc.)
            path: Path relative to the API base URL
            params: Query parameters
            json_data: JSON body data

        Returns:
            The ``data`` member of the response envelope

        Raises:
            CrewApiError: If the request fails or is rejected
            SessionExpiredError: If the session cannot be restored
        """
        response = await self._send(method, path, self.token_store.access_token, params, json_data)

        if self._is_token_expired(response):
            logger.info(f"Access token expired on {method} {path}")
            access_token = await self.refresher.refresh()
            response = await self._send(method, path, access_token, params, json_data)

            if response.status_code == 401:
                logger.warning(f"Retried {method} {path} was still unauthorized")
                self.token_store.clear()
                raise SessionExpiredError("Unauthorized after token refresh")

        return self._unwrap(response)

    async def _request_refresh(self, refresh_token: str) -> TokenPair:
        """Exchange the refresh token for a new pair (no retry, no nested refresh)."""
        response = await self._send("POST", self.endpoints["refresh"], refresh_token, json_data={})
        data = self._unwrap(response)

        if not data or not data.get("accessToken"):
            raise CrewApiError("No access token in refresh response", status_code=response.status_code)

        return TokenPair.model_validate(data)

    async def get_current_user(self) -> UserDetail:
        data = await self._make_request("GET", self.endpoints["me"])
        return UserDetail.model_validate(data)

    async def get_my_reservations(self) -> List[MyReservation]:
        data = await self._make_request("GET", self.endpoints["my_reservations"])
        return [MyReservation.model_validate(item) for item in data or []]

    async def get_crew(self, crew_id: int) -> CrewDetail:
        logger.info(f"Fetching settings for crew {crew_id}")
        data = await self._make_request("GET", self.endpoints["crew"].format(crew_id=crew_id))
        return CrewDetail.model_validate(data)

    async def get_my_calendar(self, crew_id: int, month_day: date) -> MyCalendarResponse:
        """
        Get the user's reservations for the month containing ``month_day``.

        Args:
            crew_id: Crew ID
            month_day: Any day of the requested month

        Returns:
            Reservations of the month and the overall usage count
        """
        data = await self._make_request(
            "GET",
            self.endpoints["my_calendar"].format(crew_id=crew_id),
            params={"date": format_iso_date(month_day)},
        )
        return MyCalendarResponse.model_validate(data or {})

    async def get_reservation_detail(self, crew_id: int, day: date) -> ReservationDetail:
        data = await self._make_request(
            "GET",
            self.endpoints["reservation_detail"].format(crew_id=crew_id),
            params={"date": format_iso_date(day)},
        )
        return ReservationDetail.model_validate(data)

    async def create_reservations(
        self,
        crew_id: int,
        dates: List[date],
        guest_info: Optional[GuestInfo] = None,
    ) -> ReservationResponse:
        """
        Reserve several dates in one request.

        Args:
            crew_id: Crew ID
            dates: Dates to reserve
            guest_info: Guest to reserve for, None for the user themselves

        Returns:
            Reservation id and status reported by the backend
        """
        body = CreateReservationRequest(dates=dates, guest_info=guest_info)
        logger.info(f"Creating reservations for crew {crew_id}: {[format_iso_date(d) for d in dates]}")
        data = await self._make_request(
            "POST",
            self.endpoints["reservations"].format(crew_id=crew_id),
            json_data=body.model_dump(mode="json", by_alias=True, exclude_none=True),
        )
        return ReservationResponse.model_validate(data or {})

    async def cancel_reservations(self, crew_id: int, dates: List[date]) -> None:
        body = CancelReservationRequest(dates=dates)
        logger.info(f"Cancelling reservations for crew {crew_id}: {[format_iso_date(d) for d in dates]}")
        await self._make_request(
            "DELETE",
            self.endpoints["reservations"].format(crew_id=crew_id),
            json_data=body.model_dump(mode="json"),
        )

    async def apply_teaching(self, crew_id: int, reservation_id: int) -> None:
        await self._make_request(
            "POST",
            self.endpoints["teaching"].format(crew_id=crew_id, reservation_id=reservation_id),
        )

    async def withdraw_teaching(self, crew_id: int, reservation_id: int) -> None:
        await self._make_request(
            "DELETE",
            self.endpoints["teaching"].format(crew_id=crew_id, reservation_id=reservation_id),
        )

    async def register_guest(self, guest: GuestInfo) -> GuestDetail:
        data = await self._make_request(
            "POST",
            self.endpoints["guests"],
            json_data=guest.model_dump(by_alias=True),
        )
        return GuestDetail.model_validate(data)


# Singleton instance
crew_client = CrewApiClient()
