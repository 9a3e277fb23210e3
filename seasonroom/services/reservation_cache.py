"""Read-through cache of the user's monthly reservations."""
import logging
from datetime import date
from typing import Dict, Optional, Tuple

from seasonroom.services.crew_client import CrewApiClient
from seasonroom.services.reservation_state import MonthReservations

logger = logging.getLogger(__name__)

CacheKey = Tuple[int, int, int]  # crew_id, year, month


class ReservationCache:
    """
    Caches ``GET /crews/{crewId}/calendar/my`` per (crew, viewed month).

    The backend stays the source of truth: every mutating command must
    call :meth:`invalidate` before the next read.
    """

    def __init__(self, client: CrewApiClient):
        self.client = client
        self._entries: Dict[CacheKey, MonthReservations] = {}

    async def get_month(self, crew_id: int, year: int, month: int) -> MonthReservations:
        key = (crew_id, year, month)
        cached = self._entries.get(key)
        if cached is not None:
            return cached

        logger.info(f"Loading reservations of crew {crew_id} for {year}-{month:02d}")
        response = await self.client.get_my_calendar(crew_id, date(year, month, 1))
        entry = MonthReservations(
            crew_id=crew_id,
            year=year,
            month=month,
            reservations=response.my_reservations,
            usage_count=response.usage_count,
        )
        self._entries[key] = entry
        return entry

    def invalidate(
        self,
        crew_id: Optional[int] = None,
        year: Optional[int] = None,
        month: Optional[int] = None,
    ) -> None:
        """Drop one month, every month of a crew, or everything."""
        if crew_id is None:
            self._entries.clear()
            return

        for key in list(self._entries):
            if key[0] != crew_id:
                continue
            if year is not None and month is not None and key[1:] != (year, month):
                continue
            del self._entries[key]
