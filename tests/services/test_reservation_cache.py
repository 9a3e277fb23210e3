from datetime import date

import pytest

from seasonroom.services.reservation_cache import ReservationCache
from tests.conftest import CREW_ID

pytestmark = pytest.mark.asyncio

CALENDAR_PATH = f"/crews/{CREW_ID}/calendar/my"


def calendar_reads(backend):
    return [request for request in backend.requests if request[1] == CALENDAR_PATH]


async def test_month_is_read_once(crew_api, backend):
    backend.add_reservation(date(2025, 12, 14))
    cache = ReservationCache(crew_api)

    first = await cache.get_month(CREW_ID, 2025, 12)
    second = await cache.get_month(CREW_ID, 2025, 12)

    assert first is second
    assert [r.date for r in first.reservations] == [date(2025, 12, 14)]
    assert first.usage_count == 1
    assert len(calendar_reads(backend)) == 1


async def test_invalidate_one_month(crew_api, backend):
    cache = ReservationCache(crew_api)
    await cache.get_month(CREW_ID, 2025, 12)
    await cache.get_month(CREW_ID, 2026, 1)

    cache.invalidate(CREW_ID, 2025, 12)
    await cache.get_month(CREW_ID, 2025, 12)
    await cache.get_month(CREW_ID, 2026, 1)

    assert len(calendar_reads(backend)) == 3


async def test_invalidate_crew_sees_new_reservations(crew_api, backend):
    cache = ReservationCache(crew_api)
    assert (await cache.get_month(CREW_ID, 2025, 12)).reservations == []

    backend.add_reservation(date(2025, 12, 11))
    assert (await cache.get_month(CREW_ID, 2025, 12)).reservations == []

    cache.invalidate(CREW_ID)
    refreshed = await cache.get_month(CREW_ID, 2025, 12)

    assert [r.date for r in refreshed.reservations] == [date(2025, 12, 11)]


async def test_invalidate_everything(crew_api, backend):
    cache = ReservationCache(crew_api)
    await cache.get_month(CREW_ID, 2025, 12)

    cache.invalidate()
    await cache.get_month(CREW_ID, 2025, 12)

    assert len(calendar_reads(backend)) == 2
