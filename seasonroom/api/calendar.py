"""Calendar endpoints."""
from typing import Optional
from fastapi import APIRouter, Depends, Query

from seasonroom.deps import get_session, to_http_error
from seasonroom.schemas.calendar import CrewCalendarView, MyCalendarView
from seasonroom.services.calendar_view import build_crew_calendar, build_my_calendar
from seasonroom.services.crew_session import CrewSession

router = APIRouter(prefix="/calendar", tags=["calendar"])


def _resolve_month(session: CrewSession, year: Optional[int], month: Optional[int]):
    today = session.clock.today()
    return year or today.year, month or today.month


@router.get("/my", response_model=MyCalendarView)
async def get_my_calendar(
    year: Optional[int] = Query(default=None, ge=2000, le=2100),
    month: Optional[int] = Query(default=None, ge=1, le=12),
    session: CrewSession = Depends(get_session),
):
    """
    Get the user's calendar for a month.

    Each day carries whether it can be selected right now, the user's
    reservation status on it and whether it is part of the current
    selection.

    Args:
        year: Viewed year (defaults to the current year)
        month: Viewed month (defaults to the current month)
        session: Current crew session

    Returns:
        Month calendar of the user
    """
    year, month = _resolve_month(session, year, month)
    try:
        flow = await session.get_flow()
        return await build_my_calendar(flow, session.clock, year, month)
    except Exception as e:
        raise to_http_error(e)


@router.get("/crew", response_model=CrewCalendarView)
async def get_crew_calendar(
    year: Optional[int] = Query(default=None, ge=2000, le=2100),
    month: Optional[int] = Query(default=None, ge=1, le=12),
    session: CrewSession = Depends(get_session),
):
    """
    Get crew-wide occupancy for a month.

    Args:
        year: Viewed year (defaults to the current year)
        month: Viewed month (defaults to the current month)
        session: Current crew session

    Returns:
        Occupancy level (LOW, MEDIUM, HIGH) of every day
    """
    year, month = _resolve_month(session, year, month)
    try:
        crew = await session.get_crew()
        return await build_crew_calendar(session.client, crew, year, month)
    except Exception as e:
        raise to_http_error(e)
