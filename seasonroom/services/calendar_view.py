"""Builds the calendar views from the reservation engine."""
import asyncio
import logging
from typing import Tuple

from seasonroom.core.clock import Clock
from seasonroom.core.config import settings
from seasonroom.core.exceptions import CrewApiError, ReservationValidationError
from seasonroom.schemas.calendar import (
    CrewCalendarView,
    CrewDayDetailView,
    CrewDayView,
    DayView,
    MyCalendarView,
)
from seasonroom.schemas.crew import CrewDetail
from seasonroom.schemas.reservation import ReservationDetail
from seasonroom.services.calendar_dates import (
    days_in_month,
    first_weekday_of_month,
    format_iso_date,
    is_past,
    month_days,
    parse_year_month,
    shift_month,
    sunday_weekday,
)
from seasonroom.services.crew_client import CrewApiClient
from seasonroom.services.occupancy import bucket, color_for
from seasonroom.services.reservation_commands import DayPhase, ReservationCommandFlow

logger = logging.getLogger(__name__)


def season_bounds() -> Tuple[Tuple[int, int], Tuple[int, int]]:
    """First and last navigable (year, month) of the season."""
    return parse_year_month(settings.SEASON_START), parse_year_month(settings.SEASON_END)


def month_navigation(year: int, month: int) -> Tuple[bool, bool]:
    """Whether the previous / next month are still inside the season."""
    start, end = season_bounds()
    return shift_month(year, month, -1) >= start, shift_month(year, month, 1) <= end


def ensure_in_season(year: int, month: int) -> None:
    start, end = season_bounds()
    if not start <= (year, month) <= end:
        raise ReservationValidationError(
            f"{year}-{month:02d} is outside the season "
            f"({start[0]}-{start[1]:02d} to {end[0]}-{end[1]:02d})"
        )


async def build_my_calendar(
    flow: ReservationCommandFlow, clock: Clock, year: int, month: int
) -> MyCalendarView:
    """
    Build the user's calendar for one month.

    Args:
        flow: Reservation flow of the signed-in user
        clock: Time source for "today"
        year: Viewed year
        month: Viewed month

    Returns:
        Per-day state with availability, reservation and selection
    """
    ensure_in_season(year, month)
    await flow.load_month(year, month)

    today = clock.today()
    days = []
    for day in month_days(year, month):
        state = flow.reservation_of(day)
        phase = flow.phase(day)
        available = flow.is_available(day)
        days.append(
            DayView(
                date=day,
                day=day.day,
                weekday=sunday_weekday(day),
                is_today=day == today,
                is_past=is_past(day, today),
                available=available,
                selectable=phase == DayPhase.NONE and available,
                phase=phase.value,
                status=state.status.value,
                teaching=state.teaching,
                reservation_id=state.reservation_id,
                waiting_order=state.waiting_order,
            )
        )

    can_go_prev, can_go_next = month_navigation(year, month)
    return MyCalendarView(
        year=year,
        month=month,
        first_weekday=first_weekday_of_month(year, month),
        days_in_month=days_in_month(year, month),
        usage_count=flow.usage_count,
        can_go_prev=can_go_prev,
        can_go_next=can_go_next,
        selected=flow.selected,
        days=days,
        anomalies=flow.anomalies(year, month),
        last_error=flow.last_error,
    )


def crew_day_view(crew: CrewDetail, detail: ReservationDetail) -> CrewDayDetailView:
    capacity = detail.capacity or crew.daily_capacity
    level = bucket(detail.booked, capacity, crew.is_capacity_limited)
    return CrewDayDetailView(
        date=detail.date,
        booked=detail.booked,
        capacity=capacity,
        level=level.value,
        color=color_for(level),
        members=[member.name for member in detail.member_list],
        teaching_members=[member.name for member in detail.member_list if member.teaching],
        waiting_count=detail.waiting_count,
    )


async def build_crew_calendar(
    client: CrewApiClient, crew: CrewDetail, year: int, month: int
) -> CrewCalendarView:
    """
    Crew-wide occupancy for every day of the month.

    Day details are fetched at most ``CREW_DETAIL_CONCURRENCY`` at a time.
    Days whose detail fails are listed in ``missing``; the view only fails
    when no day could be loaded.
    """
    ensure_in_season(year, month)
    logger.info(f"Building crew calendar of crew {crew.crew_id} for {year}-{month:02d}")

    semaphore = asyncio.Semaphore(settings.CREW_DETAIL_CONCURRENCY)

    async def fetch(day):
        async with semaphore:
            return await client.get_reservation_detail(crew.crew_id, day)

    month_dates = month_days(year, month)
    results = await asyncio.gather(*(fetch(day) for day in month_dates), return_exceptions=True)

    details = []
    missing = []
    errors = []
    for day, result in zip(month_dates, results):
        if isinstance(result, CrewApiError):
            logger.warning(f"Could not load crew detail for {format_iso_date(day)}: {result}")
            missing.append(day)
            errors.append(result)
        elif isinstance(result, BaseException):
            raise result
        else:
            details.append(result)

    if not details and errors:
        raise errors[0]

    days = []
    for detail in details:
        view = crew_day_view(crew, detail)
        days.append(
            CrewDayView(
                date=view.date,
                booked=view.booked,
                capacity=view.capacity,
                level=view.level,
                color=view.color,
            )
        )

    return CrewCalendarView(
        year=year,
        month=month,
        first_weekday=first_weekday_of_month(year, month),
        days_in_month=days_in_month(year, month),
        capacity=crew.daily_capacity,
        is_capacity_limited=crew.is_capacity_limited,
        days=days,
        missing=missing,
    )
