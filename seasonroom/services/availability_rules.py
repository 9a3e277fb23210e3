"""Reservation availability rules.

A crew opens next week's reservations at a fixed weekday and time (for
example Friday 18:00). Until that instant only the remainder of the
current week, up to and including Saturday, can be reserved. Weeks start
on Sunday.

    [today, this Saturday]             always open
    (this Saturday, next Saturday]     open once the crew's opening instant
                                       of the current week has passed
    anything else                      closed
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime, time as dt_time
from typing import Optional

from seasonroom.schemas.crew import CrewDetail
from seasonroom.services.calendar_dates import (
    SATURDAY,
    add_days,
    is_past,
    sunday_weekday,
)

logger = logging.getLogger(__name__)

WEEKDAY_NAMES = [
    "SUNDAY",
    "MONDAY",
    "TUESDAY",
    "WEDNESDAY",
    "THURSDAY",
    "FRIDAY",
    "SATURDAY",
]


@dataclass(frozen=True)
class OpenRule:
    """Weekly opening instant of a crew (weekday 0 = Sunday)."""

    weekday: int
    time: dt_time

    @classmethod
    def parse(cls, day_name: str, time_str: str) -> "OpenRule":
        """
        Build a rule from the crew settings representation.

        Args:
            day_name: Weekday name such as "FRIDAY" (case-insensitive)
            time_str: "HH:MM" or "HH:MM:SS"

        Raises:
            ValueError: If either value cannot be parsed
        """
        name = day_name.strip().upper()
        if name not in WEEKDAY_NAMES:
            raise ValueError(f"Unknown weekday '{day_name}'")

        parts = time_str.strip().split(":")
        try:
            hour = int(parts[0])
            minute = int(parts[1]) if len(parts) > 1 else 0
            second = int(parts[2]) if len(parts) > 2 else 0
            opening_time = dt_time(hour=hour, minute=minute, second=second)
        except (ValueError, IndexError) as e:
            raise ValueError(f"Invalid opening time '{time_str}'") from e

        return cls(weekday=WEEKDAY_NAMES.index(name), time=opening_time)

    @classmethod
    def from_crew(cls, crew: Optional[CrewDetail]) -> Optional["OpenRule"]:
        """Rule of a loaded crew, or None when it is missing or unusable."""
        if crew is None or not crew.reservation_day or not crew.reservation_time:
            return None
        try:
            return cls.parse(crew.reservation_day, crew.reservation_time)
        except ValueError as e:
            logger.warning(f"Crew {crew.crew_id} has an invalid opening rule: {e}")
            return None


def this_saturday(today: date) -> date:
    """Saturday closing the week of ``today`` (``today`` itself on Saturdays)."""
    return add_days(today, SATURDAY - sunday_weekday(today))


def next_saturday(today: date) -> date:
    return add_days(this_saturday(today), 7)


def opening_instant(today: date, rule: OpenRule) -> datetime:
    """
    Opening instant of the week containing ``today``.

    The result may lie before or after ``today``; it is never moved to
    the following week.
    """
    week_start = add_days(today, -sunday_weekday(today))
    return datetime.combine(add_days(week_start, rule.weekday), rule.time)


def is_next_week_open(today: date, rule: Optional[OpenRule], now: datetime) -> bool:
    if rule is None:
        return False
    return now >= opening_instant(today, rule)


def is_day_available(
    target_date: date,
    today: date,
    rule: Optional[OpenRule],
    now: datetime,
) -> bool:
    """
    Decide whether ``target_date`` may be reserved at instant ``now``.

    Args:
        target_date: Day the user wants to reserve
        today: Current calendar date
        rule: Crew opening rule, None when the crew is not loaded
        now: Current wall-clock instant

    Returns:
        True if the day is selectable
    """
    if is_past(target_date, today):
        return False

    closing_saturday = this_saturday(today)
    if target_date <= closing_saturday:
        return True

    if target_date > add_days(closing_saturday, 7):
        return False

    return is_next_week_open(today, rule, now)


class AvailabilityRules:
    """Availability rules bound to a clock, used by the calendar views."""

    def __init__(self, clock):
        self.clock = clock

    def is_available(self, target_date: date, rule: Optional[OpenRule]) -> bool:
        now = self.clock.now()
        return is_day_available(target_date, now.date(), rule, now)

    def horizon(self) -> date:
        """Last day that can ever be reservable from today."""
        return next_saturday(self.clock.today())
