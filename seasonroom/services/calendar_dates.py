"""Date helpers shared by the calendar views.

Weekdays use the calendar grid convention: 0 = Sunday ... 6 = Saturday.
"""
import calendar
from datetime import date, datetime, time as dt_time, timedelta
from typing import List, Tuple

SATURDAY = 6


def sunday_weekday(day: date) -> int:
    """Weekday of ``day`` with Sunday as 0."""
    return (day.weekday() + 1) % 7


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def first_weekday_of_month(year: int, month: int) -> int:
    """Grid column of the 1st of the month (0 = Sunday)."""
    return sunday_weekday(date(year, month, 1))


def month_days(year: int, month: int) -> List[date]:
    """Every date of the given month, in order."""
    return [date(year, month, day) for day in range(1, days_in_month(year, month) + 1)]


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    return date(year, month, 1), date(year, month, days_in_month(year, month))


def shift_month(year: int, month: int, offset: int) -> Tuple[int, int]:
    """Move ``offset`` months forward (or back) from (year, month)."""
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def add_days(day: date, n: int) -> date:
    return day + timedelta(days=n)


def is_past(day: date, today: date) -> bool:
    return day < today


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, dt_time.min)


def end_of_day(day: date) -> datetime:
    return datetime.combine(day, dt_time.max)


def format_iso_date(day: date) -> str:
    return day.strftime("%Y-%m-%d")


def parse_iso_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` string."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_year_month(value: str) -> Tuple[int, int]:
    """Parse a ``YYYY-MM`` string into (year, month)."""
    parsed = datetime.strptime(value, "%Y-%m")
    return parsed.year, parsed.month
