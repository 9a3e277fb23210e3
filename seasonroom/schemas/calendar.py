"""Calendar view schemas."""
from pydantic import BaseModel
from typing import Optional, List
from datetime import date


class DayView(BaseModel):
    """One cell of the user's calendar."""

    date: date
    day: int
    weekday: int  # 0 = Sunday
    is_today: bool
    is_past: bool
    available: bool
    selectable: bool
    phase: str  # none, selected, submitting, reserved, cancel_confirming
    status: str  # confirmed, pending, none
    teaching: bool = False
    reservation_id: Optional[int] = None
    waiting_order: Optional[int] = None


class MyCalendarView(BaseModel):
    """The user's month calendar."""

    year: int
    month: int
    first_weekday: int
    days_in_month: int
    usage_count: int
    can_go_prev: bool
    can_go_next: bool
    selected: List[date]
    days: List[DayView]
    anomalies: List[date] = []
    last_error: Optional[str] = None


class CrewDayView(BaseModel):
    """Crew-wide occupancy of one day."""

    date: date
    booked: int
    capacity: int
    level: str  # LOW, MEDIUM, HIGH
    color: str


class CrewCalendarView(BaseModel):
    """The crew-wide month calendar."""

    year: int
    month: int
    first_weekday: int
    days_in_month: int
    capacity: int
    is_capacity_limited: bool
    days: List[CrewDayView]
    missing: List[date] = []  # days whose detail could not be loaded


class CrewDayDetailView(CrewDayView):
    """Crew-wide detail of one day, including who is coming."""

    members: List[str] = []
    teaching_members: List[str] = []
    waiting_count: int = 0


class SelectionView(BaseModel):
    """Result of toggling a day."""

    date: date
    phase: str
    selected: List[date]


class CommandResultView(BaseModel):
    """Outcome of a reservation command."""

    action: str
    ok: bool
    dates: List[date]
    message: Optional[str] = None
