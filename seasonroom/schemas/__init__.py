"""API schemas."""
from seasonroom.schemas.common import ApiEnvelope, TokenPair
from seasonroom.schemas.user import CrewSimple, UserDetail
from seasonroom.schemas.crew import CrewDetail
from seasonroom.schemas.reservation import (
    CancelReservationRequest,
    CreateReservationRequest,
    GuestDetail,
    GuestInfo,
    MyCalendarResponse,
    MyReservation,
    ReservationDetail,
    ReservationMember,
    ReservationResponse,
)
from seasonroom.schemas.calendar import (
    CommandResultView,
    CrewCalendarView,
    CrewDayDetailView,
    CrewDayView,
    DayView,
    MyCalendarView,
    SelectionView,
)

__all__ = [
    "ApiEnvelope",
    "TokenPair",
    "CrewSimple",
    "UserDetail",
    "CrewDetail",
    "CancelReservationRequest",
    "CreateReservationRequest",
    "GuestDetail",
    "GuestInfo",
    "MyCalendarResponse",
    "MyReservation",
    "ReservationDetail",
    "ReservationMember",
    "ReservationResponse",
    "CommandResultView",
    "CrewCalendarView",
    "CrewDayDetailView",
    "CrewDayView",
    "DayView",
    "MyCalendarView",
    "SelectionView",
]
