"""Reservation schemas."""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import date


class MyReservation(BaseModel):
    """A single reservation of the current user."""

    date: date
    status: str  # confirmed, waiting (any casing)
    reservation_id: Optional[int] = None
    crew_id: Optional[int] = None
    teaching: bool = False
    waiting_order: Optional[int] = None


class MyCalendarResponse(BaseModel):
    """Schema for ``GET /crews/{crewId}/calendar/my``."""

    my_reservations: List[MyReservation] = []
    usage_count: int = 0


class ReservationMember(BaseModel):
    """Member listed on a crew day detail."""

    user_id: int
    name: str
    profile_image_url: Optional[str] = None
    teaching: bool = False
    role: Optional[str] = None
    phone_number: Optional[str] = Field(default=None, alias="phoneNumber")
    registered_by_name: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class ReservationDetail(BaseModel):
    """Schema for ``GET /crews/{crewId}/reservations/detail``."""

    date: date
    status: Optional[str] = None
    booked: int = 0
    capacity: int = 0
    waiting_count: int = Field(default=0, alias="waitingCount")
    member_list: List[ReservationMember] = []

    model_config = ConfigDict(populate_by_name=True)


class ReservationResponse(BaseModel):
    """Schema for the create-reservation response."""

    reservation_id: Optional[int] = Field(default=None, alias="reservationId")
    status: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class GuestInfo(BaseModel):
    """Guest attached to a reservation request."""

    name: str
    phone_number: str = Field(alias="phoneNumber")

    model_config = ConfigDict(populate_by_name=True)


class GuestDetail(BaseModel):
    """Schema for ``POST /guests``."""

    id: int
    name: str
    phone_number: str = Field(alias="phoneNumber")

    model_config = ConfigDict(populate_by_name=True)


class CreateReservationRequest(BaseModel):
    """Body of ``POST /crews/{crewId}/reservations``."""

    dates: List[date]
    guest_info: Optional[GuestInfo] = Field(default=None, alias="guestInfo")

    model_config = ConfigDict(populate_by_name=True)


class CancelReservationRequest(BaseModel):
    """Body of ``DELETE /crews/{crewId}/reservations``."""

    dates: List[date]
