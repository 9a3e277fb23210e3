"""Crew schemas."""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class CrewDetail(BaseModel):
    """Schema for ``GET /crews/{crewId}``.

    ``reservation_day`` is an upper-case weekday name ("FRIDAY") and
    ``reservation_time`` an ``HH:MM`` string; both may be missing when the
    crew has not configured an opening rule yet.
    """

    crew_id: int
    name: str
    univ: Optional[str] = None
    reservation_day: Optional[str] = None
    reservation_time: Optional[str] = None
    daily_capacity: int = Field(default=0, alias="dailyCapacity")
    is_capacity_limited: bool = Field(default=True, alias="isCapacityLimited")
    status: Optional[str] = None
    president_name: Optional[str] = None
    member_count: Optional[int] = None
    profile_image_url: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)
