"""User schemas."""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class CrewSimple(BaseModel):
    """Crew membership as embedded in the current user."""

    crew_id: int = Field(alias="crewId")
    crew_name: Optional[str] = Field(default=None, alias="crewName")

    model_config = ConfigDict(populate_by_name=True)


class UserDetail(BaseModel):
    """Schema for ``GET /users/me``."""

    user_id: int = Field(alias="userId")
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    school: Optional[str] = None
    student_id: Optional[str] = Field(default=None, alias="studentId")
    phone_number: Optional[str] = Field(default=None, alias="phoneNumber")
    profile_image_url: Optional[str] = Field(default=None, alias="profileImageUrl")
    is_registered: bool = Field(default=True, alias="isRegistered")
    crew: Optional[CrewSimple] = None

    model_config = ConfigDict(populate_by_name=True)
