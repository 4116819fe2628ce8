# backend/tutorhub/schemas/teacher.py
"""
Teacher profile and subject schemas.

Hourly rates are whole cents throughout. Range checks for profile fields are
enforced by TeacherService so that the HTTP layer and direct service callers
see the same ValidationException.
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import Field

from .base import StandardizedModel, StrictRequestModel


class SubjectResponse(StandardizedModel):
    id: str
    name: str
    description: Optional[str] = None
    age_group_start: Optional[int] = None
    age_group_end: Optional[int] = None


class TeacherProfileUpsert(StrictRequestModel):
    """Create or replace the acting teacher's profile."""

    bio: str
    qualifications: str
    years_of_experience: int = 0
    hourly_rate: int = Field(..., description="Cents per hour")
    profile_picture: Optional[str] = Field(None, max_length=512)
    is_available_for_new_students: Optional[bool] = None


class AcceptingStudentsUpdate(StrictRequestModel):
    is_available_for_new_students: bool


class TeacherProfileResponse(StandardizedModel):
    id: str
    user_id: str
    name: str = ""
    bio: str
    qualifications: str
    years_of_experience: int
    profile_picture: Optional[str] = None
    hourly_rate: int
    is_available_for_new_students: bool
    subjects: List[SubjectResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_profile(cls, profile: Any) -> "TeacherProfileResponse":
        response = cls.model_validate(profile)
        response.name = profile.display_name
        return response


class TeacherSearchResult(TeacherProfileResponse):
    average_rating: float = 0.0
    review_count: int = 0


class TeacherSearchResponse(StandardizedModel):
    results: List[TeacherSearchResult]
    total: int
