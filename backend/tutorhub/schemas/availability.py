# backend/tutorhub/schemas/availability.py
from typing import Optional

from pydantic import Field

from .base import StandardizedModel, StrictRequestModel


class AvailabilitySlotCreate(StrictRequestModel):
    day_of_week: int = Field(..., description="0 (Sunday) to 6 (Saturday)")
    start_time: str = Field(..., description="HH:MM, 24-hour clock")
    end_time: str = Field(..., description="HH:MM, 24-hour clock")
    is_recurring: bool = True


class AvailabilitySlotUpdate(StrictRequestModel):
    """Partial update; omitted fields keep their current value."""

    day_of_week: Optional[int] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    is_recurring: Optional[bool] = None


class AvailabilitySlotResponse(StandardizedModel):
    id: str
    teacher_profile_id: str
    day_of_week: int
    start_time: str
    end_time: str
    is_recurring: bool
