# backend/tutorhub/schemas/booking.py
"""
Booking schemas for the TutorHub platform.

Bookings carry absolute start and end timestamps. Range and ordering checks
live in BookingService so that every caller gets the same domain errors;
these models only shape the payloads.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from ..models.booking import BookingStatus
from .base import StandardizedModel, StrictRequestModel


class BookingCreate(StrictRequestModel):
    """Request a lesson with a teacher."""

    teacher_profile_id: str = Field(..., description="Teacher profile to book")
    start_time: datetime = Field(..., description="Lesson start (UTC if no offset given)")
    end_time: datetime = Field(..., description="Lesson end")
    subject_id: Optional[str] = Field(None, description="Subject of the lesson")
    notes: Optional[str] = Field(None, max_length=1000, description="Optional note for the teacher")

    @field_validator("notes")
    @classmethod
    def clean_notes(cls, v: Optional[str]) -> Optional[str]:
        """Strip whitespace; blank notes become None."""
        if v is None:
            return v
        v = v.strip()
        return v or None


class BookingStatusUpdate(StrictRequestModel):
    status: BookingStatus
    expected_version: Optional[int] = Field(
        None, ge=1, description="Version the client last saw, for optimistic locking"
    )


class BookingResponse(StandardizedModel):
    id: str
    teacher_profile_id: str
    parent_id: str
    subject_id: Optional[str] = None
    start_time: datetime
    end_time: datetime
    notes: Optional[str] = None
    status: str
    payment_status: str
    price: int = Field(description="Price in cents, fixed at creation")
    payment_intent_id: Optional[str] = None
    refund_id: Optional[str] = None
    confirmed_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancelled_by_id: Optional[str] = None
    created_at: datetime
    version: int


class BookingCreatedResponse(BookingResponse):
    """A new booking plus the client secret needed to complete payment."""

    client_secret: Optional[str] = None


class EarningsResponse(StandardizedModel):
    price: int
    platform_fee: int
    teacher_earnings: int
    platform_fee_percentage: int
