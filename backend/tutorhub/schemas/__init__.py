# backend/tutorhub/schemas/__init__.py
"""
Pydantic schemas for the TutorHub API.
"""

from .base_responses import ActionResult, DeleteResponse, ErrorResponse, SuccessResponse
from .booking import (
    BookingCreate,
    BookingCreatedResponse,
    BookingResponse,
    BookingStatusUpdate,
    EarningsResponse,
)
from .review import ReviewCreate, ReviewResponse, TeacherRatingResponse

__all__ = [
    "ActionResult",
    "BookingCreate",
    "BookingCreatedResponse",
    "BookingResponse",
    "BookingStatusUpdate",
    "DeleteResponse",
    "EarningsResponse",
    "ErrorResponse",
    "ReviewCreate",
    "ReviewResponse",
    "SuccessResponse",
    "TeacherRatingResponse",
]
