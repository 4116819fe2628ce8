# backend/tutorhub/schemas/review.py
from datetime import datetime
from typing import Any, Optional

from pydantic import Field, computed_field

from .base import StandardizedModel, StrictRequestModel


class ReviewCreate(StrictRequestModel):
    booking_id: str
    rating: int = Field(..., description="Whole stars, 1 to 5")
    comment: str = Field(..., description="3 to 1000 characters after trimming")


class ReviewResponse(StandardizedModel):
    id: str
    booking_id: str
    from_user_id: str
    to_user_id: str
    rating: int
    comment: str
    created_at: datetime
    reviewer_name: Optional[str] = None

    @classmethod
    def from_review(cls, review: Any) -> "ReviewResponse":
        response = cls.model_validate(review)
        if review.from_user is not None:
            response.reviewer_name = review.from_user.name
        return response


class TeacherRatingResponse(StandardizedModel):
    teacher_profile_id: str
    average_rating: float
    total_reviews: int

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_reviews(self) -> bool:
        return self.total_reviews > 0
