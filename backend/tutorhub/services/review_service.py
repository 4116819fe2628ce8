# backend/tutorhub/services/review_service.py
"""
Review Service for the TutorHub platform

The review gate: only the parent of a completed booking may review it, and
only once. The one-review rule is backed by the unique constraint on
``reviews.booking_id``, so two racing submissions still produce a single
review and a ConflictException for the loser.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.constants import (
    MAX_RATING,
    MAX_REVIEW_COMMENT_LENGTH,
    MIN_RATING,
    MIN_REVIEW_COMMENT_LENGTH,
)
from ..core.exceptions import (
    DuplicateReviewException,
    NotFoundException,
    PermissionDeniedException,
    PolicyException,
    RepositoryException,
    ValidationException,
)
from ..models.booking import BookingStatus
from ..models.review import Review
from ..principal import ActingUser
from ..repositories.factory import RepositoryFactory
from .base import BaseService, Clock

logger = logging.getLogger(__name__)


class ReviewService(BaseService):
    def __init__(self, db: Session, clock: Optional[Clock] = None):
        super().__init__(db, clock=clock)
        self.repository = RepositoryFactory.create_review_repository(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)
        self.teacher_profile_repository = RepositoryFactory.create_teacher_profile_repository(db)

    @staticmethod
    def _validate_input(rating: Any, comment: Optional[str]) -> str:
        if not isinstance(rating, int) or isinstance(rating, bool) or not (
            MIN_RATING <= rating <= MAX_RATING
        ):
            raise ValidationException(
                f"Rating must be an integer between {MIN_RATING} and {MAX_RATING}"
            )
        text = (comment or "").strip()
        if not MIN_REVIEW_COMMENT_LENGTH <= len(text) <= MAX_REVIEW_COMMENT_LENGTH:
            raise ValidationException(
                f"Comment must be between {MIN_REVIEW_COMMENT_LENGTH} and "
                f"{MAX_REVIEW_COMMENT_LENGTH} characters"
            )
        return text

    @BaseService.measure_operation("submit_review")
    def submit_review(
        self, booking_id: str, rating: int, comment: str, actor: ActingUser
    ) -> Review:
        """
        Submit a review for a completed booking.

        Raises:
            ValidationException: Rating or comment out of range
            NotFoundException: Booking not found
            PermissionDeniedException: Actor is not the booking's parent
            PolicyException: Booking is not completed
            DuplicateReviewException: Booking already reviewed
        """
        text = self._validate_input(rating, comment)

        booking = self.booking_repository.get_by_id(booking_id)
        if not booking:
            raise NotFoundException("Booking not found")
        if booking.parent_id != actor.id:
            raise PermissionDeniedException("You can only review your own bookings")
        if booking.status != BookingStatus.COMPLETED.value:
            raise PolicyException(
                "You can only review completed bookings",
                code="BOOKING_NOT_COMPLETED",
                details={"status": booking.status},
            )
        if self.repository.exists_for_booking(booking_id):
            raise DuplicateReviewException(booking_id)

        with self.transaction():
            try:
                with self.db.begin_nested():
                    review = self.repository.create(
                        booking_id=booking_id,
                        from_user_id=actor.id,
                        to_user_id=booking.teacher_profile.user_id,
                        rating=rating,
                        comment=text,
                        created_at=self.now(),
                    )
            except RepositoryException as exc:
                if isinstance(exc.__cause__, IntegrityError):
                    raise DuplicateReviewException(booking_id) from exc
                raise

        self.log_operation("submit_review", booking_id=booking_id, rating=rating)
        return review

    @BaseService.measure_operation("get_booking_review")
    def get_booking_review(self, booking_id: str) -> Optional[Review]:
        return self.repository.get_by_booking_id(booking_id)

    @BaseService.measure_operation("get_teacher_reviews")
    def get_teacher_reviews(self, teacher_profile_id: str, limit: int = 50) -> List[Review]:
        """Reviews about a teacher, newest first."""
        profile = self.teacher_profile_repository.get_by_id(teacher_profile_id)
        if profile is None:
            raise NotFoundException("Teacher not found")
        return self.repository.get_for_recipient(profile.user_id, limit=limit)

    @BaseService.measure_operation("get_teacher_average_rating")
    def get_teacher_average_rating(self, teacher_profile_id: str) -> Dict[str, Any]:
        """Average rating (0.0 when unreviewed) and review count for a teacher."""
        profile = self.teacher_profile_repository.get_by_id(teacher_profile_id)
        if profile is None:
            raise NotFoundException("Teacher not found")
        aggregate = self.repository.get_rating_aggregate(profile.user_id)
        return {
            "average_rating": round(aggregate["average_rating"], 2),
            "total_reviews": aggregate["total_reviews"],
        }

    @BaseService.measure_operation("get_user_reviews")
    def get_user_reviews(self, user_id: str, as_reviewer: bool = False) -> List[Review]:
        """Reviews written by (``as_reviewer``) or about a user."""
        if as_reviewer:
            return self.repository.get_by_author(user_id)
        return self.repository.get_for_recipient(user_id)
