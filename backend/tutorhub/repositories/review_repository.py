# backend/tutorhub/repositories/review_repository.py
"""
Review Repository for the TutorHub platform

Reviews are written once per booking and never updated.
"""

import logging
from typing import Any, List, Mapping, Optional, TypedDict, cast

from sqlalchemy import func
from sqlalchemy.engine import Row
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.review import Review
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class RatingAggregate(TypedDict):
    total_reviews: int
    average_rating: float


class ReviewRepository(BaseRepository[Review]):
    """Data access for `Review`."""

    def __init__(self, db: Session):
        super().__init__(db, Review)
        self.logger = logging.getLogger(__name__)

    def exists_for_booking(self, booking_id: str) -> bool:
        try:
            return (
                self.db.query(self.model.id).filter(self.model.booking_id == booking_id).first()
                is not None
            )
        except Exception as e:
            self.logger.error(f"Error checking review existence: {e}")
            raise RepositoryException(f"Failed to check review existence: {e}")

    def get_by_booking_id(self, booking_id: str) -> Optional[Review]:
        try:
            return cast(
                Optional[Review],
                self.db.query(Review).filter(Review.booking_id == booking_id).first(),
            )
        except Exception as e:
            self.logger.error(f"Error fetching review by booking: {e}")
            raise RepositoryException(f"Failed to fetch review by booking: {e}")

    def get_for_recipient(self, to_user_id: str, limit: int = 50) -> List[Review]:
        """Reviews written about a user, newest first."""
        query = (
            self._build_query()
            .filter(Review.to_user_id == to_user_id)
            .order_by(Review.created_at.desc())
            .limit(limit)
        )
        return cast(List[Review], self._execute_query(query))

    def get_by_author(self, from_user_id: str, limit: int = 50) -> List[Review]:
        query = (
            self._build_query()
            .filter(Review.from_user_id == from_user_id)
            .order_by(Review.created_at.desc())
            .limit(limit)
        )
        return cast(List[Review], self._execute_query(query))

    def get_rating_aggregate(self, to_user_id: str) -> RatingAggregate:
        try:
            row = (
                self.db.query(
                    func.count(Review.id).label("total_reviews"),
                    func.avg(Review.rating * 1.0).label("average_rating"),
                )
                .filter(Review.to_user_id == to_user_id)
                .first()
            )
            if not row:
                return {"total_reviews": 0, "average_rating": 0.0}
            mapping: Mapping[str, Any] = cast(Row[Any], row)._mapping
            return {
                "total_reviews": int(mapping.get("total_reviews", 0) or 0),
                "average_rating": float(mapping.get("average_rating", 0.0) or 0.0),
            }
        except Exception as e:
            self.logger.error(f"Error aggregating reviews: {e}")
            raise RepositoryException(f"Failed to aggregate reviews: {e}")
