# backend/tutorhub/repositories/teacher_profile_repository.py
"""
Teacher Profile Repository for the TutorHub platform

Profile lookups, the row lock that serialises booking creation per teacher,
and the marketplace search query.
"""

import logging
from typing import List, Optional, Sequence, Tuple, cast

from sqlalchemy import func, or_
from sqlalchemy.orm import Query, Session, joinedload

from ..core.exceptions import RepositoryException
from ..models.review import Review
from ..models.teacher import TeacherProfile, TeacherSubject
from ..models.user import User
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

SearchRow = Tuple[TeacherProfile, float, int]


class TeacherProfileRepository(BaseRepository[TeacherProfile]):
    """Repository for teacher profile data access."""

    def __init__(self, db: Session):
        super().__init__(db, TeacherProfile)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(joinedload(TeacherProfile.user))

    def get_by_user_id(self, user_id: str) -> Optional[TeacherProfile]:
        try:
            return cast(
                Optional[TeacherProfile],
                self._apply_eager_loading(self._build_query())
                .filter(TeacherProfile.user_id == user_id)
                .first(),
            )
        except Exception as e:
            self.logger.error(f"Error getting profile for user {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to get teacher profile: {str(e)}")

    def lock_for_booking(self, profile_id: str) -> Optional[TeacherProfile]:
        """Take the per-teacher row lock that serialises check-and-insert of bookings."""
        return self.get_by_id_for_update(profile_id)

    def search(
        self,
        query_text: Optional[str] = None,
        subject_ids: Optional[Sequence[str]] = None,
        min_rate: Optional[int] = None,
        max_rate: Optional[int] = None,
        min_rating: Optional[float] = None,
        limit: int = 50,
    ) -> List[SearchRow]:
        """
        Search teachers accepting new students.

        Returns:
            Rows of (profile, average rating, review count), best rated first
        """
        try:
            ratings = (
                self.db.query(
                    Review.to_user_id.label("user_id"),
                    func.avg(Review.rating).label("avg_rating"),
                    func.count(Review.id).label("review_count"),
                )
                .group_by(Review.to_user_id)
                .subquery()
            )
            avg_rating = func.coalesce(ratings.c.avg_rating, 0.0)
            review_count = func.coalesce(ratings.c.review_count, 0)

            query = (
                self.db.query(TeacherProfile, avg_rating, review_count)
                .join(User, TeacherProfile.user_id == User.id)
                .outerjoin(ratings, ratings.c.user_id == TeacherProfile.user_id)
                .options(joinedload(TeacherProfile.user))
                .filter(TeacherProfile.is_available_for_new_students.is_(True))
            )

            if query_text:
                pattern = f"%{query_text.strip()}%"
                query = query.filter(
                    or_(
                        User.name.ilike(pattern),
                        TeacherProfile.bio.ilike(pattern),
                        TeacherProfile.qualifications.ilike(pattern),
                    )
                )
            if subject_ids:
                teaching = (
                    self.db.query(TeacherSubject.teacher_profile_id)
                    .filter(TeacherSubject.subject_id.in_(list(subject_ids)))
                )
                query = query.filter(TeacherProfile.id.in_(teaching))
            if min_rate is not None:
                query = query.filter(TeacherProfile.hourly_rate >= min_rate)
            if max_rate is not None:
                query = query.filter(TeacherProfile.hourly_rate <= max_rate)
            if min_rating is not None:
                query = query.filter(avg_rating >= min_rating)

            rows = query.order_by(avg_rating.desc(), TeacherProfile.created_at).limit(limit).all()
            return [(profile, float(rating or 0.0), int(count or 0)) for profile, rating, count in rows]
        except Exception as e:
            self.logger.error(f"Error searching teachers: {str(e)}")
            raise RepositoryException(f"Failed to search teachers: {str(e)}")
