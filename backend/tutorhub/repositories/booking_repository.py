# backend/tutorhub/repositories/booking_repository.py
"""
Booking Repository for the TutorHub platform

Data access for bookings. Parents see the bookings they made; teachers see
the bookings made against their profile.
"""

import logging
from typing import List, Optional, cast

from sqlalchemy.orm import Query, Session, joinedload

from ..core.exceptions import RepositoryException
from ..models.booking import Booking
from ..models.teacher import TeacherProfile
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class BookingRepository(BaseRepository[Booking]):
    """Repository for booking data access."""

    def __init__(self, db: Session):
        super().__init__(db, Booking)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(
            joinedload(Booking.teacher_profile).joinedload(TeacherProfile.user),
            joinedload(Booking.parent),
            joinedload(Booking.subject),
        )

    def get_for_update(self, booking_id: str) -> Optional[Booking]:
        """Lock the booking row for a status change."""
        return self.get_by_id_for_update(booking_id)

    def get_parent_bookings(
        self, parent_id: str, status: Optional[str] = None, limit: int = 100
    ) -> List[Booking]:
        try:
            query = self._apply_eager_loading(self._build_query()).filter(
                Booking.parent_id == parent_id
            )
            if status:
                query = query.filter(Booking.status == status)
            return cast(List[Booking], query.order_by(Booking.start_time.desc()).limit(limit).all())
        except Exception as e:
            self.logger.error(f"Error getting parent bookings: {str(e)}")
            raise RepositoryException(f"Failed to get parent bookings: {str(e)}")

    def get_teacher_bookings(
        self, teacher_profile_id: str, status: Optional[str] = None, limit: int = 100
    ) -> List[Booking]:
        try:
            query = self._apply_eager_loading(self._build_query()).filter(
                Booking.teacher_profile_id == teacher_profile_id
            )
            if status:
                query = query.filter(Booking.status == status)
            return cast(List[Booking], query.order_by(Booking.start_time.desc()).limit(limit).all())
        except Exception as e:
            self.logger.error(f"Error getting teacher bookings: {str(e)}")
            raise RepositoryException(f"Failed to get teacher bookings: {str(e)}")
