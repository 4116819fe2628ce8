# backend/tutorhub/repositories/conflict_checker_repository.py
"""
ConflictChecker Repository for the TutorHub platform

Finds bookings that block a proposed interval on a teacher's calendar.
Only confirmed bookings block; pending, cancelled and completed bookings
never do. Intervals are half-open, so bookings that merely touch at an
edge do not overlap.
"""

from datetime import datetime
import logging
from typing import List, Optional, cast

from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.booking import Booking, BookingStatus
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

BLOCKING_STATUSES = (BookingStatus.CONFIRMED.value,)


class ConflictCheckerRepository(BaseRepository[Booking]):
    """
    Repository for conflict checking data access.
    """

    def __init__(self, db: Session):
        super().__init__(db, Booking)
        self.logger = logging.getLogger(__name__)

    def _overlap_query(
        self,
        teacher_profile_id: str,
        proposed_start: datetime,
        proposed_end: datetime,
        exclude_booking_id: Optional[str],
    ):
        # [s, e) overlaps [s', e') iff s < e' and s' < e
        query = self.db.query(Booking).filter(
            Booking.teacher_profile_id == teacher_profile_id,
            Booking.status.in_(BLOCKING_STATUSES),
            Booking.start_time < proposed_end,
            Booking.end_time > proposed_start,
        )
        if exclude_booking_id:
            query = query.filter(Booking.id != exclude_booking_id)
        return query

    def has_overlapping_booking(
        self,
        teacher_profile_id: str,
        proposed_start: datetime,
        proposed_end: datetime,
        exclude_booking_id: Optional[str] = None,
    ) -> bool:
        try:
            query = self._overlap_query(
                teacher_profile_id, proposed_start, proposed_end, exclude_booking_id
            )
            return bool(self.db.query(query.exists()).scalar())
        except Exception as e:
            self.logger.error(f"Error checking booking overlap: {str(e)}")
            raise RepositoryException(f"Failed to check booking conflicts: {str(e)}")

    def get_overlapping_bookings(
        self,
        teacher_profile_id: str,
        proposed_start: datetime,
        proposed_end: datetime,
        exclude_booking_id: Optional[str] = None,
    ) -> List[Booking]:
        """
        Get confirmed bookings of a teacher overlapping the proposed interval.

        Args:
            teacher_profile_id: The teacher to check
            proposed_start: Interval start (inclusive)
            proposed_end: Interval end (exclusive)
            exclude_booking_id: Optional booking ID to exclude from results

        Returns:
            Overlapping bookings ordered by start time
        """
        try:
            query = self._overlap_query(
                teacher_profile_id, proposed_start, proposed_end, exclude_booking_id
            )
            return cast(List[Booking], query.order_by(Booking.start_time).all())
        except Exception as e:
            self.logger.error(f"Error getting bookings for conflict check: {str(e)}")
            raise RepositoryException(f"Failed to get conflict bookings: {str(e)}")
