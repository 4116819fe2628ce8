# backend/tutorhub/services/conflict_checker.py
"""
Conflict Checker Service for the TutorHub platform

Answers one question: does a proposed interval on a teacher's calendar
overlap a confirmed booking? Intervals are half-open ``[start, end)``, so a
lesson ending at 11:00 and one starting at 11:00 do not conflict. Pending,
cancelled and completed bookings never block.

Read-only. Callers that need check-and-insert atomicity hold the teacher
profile row lock while calling it.
"""

from datetime import datetime
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import ValidationException
from ..repositories import RepositoryFactory
from ..repositories.conflict_checker_repository import ConflictCheckerRepository
from .base import BaseService

logger = logging.getLogger(__name__)


def intervals_overlap(
    a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime
) -> bool:
    """Half-open interval overlap: touching edges do not overlap."""
    return a_start < b_end and b_start < a_end


class ConflictChecker(BaseService):
    """
    Service for checking booking conflicts.
    """

    def __init__(self, db: Session, repository: Optional[ConflictCheckerRepository] = None):
        """
        Initialize conflict checker service.

        Args:
            db: Database session
            repository: Optional ConflictCheckerRepository instance
        """
        super().__init__(db)
        self.logger = logging.getLogger(__name__)
        self.repository = repository or RepositoryFactory.create_conflict_checker_repository(db)

    @staticmethod
    def _validate_interval(proposed_start: datetime, proposed_end: datetime) -> None:
        if proposed_start >= proposed_end:
            raise ValidationException(
                "Start time must be before end time",
                details={
                    "start_time": proposed_start.isoformat(),
                    "end_time": proposed_end.isoformat(),
                },
            )

    @BaseService.measure_operation("has_conflict")
    def has_conflict(
        self,
        teacher_profile_id: str,
        proposed_start: datetime,
        proposed_end: datetime,
        exclude_booking_id: Optional[str] = None,
    ) -> bool:
        """
        Check whether the interval overlaps a confirmed booking of the teacher.

        Args:
            teacher_profile_id: The teacher to check
            proposed_start: Interval start (inclusive)
            proposed_end: Interval end (exclusive)
            exclude_booking_id: Booking to ignore, used when re-checking a
                pending booking at confirmation time

        Returns:
            True if a confirmed booking overlaps
        """
        self._validate_interval(proposed_start, proposed_end)
        return self.repository.has_overlapping_booking(
            teacher_profile_id, proposed_start, proposed_end, exclude_booking_id
        )

    @BaseService.measure_operation("get_conflicting_bookings")
    def get_conflicting_bookings(
        self,
        teacher_profile_id: str,
        proposed_start: datetime,
        proposed_end: datetime,
        exclude_booking_id: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Describe the confirmed bookings that overlap, for error details.

        Returns:
            List of dicts with booking id and interval
        """
        self._validate_interval(proposed_start, proposed_end)
        bookings = self.repository.get_overlapping_bookings(
            teacher_profile_id, proposed_start, proposed_end, exclude_booking_id
        )
        return [
            {
                "booking_id": booking.id,
                "start_time": booking.start_time.isoformat(),
                "end_time": booking.end_time.isoformat(),
            }
            for booking in bookings
            if intervals_overlap(proposed_start, proposed_end, booking.start_time, booking.end_time)
        ]
