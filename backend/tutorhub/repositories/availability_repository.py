# backend/tutorhub/repositories/availability_repository.py
"""
Availability Repository for the TutorHub platform

Weekly availability slots, always returned in calendar order.
"""

import logging
from typing import List, cast

from sqlalchemy.orm import Session

from ..models.availability import AvailabilitySlot
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class AvailabilityRepository(BaseRepository[AvailabilitySlot]):
    """Repository for availability slot data access."""

    def __init__(self, db: Session):
        super().__init__(db, AvailabilitySlot)

    def get_teacher_slots(self, teacher_profile_id: str) -> List[AvailabilitySlot]:
        query = (
            self._build_query()
            .filter(AvailabilitySlot.teacher_profile_id == teacher_profile_id)
            .order_by(AvailabilitySlot.day_of_week, AvailabilitySlot.start_time)
        )
        return cast(List[AvailabilitySlot], self._execute_query(query))
