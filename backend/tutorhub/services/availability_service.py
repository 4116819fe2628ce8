# backend/tutorhub/services/availability_service.py
"""
Availability Service for the TutorHub platform.

Manages a teacher's weekly availability slots. Slots are informational:
bookings never reference or consume them, so editing a slot never touches
existing bookings.

Times are stored as zero-padded "HH:MM" strings so that plain string
comparison orders them correctly.
"""

import logging
import re
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.constants import DAYS_OF_WEEK, TIME_OF_DAY_PATTERN
from ..core.exceptions import NotFoundException, PermissionDeniedException, ValidationException
from ..models.availability import AvailabilitySlot
from ..models.teacher import TeacherProfile
from ..principal import ActingUser
from ..repositories.factory import RepositoryFactory
from ..schemas.availability import AvailabilitySlotCreate, AvailabilitySlotUpdate
from .base import BaseService, Clock

logger = logging.getLogger(__name__)

_TIME_RE = re.compile(TIME_OF_DAY_PATTERN)


def normalize_time(value: str, field: str = "time") -> str:
    """Validate a 24-hour "H:MM"/"HH:MM" string and return it zero-padded."""
    candidate = (value or "").strip()
    if not _TIME_RE.match(candidate):
        raise ValidationException(
            f"Invalid {field} format: {value!r}. Expected HH:MM (24-hour).",
            details={"field": field},
        )
    hour, minute = candidate.split(":")
    return f"{int(hour):02d}:{minute}"


def validate_day_of_week(day: int) -> int:
    if isinstance(day, bool) or not isinstance(day, int) or not 0 <= day < len(DAYS_OF_WEEK):
        raise ValidationException(
            "day_of_week must be between 0 (Sunday) and 6 (Saturday)",
            details={"field": "day_of_week"},
        )
    return day


def validate_time_order(start_time: str, end_time: str) -> None:
    if start_time >= end_time:
        raise ValidationException(
            "Start time must be before end time",
            details={"start_time": start_time, "end_time": end_time},
        )


class AvailabilityService(BaseService):
    """
    Service layer for availability slot operations.

    Only the owning teacher may add, change or remove a slot; anyone may
    read a teacher's slots.
    """

    def __init__(self, db: Session, clock: Optional[Clock] = None):
        super().__init__(db, clock=clock)
        self.repository = RepositoryFactory.create_availability_repository(db)
        self.profile_repository = RepositoryFactory.create_teacher_profile_repository(db)

    def _own_profile(self, actor: ActingUser) -> TeacherProfile:
        if not actor.is_teacher:
            raise PermissionDeniedException("Only teachers can manage availability")
        profile = self.profile_repository.get_by_user_id(actor.id)
        if profile is None:
            raise NotFoundException("Teacher profile not found")
        return profile

    def _own_slot(self, actor: ActingUser, slot_id: str) -> AvailabilitySlot:
        slot = self.repository.get_by_id(slot_id)
        if slot is None:
            raise NotFoundException("Availability slot not found")
        profile = self._own_profile(actor)
        if slot.teacher_profile_id != profile.id:
            raise PermissionDeniedException("You can only modify your own availability")
        return slot

    @BaseService.measure_operation("list_slots")
    def list_slots(self, teacher_profile_id: str) -> List[AvailabilitySlot]:
        """Slots for a teacher ordered by day then start time."""
        if self.profile_repository.get_by_id(teacher_profile_id, load_relationships=False) is None:
            raise NotFoundException("Teacher profile not found")
        return self.repository.get_teacher_slots(teacher_profile_id)

    @BaseService.measure_operation("list_own_slots")
    def list_own_slots(self, actor: ActingUser) -> List[AvailabilitySlot]:
        profile = self._own_profile(actor)
        return self.repository.get_teacher_slots(profile.id)

    @BaseService.measure_operation("add_slot")
    def add_slot(self, actor: ActingUser, data: AvailabilitySlotCreate) -> AvailabilitySlot:
        """
        Add a weekly slot for the acting teacher.

        Raises:
            ValidationException: Bad day, bad time format or start not before end
            PermissionDeniedException: Actor is not a teacher
        """
        day = validate_day_of_week(data.day_of_week)
        start = normalize_time(data.start_time, "start_time")
        end = normalize_time(data.end_time, "end_time")
        validate_time_order(start, end)
        profile = self._own_profile(actor)

        with self.transaction():
            slot = self.repository.create(
                teacher_profile_id=profile.id,
                day_of_week=day,
                start_time=start,
                end_time=end,
                is_recurring=data.is_recurring,
            )

        self.log_operation("add_slot", slot_id=slot.id, teacher_profile_id=profile.id, day=day)
        return slot

    @BaseService.measure_operation("update_slot")
    def update_slot(
        self, actor: ActingUser, slot_id: str, data: AvailabilitySlotUpdate
    ) -> AvailabilitySlot:
        """Apply a partial update; the resulting slot must still satisfy start < end."""
        slot = self._own_slot(actor, slot_id)

        day = slot.day_of_week if data.day_of_week is None else validate_day_of_week(data.day_of_week)
        start = (
            slot.start_time if data.start_time is None else normalize_time(data.start_time, "start_time")
        )
        end = slot.end_time if data.end_time is None else normalize_time(data.end_time, "end_time")
        validate_time_order(start, end)

        with self.transaction():
            slot.day_of_week = day
            slot.start_time = start
            slot.end_time = end
            if data.is_recurring is not None:
                slot.is_recurring = data.is_recurring
            self.repository.flush()

        self.log_operation("update_slot", slot_id=slot.id)
        return slot

    @BaseService.measure_operation("delete_slot")
    def delete_slot(self, actor: ActingUser, slot_id: str) -> None:
        slot = self._own_slot(actor, slot_id)
        with self.transaction():
            self.repository.delete(slot.id)
        self.log_operation("delete_slot", slot_id=slot_id)
