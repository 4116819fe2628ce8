# backend/tutorhub/models/availability.py
"""
Weekly availability slots for teachers.

Slots describe when a teacher is generally available ("Mondays 15:00-17:00").
They are informational for parents choosing a time; bookings never own or
consume a slot.
"""

from sqlalchemy import Boolean, CheckConstraint, Column, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship
import ulid

from ..database import Base


class AvailabilitySlot(Base):
    """
    A recurring weekly window of availability.

    Attributes:
        day_of_week: 0 (Sunday) through 6 (Saturday)
        start_time: Zero-padded "HH:MM"
        end_time: Zero-padded "HH:MM", strictly after start_time
    """

    __tablename__ = "availability_slots"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    teacher_profile_id = Column(
        String(26), ForeignKey("teacher_profiles.id", ondelete="CASCADE"), nullable=False
    )
    day_of_week = Column(Integer, nullable=False)
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)
    is_recurring = Column(Boolean, nullable=False, default=True)

    teacher_profile = relationship("TeacherProfile", back_populates="availability_slots")

    __table_args__ = (
        CheckConstraint("day_of_week >= 0 AND day_of_week <= 6", name="ck_availability_day"),
        # Zero-padded HH:MM compares correctly as text
        CheckConstraint("start_time < end_time", name="ck_availability_time_order"),
        Index("idx_availability_teacher_day", "teacher_profile_id", "day_of_week"),
    )

    def __repr__(self) -> str:
        return (
            f"<AvailabilitySlot {self.id}: teacher={self.teacher_profile_id}, "
            f"day={self.day_of_week}, {self.start_time}-{self.end_time}>"
        )
