# backend/tutorhub/models/teacher.py
"""
Teacher profile and subject catalog models for the TutorHub platform.

A TeacherProfile extends a teacher User with marketplace attributes: bio,
qualifications, experience, hourly rate and whether new students are
accepted. Subjects form a small shared catalog; TeacherSubject links a
profile to the subjects it teaches.
"""

import logging

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
import ulid

from ..database import Base
from .types import UTCDateTime, utc_now

logger = logging.getLogger(__name__)


class TeacherProfile(Base):
    """
    Model representing a teacher's marketplace profile.

    Attributes:
        id: ULID primary key
        user_id: Foreign key to users table (one-to-one relationship)
        bio: Professional biography
        qualifications: Degrees, certifications and similar
        years_of_experience: Years of teaching experience
        profile_picture: Optional picture URL
        hourly_rate: Price per hour in cents
        is_available_for_new_students: Gate checked before any booking is created

    Business Rules:
        - Each user can have at most one teacher profile
        - Profiles are never hard-deleted (bookings reference them)
    """

    __tablename__ = "teacher_profiles"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    user_id = Column(
        String(26),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    bio = Column(Text, nullable=False)
    qualifications = Column(Text, nullable=False)
    years_of_experience = Column(Integer, nullable=False, default=0)
    profile_picture = Column(String(512), nullable=True)
    hourly_rate = Column(Integer, nullable=False, comment="Cents per hour")
    is_available_for_new_students = Column(Boolean, nullable=False, default=True)

    created_at = Column(UTCDateTime, nullable=False, default=utc_now)
    updated_at = Column(UTCDateTime, nullable=False, default=utc_now, onupdate=utc_now)

    user = relationship("User", back_populates="teacher_profile", lazy="joined")
    subjects = relationship(
        "Subject",
        secondary="teacher_subjects",
        lazy="selectin",
        order_by="Subject.name",
    )
    availability_slots = relationship(
        "AvailabilitySlot",
        back_populates="teacher_profile",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint("hourly_rate > 0", name="ck_teacher_profiles_rate_positive"),
        CheckConstraint(
            "years_of_experience >= 0", name="ck_teacher_profiles_years_non_negative"
        ),
        Index("idx_teacher_profiles_accepting", "is_available_for_new_students"),
    )

    def __repr__(self) -> str:
        return f"<TeacherProfile {self.id}: user={self.user_id}, rate={self.hourly_rate}>"

    @property
    def display_name(self) -> str:
        return self.user.name if self.user is not None else ""


class Subject(Base):
    """A subject that teachers can offer, optionally scoped to an age range."""

    __tablename__ = "subjects"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    name = Column(String(100), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    age_group_start = Column(Integer, nullable=True)
    age_group_end = Column(Integer, nullable=True)

    def __repr__(self) -> str:
        return f"<Subject {self.id}: {self.name}>"


class TeacherSubject(Base):
    """Link between a teacher profile and a subject it teaches."""

    __tablename__ = "teacher_subjects"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    teacher_profile_id = Column(
        String(26), ForeignKey("teacher_profiles.id", ondelete="CASCADE"), nullable=False
    )
    subject_id = Column(String(26), ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False)

    __table_args__ = (
        UniqueConstraint("teacher_profile_id", "subject_id", name="uq_teacher_subjects_pair"),
        Index("idx_teacher_subjects_subject", "subject_id"),
    )
