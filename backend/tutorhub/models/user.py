# backend/tutorhub/models/user.py
"""
User model for the TutorHub platform.

Users are owned by the external identity provider. The application keeps a
local mirror row per identity (id, email, display name, role) so that
bookings, profiles, reviews and conversations can reference them.

Classes:
    User: Local mirror of an identity-provider account
"""

import logging

from sqlalchemy import CheckConstraint, Column, String
from sqlalchemy.orm import relationship
import ulid

from ..core.enums import RoleName
from ..database import Base
from .types import UTCDateTime, utc_now

logger = logging.getLogger(__name__)


class User(Base):
    """
    Account mirrored from the identity provider.

    Attributes:
        id: ULID primary key (same id the identity provider issues)
        email: Unique email address, used as the payer contact for payments
        name: Display name
        role: Either "parent" or "teacher"
        created_at: When the mirror row was first written

    Relationships:
        teacher_profile: One-to-one with TeacherProfile (teachers only)
    """

    __tablename__ = "users"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=RoleName.PARENT.value)
    created_at = Column(UTCDateTime, nullable=False, default=utc_now)

    teacher_profile = relationship("TeacherProfile", back_populates="user", uselist=False)

    __table_args__ = (
        CheckConstraint("role IN ('parent', 'teacher')", name="ck_users_role"),
    )

    def __repr__(self) -> str:
        return f"<User {self.id}: {self.email} ({self.role})>"

    @property
    def is_teacher(self) -> bool:
        return self.role == RoleName.TEACHER.value

    @property
    def is_parent(self) -> bool:
        return self.role == RoleName.PARENT.value
