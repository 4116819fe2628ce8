# backend/tutorhub/models/booking.py
"""
Booking model for the TutorHub platform.

A booking is a request by a parent for a paid session with a teacher over an
absolute time interval. Bookings start out pending, are confirmed by the
teacher, and end either cancelled or completed. Rows are never deleted.

The price is fixed when the booking is created and never re-derived from the
teacher's current rate. The ``version`` column is the optimistic lock counter
SQLAlchemy checks on every UPDATE.
"""

from datetime import datetime, timezone
from enum import Enum
import logging
from typing import Any, Optional

from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship
import ulid

from ..database import Base
from .types import UTCDateTime, utc_now

logger = logging.getLogger(__name__)


class BookingStatus(str, Enum):
    """Booking lifecycle statuses."""

    PENDING = "pending"  # Awaiting teacher confirmation
    CONFIRMED = "confirmed"  # Blocks the teacher's calendar
    CANCELLED = "cancelled"  # Terminal
    COMPLETED = "completed"  # Terminal, unlocks reviews


class PaymentStatus(str, Enum):
    """Payment state tracked alongside the booking status."""

    PENDING = "pending"
    PAID = "paid"
    REFUNDED = "refunded"


TERMINAL_STATUSES = frozenset({BookingStatus.CANCELLED, BookingStatus.COMPLETED})


class Booking(Base):
    """
    Paid session between a parent and a teacher.

    Attributes:
        teacher_profile_id: The booked teacher's profile
        parent_id: The parent user who requested the booking
        start_time / end_time: Absolute UTC interval, start strictly before end
        price: Cents, fixed at creation
        payment_intent_id: Authorization id from the payment processor, if any
        version: Optimistic lock counter
    """

    __tablename__ = "bookings"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))

    teacher_profile_id = Column(
        String(26), ForeignKey("teacher_profiles.id"), nullable=False, index=True
    )
    parent_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    subject_id = Column(String(26), ForeignKey("subjects.id"), nullable=True)

    start_time = Column(UTCDateTime, nullable=False)
    end_time = Column(UTCDateTime, nullable=False)
    notes = Column(Text, nullable=True)

    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value, index=True)
    payment_status = Column(String(20), nullable=False, default=PaymentStatus.PENDING.value)
    price = Column(Integer, nullable=False, comment="Cents, fixed at creation")

    # Payment processor references
    payment_intent_id = Column(String(255), nullable=True, comment="Payment authorization id")
    refund_id = Column(String(255), nullable=True)

    # Lifecycle tracking
    confirmed_at = Column(UTCDateTime, nullable=True)
    completed_at = Column(UTCDateTime, nullable=True)
    cancelled_at = Column(UTCDateTime, nullable=True)
    cancelled_by_id = Column(String(26), ForeignKey("users.id"), nullable=True)

    created_at = Column(UTCDateTime, nullable=False, default=utc_now)
    updated_at = Column(UTCDateTime, nullable=False, default=utc_now, onupdate=utc_now)

    version = Column(Integer, nullable=False, default=1)

    # Relationships
    teacher_profile = relationship("TeacherProfile", lazy="joined")
    parent = relationship("User", foreign_keys=[parent_id])
    subject = relationship("Subject")
    cancelled_by = relationship("User", foreign_keys=[cancelled_by_id])
    review = relationship("Review", back_populates="booking", uselist=False)

    __mapper_args__ = {"version_id_col": version}

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'cancelled', 'completed')",
            name="ck_bookings_status",
        ),
        CheckConstraint(
            "payment_status IN ('pending', 'paid', 'refunded')",
            name="ck_bookings_payment_status",
        ),
        CheckConstraint("start_time < end_time", name="check_time_order"),
        CheckConstraint("price >= 0", name="check_price_non_negative"),
        Index("idx_bookings_teacher_status_start", "teacher_profile_id", "status", "start_time"),
    )

    def __repr__(self) -> str:
        return (
            f"<Booking {self.id}: parent={self.parent_id}, "
            f"teacher={self.teacher_profile_id}, {self.start_time}-{self.end_time}, "
            f"status={self.status}>"
        )

    def confirm(self, at: Optional[datetime] = None) -> None:
        """Mark this booking as confirmed by the teacher."""
        self.status = BookingStatus.CONFIRMED.value
        self.confirmed_at = at or datetime.now(timezone.utc)
        logger.info(f"Booking {self.id} confirmed")

    def cancel(self, cancelled_by_user_id: str, at: Optional[datetime] = None) -> None:
        """Cancel this booking."""
        self.status = BookingStatus.CANCELLED.value
        self.cancelled_at = at or datetime.now(timezone.utc)
        self.cancelled_by_id = cancelled_by_user_id
        logger.info(f"Booking {self.id} cancelled by user {cancelled_by_user_id}")

    def complete(self, at: Optional[datetime] = None) -> None:
        """Mark booking as completed."""
        self.status = BookingStatus.COMPLETED.value
        self.completed_at = at or datetime.now(timezone.utc)
        logger.info(f"Booking {self.id} marked as completed")

    @property
    def is_terminal(self) -> bool:
        return BookingStatus(self.status) in TERMINAL_STATUSES

    @property
    def duration_minutes(self) -> int:
        return int((self.end_time - self.start_time).total_seconds() // 60)

    def is_party(self, user_id: str) -> bool:
        teacher_user_id = self.teacher_profile.user_id if self.teacher_profile else None
        return user_id in (self.parent_id, teacher_user_id)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logs and action results."""
        return {
            "id": self.id,
            "teacher_profile_id": self.teacher_profile_id,
            "parent_id": self.parent_id,
            "subject_id": self.subject_id,
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "status": self.status,
            "payment_status": self.payment_status,
            "price": self.price,
            "payment_intent_id": self.payment_intent_id,
        }
