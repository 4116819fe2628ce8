# backend/tutorhub/models/conversation.py
"""
Conversation model for per-pair messaging.

Each parent-teacher pair has exactly one conversation regardless of how many
bookings they share. Messaging before any booking is supported.

Design decisions:
- One conversation per (parent, teacher) pair, enforced by a unique constraint
- ``teacher_id`` is the teacher's *user* id, not the profile id
- ``updated_at`` tracks last activity and orders the inbox
"""

from sqlalchemy import Column, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import relationship
import ulid

from ..database import Base
from .types import UTCDateTime, utc_now


class Conversation(Base):
    """
    Conversation between a parent and a teacher.

    Attributes:
        id: ULID primary key
        parent_id: Foreign key to the parent (User)
        teacher_id: Foreign key to the teacher (User)
        created_at: When the conversation was created
        updated_at: When the last message was sent
    """

    __tablename__ = "conversations"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    parent_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    teacher_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(UTCDateTime, nullable=False, default=utc_now)
    updated_at = Column(UTCDateTime, nullable=False, default=utc_now)

    parent = relationship("User", foreign_keys=[parent_id], lazy="joined")
    teacher = relationship("User", foreign_keys=[teacher_id], lazy="joined")
    messages = relationship(
        "Message",
        back_populates="conversation",
        order_by="Message.created_at",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        UniqueConstraint("parent_id", "teacher_id", name="uq_conversations_pair"),
        Index("idx_conversations_parent", "parent_id"),
        Index("idx_conversations_teacher", "teacher_id"),
        Index("idx_conversations_updated", "updated_at"),
    )

    def __repr__(self) -> str:
        return f"<Conversation(id={self.id}, parent={self.parent_id}, teacher={self.teacher_id})>"

    def get_other_user_id(self, current_user_id: str) -> str:
        """
        Get the ID of the other participant in the conversation.

        Args:
            current_user_id: The ID of the current user

        Returns:
            The ID of the other participant
        """
        if current_user_id == self.parent_id:
            return str(self.teacher_id)
        return str(self.parent_id)

    def is_participant(self, user_id: str) -> bool:
        return user_id in (self.parent_id, self.teacher_id)
