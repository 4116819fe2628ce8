# backend/tutorhub/repositories/conversation_repository.py
"""
Conversation Repository for the TutorHub platform

One conversation per parent-teacher pair. ``get_or_create`` is idempotent:
the insert runs inside a savepoint and, if a concurrent writer won the race
on the unique pair constraint, the existing row is re-read.
"""

import logging
from typing import List, Optional, Tuple, cast

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.conversation import Conversation
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ConversationRepository(BaseRepository[Conversation]):
    """Repository for conversation data access."""

    def __init__(self, db: Session):
        super().__init__(db, Conversation)

    def find_by_pair(self, parent_id: str, teacher_id: str) -> Optional[Conversation]:
        try:
            return cast(
                Optional[Conversation],
                self._build_query()
                .filter(Conversation.parent_id == parent_id, Conversation.teacher_id == teacher_id)
                .first(),
            )
        except Exception as e:
            self.logger.error(f"Error finding conversation by pair: {str(e)}")
            raise RepositoryException(f"Failed to find conversation: {str(e)}")

    def get_or_create(self, parent_id: str, teacher_id: str) -> Tuple[Conversation, bool]:
        """
        Get an existing conversation or create a new one.

        Args:
            parent_id: The parent's user ID
            teacher_id: The teacher's user ID

        Returns:
            Tuple of (conversation, created) where created is True if new
        """
        existing = self.find_by_pair(parent_id, teacher_id)
        if existing:
            return existing, False

        try:
            with self.db.begin_nested():
                conversation = Conversation(parent_id=parent_id, teacher_id=teacher_id)
                self.db.add(conversation)
                self.db.flush()
            return conversation, True
        except IntegrityError:
            self.logger.info(
                "Conversation insert lost a race, re-reading",
                extra={"parent_id": parent_id, "teacher_id": teacher_id},
            )
            existing = self.find_by_pair(parent_id, teacher_id)
            if existing is None:
                raise RepositoryException("Conversation vanished after unique violation")
            return existing, False

    def find_for_user(self, user_id: str, limit: int = 50) -> List[Conversation]:
        """Conversations where a user is a participant, most recent activity first."""
        query = (
            self._build_query()
            .filter(or_(Conversation.parent_id == user_id, Conversation.teacher_id == user_id))
            .order_by(Conversation.updated_at.desc())
            .limit(limit)
        )
        return cast(List[Conversation], self._execute_query(query))
