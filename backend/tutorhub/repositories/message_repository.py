# backend/tutorhub/repositories/message_repository.py
"""
Message Repository for the TutorHub platform

Append-only message storage with bulk read-flag updates.
"""

from datetime import datetime
import logging
from typing import Dict, List, Optional, Sequence, cast

from sqlalchemy import and_, func, or_, update
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.conversation import Conversation
from ..models.message import Message
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class MessageRepository(BaseRepository[Message]):
    """Repository for message data access."""

    def __init__(self, db: Session):
        super().__init__(db, Message)

    def find_by_conversation(
        self,
        conversation_id: str,
        limit: int = 20,
        before: Optional[datetime] = None,
    ) -> List[Message]:
        """Messages of a conversation, newest first, optionally older than ``before``."""
        query = self._build_query().filter(Message.conversation_id == conversation_id)
        if before is not None:
            query = query.filter(Message.created_at < before)
        query = query.order_by(Message.created_at.desc(), Message.id.desc()).limit(limit)
        return cast(List[Message], self._execute_query(query))

    def mark_conversation_read(self, conversation_id: str, reader_id: str) -> int:
        """
        Flip ``is_read`` on every unread message in the conversation not sent by the reader.

        Returns:
            Number of messages updated
        """
        try:
            result = self.db.execute(
                update(Message)
                .where(
                    and_(
                        Message.conversation_id == conversation_id,
                        Message.sender_id != reader_id,
                        Message.is_read.is_(False),
                    )
                )
                .values(is_read=True)
                .execution_options(synchronize_session="fetch")
            )
            return int(result.rowcount or 0)
        except Exception as e:
            self.logger.error(f"Error marking messages read: {str(e)}")
            raise RepositoryException(f"Failed to mark messages read: {str(e)}")

    def get_unread_count_for_user(self, user_id: str) -> int:
        """Total unread messages addressed to a user across all their conversations."""
        try:
            return (
                self.db.query(func.count(Message.id))
                .join(Conversation, Conversation.id == Message.conversation_id)
                .filter(
                    or_(Conversation.parent_id == user_id, Conversation.teacher_id == user_id),
                    Message.sender_id != user_id,
                    Message.is_read.is_(False),
                )
                .scalar()
            ) or 0
        except Exception as e:
            self.logger.error(f"Error counting unread messages: {str(e)}")
            raise RepositoryException(f"Failed to count unread messages: {str(e)}")

    def get_unread_counts_by_conversation(
        self, conversation_ids: Sequence[str], user_id: str
    ) -> Dict[str, int]:
        if not conversation_ids:
            return {}
        rows = (
            self.db.query(Message.conversation_id, func.count(Message.id))
            .filter(
                Message.conversation_id.in_(list(conversation_ids)),
                Message.sender_id != user_id,
                Message.is_read.is_(False),
            )
            .group_by(Message.conversation_id)
            .all()
        )
        return {conversation_id: int(count) for conversation_id, count in rows}

    def get_last_message(self, conversation_id: str) -> Optional[Message]:
        latest = self.find_by_conversation(conversation_id, limit=1)
        return latest[0] if latest else None
