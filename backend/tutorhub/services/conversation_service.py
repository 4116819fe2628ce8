# backend/tutorhub/services/conversation_service.py
"""
Conversation Service for per-pair messaging.

Handles business logic for the conversation system including:
- Idempotent conversation creation per parent-teacher pair
- Sending messages with participant checks
- Bulk read receipts
- Inbox listing with last message and unread counts
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.constants import DEFAULT_MESSAGE_PAGE_SIZE, MAX_MESSAGE_LENGTH, MAX_MESSAGE_PAGE_SIZE
from ..core.exceptions import NotFoundException, PermissionDeniedException, ValidationException
from ..models.conversation import Conversation
from ..models.message import Message
from ..principal import ActingUser
from ..repositories.conversation_repository import ConversationRepository
from ..repositories.factory import RepositoryFactory
from ..repositories.message_repository import MessageRepository
from .base import BaseService, Clock

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversationSummary:
    conversation: Conversation
    last_message: Optional[Message]
    unread_count: int


def validate_message_content(content: Optional[str]) -> str:
    if content is None or not content.strip():
        raise ValidationException("Message cannot be empty")
    if len(content) > MAX_MESSAGE_LENGTH:
        raise ValidationException(
            f"Message is too long (maximum {MAX_MESSAGE_LENGTH} characters)",
            details={"length": len(content), "max_length": MAX_MESSAGE_LENGTH},
        )
    return content


class ConversationService(BaseService):
    """
    Service for managing per-pair conversations.

    Handles conversation creation, message sending, and
    related business logic with proper access control.
    """

    def __init__(
        self,
        db: Session,
        conversation_repository: Optional[ConversationRepository] = None,
        message_repository: Optional[MessageRepository] = None,
        clock: Optional[Clock] = None,
    ):
        """
        Initialize conversation service.

        Args:
            db: Database session
            conversation_repository: Optional repository for conversations
            message_repository: Optional repository for messages
            clock: Callable returning the current aware UTC datetime
        """
        super().__init__(db, clock=clock)
        self.conversation_repository = (
            conversation_repository or RepositoryFactory.create_conversation_repository(db)
        )
        self.message_repository = message_repository or RepositoryFactory.create_message_repository(
            db
        )
        self.teacher_profile_repository = RepositoryFactory.create_teacher_profile_repository(db)
        self.logger = logging.getLogger(__name__)

    @BaseService.measure_operation("get_or_create_conversation")
    def get_or_create_conversation(
        self,
        parent_id: str,
        teacher_id: str,
    ) -> Tuple[Conversation, bool]:
        """
        Get existing conversation or create new one.

        Args:
            parent_id: The parent's user ID
            teacher_id: The teacher's user ID

        Returns:
            Tuple of (conversation, created)
        """
        if parent_id == teacher_id:
            raise ValidationException("You cannot start a conversation with yourself")

        with self.transaction():
            conversation, created = self.conversation_repository.get_or_create(
                parent_id, teacher_id
            )

        if created:
            self.log_operation(
                "conversation_created",
                conversation_id=conversation.id,
                parent_id=parent_id,
                teacher_id=teacher_id,
            )
        return conversation, created

    @BaseService.measure_operation("open_conversation_with_teacher")
    def open_conversation_with_teacher(
        self, actor: ActingUser, teacher_user_id: str
    ) -> Tuple[Conversation, bool]:
        """Get or create the actor's conversation with a teacher, addressed by user id."""
        if not actor.is_parent:
            raise PermissionDeniedException("Only parents can start conversations with teachers")
        if self.teacher_profile_repository.get_by_user_id(teacher_user_id) is None:
            raise NotFoundException("Teacher not found")
        return self.get_or_create_conversation(actor.id, teacher_user_id)

    @BaseService.measure_operation("get_conversation")
    def get_conversation(self, conversation_id: str, actor: ActingUser) -> Conversation:
        """
        Load a conversation the actor takes part in.

        Raises:
            NotFoundException: Conversation not found
            PermissionDeniedException: Actor is not a participant
        """
        conversation = self.conversation_repository.get_by_id(conversation_id)
        if conversation is None:
            raise NotFoundException("Conversation not found")
        if not conversation.is_participant(actor.id):
            raise PermissionDeniedException("You do not have access to this conversation")
        return conversation

    @BaseService.measure_operation("send_message")
    def send_message(self, conversation_id: str, actor: ActingUser, content: str) -> Message:
        """
        Append a message and bump the conversation's last activity.

        Raises:
            ValidationException: Empty or over-long content
            NotFoundException: Conversation not found
            PermissionDeniedException: Sender is not a participant
        """
        content = validate_message_content(content)
        conversation = self.get_conversation(conversation_id, actor)

        now = self.now()
        with self.transaction():
            message = self.message_repository.create(
                conversation_id=conversation.id,
                sender_id=actor.id,
                content=content,
                is_read=False,
                created_at=now,
            )
            conversation.updated_at = now

        self.log_operation("send_message", conversation_id=conversation_id, sender_id=actor.id)
        return message

    @BaseService.measure_operation("mark_as_read")
    def mark_as_read(self, conversation_id: str, actor: ActingUser) -> int:
        """Mark the other participant's messages as read. Returns how many changed."""
        conversation = self.get_conversation(conversation_id, actor)
        with self.transaction():
            count = self.message_repository.mark_conversation_read(conversation.id, actor.id)
        return count

    @BaseService.measure_operation("list_conversations")
    def list_conversations(self, actor: ActingUser, limit: int = 50) -> List[ConversationSummary]:
        """Inbox for the actor, most recent activity first."""
        conversations = self.conversation_repository.find_for_user(actor.id, limit=limit)
        unread = self.message_repository.get_unread_counts_by_conversation(
            [c.id for c in conversations], actor.id
        )
        return [
            ConversationSummary(
                conversation=conversation,
                last_message=self.message_repository.get_last_message(conversation.id),
                unread_count=unread.get(conversation.id, 0),
            )
            for conversation in conversations
        ]

    @BaseService.measure_operation("get_messages")
    def get_messages(
        self,
        conversation_id: str,
        actor: ActingUser,
        before: Optional[datetime] = None,
        limit: int = DEFAULT_MESSAGE_PAGE_SIZE,
    ) -> List[Message]:
        """Messages of a conversation, newest first, paged by ``before``."""
        if limit < 1 or limit > MAX_MESSAGE_PAGE_SIZE:
            raise ValidationException(f"limit must be between 1 and {MAX_MESSAGE_PAGE_SIZE}")
        conversation = self.get_conversation(conversation_id, actor)
        return self.message_repository.find_by_conversation(
            conversation.id, limit=limit, before=before
        )

    @BaseService.measure_operation("get_unread_count")
    def get_unread_count(self, actor: ActingUser) -> int:
        return self.message_repository.get_unread_count_for_user(actor.id)

    @BaseService.measure_operation("start_teacher_conversation")
    def start_teacher_conversation(
        self, actor: ActingUser, teacher_profile_id: str, initial_message: str
    ) -> Tuple[Conversation, Message]:
        """
        Open (or reuse) the conversation with a teacher and send the first message.

        Raises:
            ValidationException: Empty or over-long message
            NotFoundException: Teacher profile not found
            PermissionDeniedException: Actor is not a parent
        """
        validate_message_content(initial_message)
        teacher_user_id = self.resolve_teacher_user_id(teacher_profile_id)

        conversation, _ = self.open_conversation_with_teacher(actor, teacher_user_id)
        message = self.send_message(conversation.id, actor, initial_message)
        return conversation, message

    def resolve_teacher_user_id(self, teacher_profile_id: str) -> str:
        profile = self.teacher_profile_repository.get_by_id(teacher_profile_id)
        if profile is None:
            raise NotFoundException("Teacher profile not found")
        return profile.user_id
