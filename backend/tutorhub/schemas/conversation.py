# backend/tutorhub/schemas/conversation.py
"""
Conversation and message schemas.

Conversations are addressed per parent-teacher pair; list items carry the
last message and the caller's unread count so the inbox renders in one call.
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import Field, model_validator

from .base import StandardizedModel, StrictRequestModel


class CreateConversationRequest(StrictRequestModel):
    """Open a conversation with a teacher, by user id or profile id, optionally with a first message."""

    teacher_id: Optional[str] = Field(None, description="Teacher's user id")
    teacher_profile_id: Optional[str] = Field(None, description="Teacher's profile id")
    initial_message: Optional[str] = None

    @model_validator(mode="after")
    def _one_target(self) -> "CreateConversationRequest":
        if bool(self.teacher_id) == bool(self.teacher_profile_id):
            raise ValueError("Provide exactly one of teacher_id or teacher_profile_id")
        return self


class SendMessageRequest(StrictRequestModel):
    content: str


class UserSummary(StandardizedModel):
    id: str
    name: str


class MessageResponse(StandardizedModel):
    id: str
    conversation_id: str
    sender_id: str
    content: str
    is_read: bool
    created_at: datetime


class ConversationResponse(StandardizedModel):
    id: str
    parent: UserSummary
    teacher: UserSummary
    created_at: datetime
    updated_at: datetime


class CreateConversationResponse(StandardizedModel):
    conversation: ConversationResponse
    created: bool
    message: Optional[MessageResponse] = None


class ConversationListItem(ConversationResponse):
    last_message: Optional[MessageResponse] = None
    unread_count: int = 0

    @classmethod
    def from_summary(cls, summary: Any) -> "ConversationListItem":
        item = cls.model_validate(summary.conversation)
        if summary.last_message is not None:
            item.last_message = MessageResponse.model_validate(summary.last_message)
        item.unread_count = summary.unread_count
        return item


class ConversationListResponse(StandardizedModel):
    conversations: List[ConversationListItem]
    total: int


class MessagesResponse(StandardizedModel):
    messages: List[MessageResponse]
    has_more: bool


class UnreadCountResponse(StandardizedModel):
    unread_count: int


class MarkReadResponse(StandardizedModel):
    marked_count: int
