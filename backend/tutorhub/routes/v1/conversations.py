# backend/tutorhub/routes/v1/conversations.py
"""
Conversations routes - API v1

Versioned conversation endpoints under /api/v1/conversations.
All business logic delegated to ConversationService.

Endpoints:
    GET /                               -> List user's conversations
    POST /                              -> Create/get conversation with a teacher
    GET /unread-count                   -> Total unread messages for the caller
    GET /{conversation_id}              -> Get conversation details
    GET /{conversation_id}/messages     -> Get messages, newest first
    POST /{conversation_id}/messages    -> Send a message
    POST /{conversation_id}/read        -> Mark the other party's messages read
"""

import asyncio
from datetime import datetime
import logging
from typing import NoReturn, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Response, status
from fastapi.params import Path

from ...api.dependencies.auth import get_acting_user
from ...api.dependencies.services import get_conversation_service
from ...core.constants import DEFAULT_MESSAGE_PAGE_SIZE, MAX_MESSAGE_PAGE_SIZE, ULID_PATH_PATTERN
from ...core.exceptions import DomainException
from ...principal import ActingUser
from ...schemas.conversation import (
    ConversationListItem,
    ConversationListResponse,
    ConversationResponse,
    CreateConversationRequest,
    CreateConversationResponse,
    MarkReadResponse,
    MessageResponse,
    MessagesResponse,
    SendMessageRequest,
    UnreadCountResponse,
)
from ...services.conversation_service import ConversationService, validate_message_content

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["conversations-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


# =============================================================================
# Conversation List Endpoints
# =============================================================================


@router.get("", response_model=ConversationListResponse)
async def list_conversations(
    limit: int = Query(50, ge=1, le=100),
    current_user: ActingUser = Depends(get_acting_user),
    service: ConversationService = Depends(get_conversation_service),
) -> ConversationListResponse:
    """Inbox for the caller, most recent activity first."""
    try:
        summaries = await asyncio.to_thread(service.list_conversations, current_user, limit=limit)
        items = [ConversationListItem.from_summary(s) for s in summaries]
        return ConversationListResponse(conversations=items, total=len(items))
    except DomainException as e:
        handle_domain_exception(e)


@router.post(
    "",
    response_model=CreateConversationResponse,
    responses={201: {"description": "Conversation created"}},
)
async def create_conversation(
    response: Response,
    request: CreateConversationRequest = Body(...),
    current_user: ActingUser = Depends(get_acting_user),
    service: ConversationService = Depends(get_conversation_service),
) -> CreateConversationResponse:
    """
    Get or create the caller's conversation with a teacher.

    Returns 201 when a new conversation was created and 200 when an existing
    one was returned. An initial message, if given, is sent either way.
    """
    try:
        if request.initial_message is not None:
            validate_message_content(request.initial_message)
        teacher_user_id = request.teacher_id
        if request.teacher_profile_id:
            teacher_user_id = await asyncio.to_thread(
                service.resolve_teacher_user_id, request.teacher_profile_id
            )
        conversation, created = await asyncio.to_thread(
            service.open_conversation_with_teacher, current_user, teacher_user_id or ""
        )
        message = None
        if request.initial_message:
            message = await asyncio.to_thread(
                service.send_message, conversation.id, current_user, request.initial_message
            )

        if created:
            response.status_code = status.HTTP_201_CREATED
        return CreateConversationResponse(
            conversation=ConversationResponse.model_validate(conversation),
            created=created,
            message=MessageResponse.model_validate(message) if message is not None else None,
        )
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/unread-count", response_model=UnreadCountResponse)
async def get_unread_count(
    current_user: ActingUser = Depends(get_acting_user),
    service: ConversationService = Depends(get_conversation_service),
) -> UnreadCountResponse:
    count = await asyncio.to_thread(service.get_unread_count, current_user)
    return UnreadCountResponse(unread_count=count)


# =============================================================================
# Single Conversation Endpoints
# =============================================================================


@router.get("/{conversation_id}", response_model=ConversationResponse)
async def get_conversation(
    conversation_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    current_user: ActingUser = Depends(get_acting_user),
    service: ConversationService = Depends(get_conversation_service),
) -> ConversationResponse:
    try:
        conversation = await asyncio.to_thread(
            service.get_conversation, conversation_id, current_user
        )
        return ConversationResponse.model_validate(conversation)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{conversation_id}/messages", response_model=MessagesResponse)
async def get_messages(
    conversation_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    limit: int = Query(DEFAULT_MESSAGE_PAGE_SIZE, ge=1, le=MAX_MESSAGE_PAGE_SIZE),
    before: Optional[datetime] = Query(None, description="Only messages older than this"),
    current_user: ActingUser = Depends(get_acting_user),
    service: ConversationService = Depends(get_conversation_service),
) -> MessagesResponse:
    try:
        messages = await asyncio.to_thread(
            service.get_messages, conversation_id, current_user, before=before, limit=limit
        )
        return MessagesResponse(
            messages=[MessageResponse.model_validate(m) for m in messages],
            has_more=len(messages) == limit,
        )
    except DomainException as e:
        handle_domain_exception(e)


@router.post(
    "/{conversation_id}/messages",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def send_message(
    conversation_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    request: SendMessageRequest = Body(...),
    current_user: ActingUser = Depends(get_acting_user),
    service: ConversationService = Depends(get_conversation_service),
) -> MessageResponse:
    try:
        message = await asyncio.to_thread(
            service.send_message, conversation_id, current_user, request.content
        )
        return MessageResponse.model_validate(message)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{conversation_id}/read", response_model=MarkReadResponse)
async def mark_as_read(
    conversation_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    current_user: ActingUser = Depends(get_acting_user),
    service: ConversationService = Depends(get_conversation_service),
) -> MarkReadResponse:
    try:
        count = await asyncio.to_thread(service.mark_as_read, conversation_id, current_user)
        return MarkReadResponse(marked_count=count)
    except DomainException as e:
        handle_domain_exception(e)
