"""
Conversations API Router - FastAPI endpoints for conversations and messages.

- Receives handlers via Dependency Injection (Dishka)
- Thin layer: only handles HTTP concerns (request/response)
- Delegates business logic to Application layer handlers
- Missing and foreign conversations both answer 404 with the same body, so
  callers cannot probe for other users' conversation ids

Flow:
  HTTP Request → Router → Command → Handler → ConversationStore / ModelGateway
                                 ↓
  HTTP Response ← Router ← Result ←
"""

from logging import getLogger
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from dishka.integrations.fastapi import FromDishka, inject
from pydantic import BaseModel
from intellitutor.application.commands.chat import (
    SendMessageCommand,
    SendMessageHandler,
)
from intellitutor.application.commands.conversations import (
    CreateConversationCommand,
    CreateConversationHandler,
    DeleteConversationCommand,
    DeleteConversationHandler,
    UpdateTitleCommand,
    UpdateTitleHandler,
)
from intellitutor.application.queries.conversations import (
    ListConversationsQuery,
    ListConversationsHandler,
)
from intellitutor.application.queries.chat import (
    GetChatHistoryQuery,
    GetChatHistoryHandler,
)
from intellitutor.application.dto.chat import MessageDTO, SendMessageResponseDTO
from intellitutor.application.dto.conversation import ConversationDTO
from intellitutor.domain.exceptions import (
    AccessDeniedError,
    DomainValidationError,
    EntityNotFoundError,
)
from intellitutor.domain.value_objects.conversation_id import ConversationId
from intellitutor.presentation.dependencies.auth import AuthUser, get_current_user

logger = getLogger(__name__)

CONVERSATION_NOT_FOUND = "Conversation not found"


# ==================== REQUEST/RESPONSE MODELS ====================


class CreateConversationRequest(BaseModel):
    """Request body for creating a conversation."""

    title: Optional[str] = None


class UpdateConversationTitleRequest(BaseModel):
    title: str


class SendMessageRequest(BaseModel):
    content: str


class DeleteConversationResponse(BaseModel):
    """Response for deleted conversation."""

    success: bool


class GetConversationResponse(ConversationDTO):
    """Conversation metadata plus ordered messages."""

    messages: list[MessageDTO]


# ==================== HELPERS ====================


def conversation_not_found(cause: Optional[Exception] = None) -> HTTPException:
    if cause is not None:
        logger.info(f"Conversation lookup rejected: {cause}")
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND, detail=CONVERSATION_NOT_FOUND
    )


def parse_conversation_id(raw: str) -> ConversationId:
    """Path ids that are not UUIDs cannot name a conversation."""
    try:
        conversation_id = ConversationId(raw)
    except ValueError as e:
        raise conversation_not_found(e) from e
    if not conversation_id:
        raise conversation_not_found()
    return conversation_id


# ==================== ROUTER ====================

router = APIRouter(prefix="/conversations", tags=["conversations"])


# ==================== ENDPOINTS ====================


@router.post(
    "",
    response_model=ConversationDTO,
    status_code=status.HTTP_201_CREATED,
)
@inject
async def create_conversation(
    handler: FromDishka[CreateConversationHandler],
    request: Optional[CreateConversationRequest] = None,
    current_user: AuthUser = Depends(get_current_user),
):
    """Create a new, empty conversation."""
    try:
        command = CreateConversationCommand(
            user_id=current_user.id,
            title=request.title if request else None,
        )
        conversation = await handler.execute(command)
    except DomainValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from e

    return ConversationDTO.from_entity(conversation)


@router.get(
    "",
    response_model=list[ConversationDTO],
    status_code=status.HTTP_200_OK,
)
@inject
async def list_conversations(
    handler: FromDishka[ListConversationsHandler],
    limit: Optional[int] = Query(default=None, ge=1),
    current_user: AuthUser = Depends(get_current_user),
):
    """
    List the caller's conversations, most recently updated first.

    Every conversation is returned unless ?limit=N is given.
    """
    query = ListConversationsQuery(user_id=current_user.id, limit=limit)
    conversations = await handler.execute(query)
    return [ConversationDTO.from_entity(conv) for conv in conversations]


@router.get(
    "/{conversation_id}",
    response_model=GetConversationResponse,
    status_code=status.HTTP_200_OK,
)
@inject
async def get_conversation(
    conversation_id: str,
    handler: FromDishka[GetChatHistoryHandler],
    current_user: AuthUser = Depends(get_current_user),
):
    """Get conversation with messages."""
    try:
        query = GetChatHistoryQuery(
            conversation_id=parse_conversation_id(conversation_id),
            user_id=current_user.id,
        )
        result = await handler.execute(query)
    except (EntityNotFoundError, AccessDeniedError) as e:
        raise conversation_not_found(e) from e

    summary = ConversationDTO.from_entity(result.conversation)
    return GetConversationResponse(
        **summary.model_dump(),
        messages=[MessageDTO.from_entity(msg) for msg in result.messages],
    )


@router.patch(
    "/{conversation_id}",
    response_model=ConversationDTO,
    status_code=status.HTTP_200_OK,
)
@inject
async def update_conversation(
    conversation_id: str,
    request: UpdateConversationTitleRequest,
    handler: FromDishka[UpdateTitleHandler],
    current_user: AuthUser = Depends(get_current_user),
):
    """Rename a conversation. Request: {"title": "New title"}"""
    try:
        command = UpdateTitleCommand(
            conversation_id=parse_conversation_id(conversation_id),
            user_id=current_user.id,
            new_title=request.title,
        )
        updated_conversation = await handler.execute(command)
    except (EntityNotFoundError, AccessDeniedError) as e:
        raise conversation_not_found(e) from e
    except DomainValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from e

    return ConversationDTO.from_entity(updated_conversation)


@router.delete(
    "/{conversation_id}",
    response_model=DeleteConversationResponse,
    status_code=status.HTTP_200_OK,
)
@inject
async def delete_conversation(
    conversation_id: str,
    handler: FromDishka[DeleteConversationHandler],
    current_user: AuthUser = Depends(get_current_user),
):
    """Delete conversation by ID, together with all of its messages."""
    try:
        command = DeleteConversationCommand(
            conversation_id=parse_conversation_id(conversation_id),
            user_id=current_user.id,
        )
        success = await handler.execute(command)
    except (EntityNotFoundError, AccessDeniedError) as e:
        raise conversation_not_found(e) from e

    return DeleteConversationResponse(success=success)


@router.get(
    "/{conversation_id}/messages",
    response_model=list[MessageDTO],
    status_code=status.HTTP_200_OK,
)
@inject
async def list_messages(
    conversation_id: str,
    handler: FromDishka[GetChatHistoryHandler],
    current_user: AuthUser = Depends(get_current_user),
):
    """Ordered messages of a conversation, oldest first."""
    try:
        query = GetChatHistoryQuery(
            conversation_id=parse_conversation_id(conversation_id),
            user_id=current_user.id,
        )
        result = await handler.execute(query)
    except (EntityNotFoundError, AccessDeniedError) as e:
        raise conversation_not_found(e) from e

    return [MessageDTO.from_entity(msg) for msg in result.messages]


@router.post(
    "/{conversation_id}/messages",
    response_model=SendMessageResponseDTO,
    status_code=status.HTTP_200_OK,
)
@inject
async def send_message(
    conversation_id: str,
    request: SendMessageRequest,
    handler: FromDishka[SendMessageHandler],
    current_user: AuthUser = Depends(get_current_user),
):
    """
    Send a message and get the tutor's reply.

    Response: {"userMessage": {...}, "assistantMessage": {...}}
    A provider outage still answers 200, with the fallback text as the
    assistant message.
    """
    try:
        command = SendMessageCommand(
            conversation_id=parse_conversation_id(conversation_id),
            user_id=current_user.id,
            content=request.content,
        )
        result = await handler.execute(command)
    except DomainValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from e
    except (EntityNotFoundError, AccessDeniedError) as e:
        raise conversation_not_found(e) from e

    return SendMessageResponseDTO(
        user_message=MessageDTO.from_entity(result.user_message),
        assistant_message=MessageDTO.from_entity(result.assistant_message),
    )
