"""
Chat API Router - send a message, creating the conversation first if needed.

One request replaces the client-side "create conversation, then send" dance:
no conversation_id means the pipeline creates the conversation itself and
reports its id back.

Flow:
  HTTP Request → Router → SendMessageCommand → SendMessageHandler → ModelGateway
                                 ↓
  HTTP Response ← Router ← SendMessageResult ←
"""

from logging import getLogger
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status
from dishka.integrations.fastapi import FromDishka, inject
from pydantic import BaseModel, Field

from intellitutor.application.commands.chat import (
    SendMessageCommand,
    SendMessageHandler,
    SendMessageResult,
)
from intellitutor.application.dto.chat import MessageDTO, SendMessageResponseDTO
from intellitutor.domain.exceptions import (
    AccessDeniedError,
    DomainValidationError,
    EntityNotFoundError,
)
from intellitutor.domain.value_objects.conversation_id import ConversationId
from intellitutor.presentation.api.conversations import (
    conversation_not_found,
    parse_conversation_id,
)
from intellitutor.presentation.dependencies.auth import AuthUser, get_current_user

logger = getLogger(__name__)


# ==================== REQUEST/RESPONSE MODELS ====================


class ChatMessageRequest(BaseModel):
    """
    {
        "content": "What is photosynthesis?",
        "conversation_id": "uuid" or null
    }
    """

    content: str
    conversation_id: Optional[str] = None


class ChatMessageResponse(SendMessageResponseDTO):
    conversation_id: str = Field(serialization_alias="conversationId")


# ==================== ROUTER ====================

router = APIRouter(prefix="/chat", tags=["chat"])


# ==================== ENDPOINTS ====================


@router.post("", response_model=ChatMessageResponse)
@inject
async def chat(
    request: ChatMessageRequest,
    handler: FromDishka[SendMessageHandler],
    current_user: AuthUser = Depends(get_current_user),
):
    """Send a message to an existing conversation or start a new one."""
    try:
        conversation_id = (
            parse_conversation_id(request.conversation_id)
            if request.conversation_id
            else ConversationId("")
        )
        command = SendMessageCommand(
            conversation_id=conversation_id,
            user_id=current_user.id,
            content=request.content,
        )
        logger.debug(f"Executing SendMessageCommand for user {current_user.id.value}")
        result: SendMessageResult = await handler.execute(command)
    except DomainValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message) from e
    except (EntityNotFoundError, AccessDeniedError) as e:
        raise conversation_not_found(e) from e

    return ChatMessageResponse(
        conversation_id=result.conversation_id.value,
        user_message=MessageDTO.from_entity(result.user_message),
        assistant_message=MessageDTO.from_entity(result.assistant_message),
    )
