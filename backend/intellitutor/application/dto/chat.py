"""Chat DTOs for API request/response."""

from datetime import datetime
from pydantic import BaseModel, Field

from intellitutor.domain.entities.message import Message


class MessageDTO(BaseModel):
    """DTO for message data returned to frontend."""

    id: str
    conversation_id: str
    role: str
    content: str
    created_at: datetime

    @classmethod
    def from_entity(cls, message: Message) -> "MessageDTO":
        return cls(
            id=message.id.value,
            conversation_id=message.conversation_id.value,
            role=message.role,
            content=message.content,
            created_at=message.created_at,
        )


class SendMessageResponseDTO(BaseModel):
    """
    Both persisted turns of one exchange.

    {"userMessage": {...}, "assistantMessage": {...}}
    """

    user_message: MessageDTO = Field(serialization_alias="userMessage")
    assistant_message: MessageDTO = Field(serialization_alias="assistantMessage")
