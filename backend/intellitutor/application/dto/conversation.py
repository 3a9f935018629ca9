"""Conversation DTOs for API request/response."""

from pydantic import BaseModel
from datetime import datetime

from intellitutor.domain.entities.conversation import Conversation


class ConversationDTO(BaseModel):
    """Conversation metadata only; messages are fetched separately."""

    id: str
    title: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, conversation: Conversation) -> "ConversationDTO":
        return cls(
            id=conversation.id.value,
            title=conversation.title,
            created_at=conversation.created_at,
            updated_at=conversation.updated_at,
        )
