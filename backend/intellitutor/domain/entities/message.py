"""
Message Entity - A single turn in a conversation.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from intellitutor.domain.value_objects.message_id import MessageId
from intellitutor.domain.value_objects.conversation_id import ConversationId


class MessageRole:
    USER = "user"
    ASSISTANT = "assistant"
    # Only ever sent to the model, never persisted
    SYSTEM = "system"

    PERSISTED = (USER, ASSISTANT)


@dataclass(frozen=True)
class Message:
    id: MessageId
    conversation_id: ConversationId
    role: str
    content: str
    created_at: datetime

    def __post_init__(self):
        if self.role not in MessageRole.PERSISTED:
            raise ValueError(f"Invalid role: {self.role}")

    @classmethod
    def create(
        cls,
        conversation_id: ConversationId,
        role: str,
        content: str,
        created_at: Optional[datetime] = None,
    ) -> Message:
        """Factory method to create a new Message with a generated ID and timestamp."""
        return cls(
            id=MessageId.generate(),
            conversation_id=conversation_id,
            role=role,
            content=content,
            created_at=created_at or datetime.now(timezone.utc),
        )

    def as_chat_turn(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}
