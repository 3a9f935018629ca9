"""
ENTITIES - Business objects with identity

Each entity:
- Has a unique identifier
- Has behavior (methods)
- Can change state over time
- Pure Python dataclasses (no ORM, no Pydantic)
"""

from intellitutor.domain.entities.conversation import Conversation
from intellitutor.domain.entities.message import Message, MessageRole

__all__ = [
    "Conversation",
    "Message",
    "MessageRole",
]
