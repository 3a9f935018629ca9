"""
Conversation Store Port - Interface for conversation and message persistence.

Implementations:
- intellitutor/infrastructure/persistence/prisma_conversation_store.py
- intellitutor/infrastructure/persistence/in_memory_conversation_store.py

Contract:
- Ownership-scoped operations take the requester id explicitly and raise
  EntityNotFoundError (missing) or AccessDeniedError (owned by someone else).
- append_message and rename_conversation stamp the conversation's updated_at
  in the same atomic write as the change itself.
- Messages come back in insertion order (oldest first).
- Engine failures surface as StorageError.
"""

from abc import ABC, abstractmethod
from typing import Optional

from intellitutor.domain.entities.conversation import Conversation
from intellitutor.domain.entities.message import Message
from intellitutor.domain.value_objects.conversation_id import ConversationId
from intellitutor.domain.value_objects.user_id import UserId


class ConversationStore(ABC):
    @abstractmethod
    async def create_conversation(
        self, owner_id: UserId, title: Optional[str] = None
    ) -> Conversation: ...

    @abstractmethod
    async def list_conversations(
        self, owner_id: UserId, limit: Optional[int] = None
    ) -> list[Conversation]:
        """Owner's conversations, most recently updated first. None = no cap."""

    @abstractmethod
    async def get_conversation(
        self, conversation_id: ConversationId, requester_id: UserId
    ) -> Conversation: ...

    @abstractmethod
    async def append_message(
        self, conversation_id: ConversationId, role: str, content: str
    ) -> Message: ...

    @abstractmethod
    async def rename_conversation(
        self, conversation_id: ConversationId, new_title: str
    ) -> None: ...

    @abstractmethod
    async def delete_conversation(
        self, conversation_id: ConversationId, requester_id: UserId
    ) -> None: ...

    @abstractmethod
    async def list_messages(
        self, conversation_id: ConversationId, requester_id: UserId
    ) -> list[Message]: ...
