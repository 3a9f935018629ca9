"""
In-Memory Conversation Store.

Implements the ConversationStore port with plain dicts. Used for local
development (STORE_BACKEND=memory) and tests.

- Every mutation runs under one asyncio.Lock so a message insert and the
  parent's updated_at stamp are observed together.
- Messages live in a per-conversation list, so insertion order is the replay
  order; deleting the conversation drops the list in the same step.
- Entities are copied on the way out so callers cannot mutate stored state.
"""

import asyncio
import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Optional

from intellitutor.config.settings import Config
from intellitutor.domain.entities.conversation import Conversation
from intellitutor.domain.entities.message import Message
from intellitutor.domain.exceptions import AccessDeniedError, EntityNotFoundError
from intellitutor.domain.ports.repositories import ConversationStore
from intellitutor.domain.value_objects.conversation_id import ConversationId
from intellitutor.domain.value_objects.user_id import UserId

logger = logging.getLogger(__name__)


class InMemoryConversationStore(ConversationStore):
    def __init__(self):
        self._conversations: dict[str, Conversation] = {}
        self._messages: dict[str, list[Message]] = {}
        self._lock = asyncio.Lock()

    def _require(self, conversation_id: ConversationId) -> Conversation:
        conversation = self._conversations.get(conversation_id.value)
        if conversation is None:
            raise EntityNotFoundError(f"Conversation {conversation_id.value} not found")
        return conversation

    def _require_owned(
        self, conversation_id: ConversationId, requester_id: UserId
    ) -> Conversation:
        conversation = self._require(conversation_id)
        if not conversation.is_owned_by(requester_id):
            raise AccessDeniedError("User does not own this conversation.")
        return conversation

    async def create_conversation(
        self, owner_id: UserId, title: Optional[str] = None
    ) -> Conversation:
        if not title or not title.strip():
            title = Config.DEFAULT_CONVERSATION_TITLE
        conversation = Conversation.create(user_id=owner_id, title=title.strip())
        async with self._lock:
            self._conversations[conversation.id.value] = conversation
            self._messages[conversation.id.value] = []
        return replace(conversation)

    async def list_conversations(
        self, owner_id: UserId, limit: Optional[int] = None
    ) -> list[Conversation]:
        owned = [
            conv
            for conv in self._conversations.values()
            if conv.is_owned_by(owner_id)
        ]
        owned.sort(key=lambda conv: conv.updated_at, reverse=True)
        if limit is not None:
            owned = owned[:limit]
        return [replace(conv) for conv in owned]

    async def get_conversation(
        self, conversation_id: ConversationId, requester_id: UserId
    ) -> Conversation:
        return replace(self._require_owned(conversation_id, requester_id))

    async def append_message(
        self, conversation_id: ConversationId, role: str, content: str
    ) -> Message:
        async with self._lock:
            conversation = self._require(conversation_id)
            now = datetime.now(timezone.utc)
            message = Message.create(
                conversation_id=conversation_id,
                role=role,
                content=content,
                created_at=now,
            )
            self._messages[conversation_id.value].append(message)
            conversation.touch(now)
        return message

    async def rename_conversation(
        self, conversation_id: ConversationId, new_title: str
    ) -> None:
        async with self._lock:
            self._require(conversation_id).rename(new_title)

    async def delete_conversation(
        self, conversation_id: ConversationId, requester_id: UserId
    ) -> None:
        async with self._lock:
            self._require_owned(conversation_id, requester_id)
            del self._conversations[conversation_id.value]
            dropped = self._messages.pop(conversation_id.value, [])
        logger.debug(
            "Deleted conversation %s with %d messages",
            conversation_id.value,
            len(dropped),
        )

    async def list_messages(
        self, conversation_id: ConversationId, requester_id: UserId
    ) -> list[Message]:
        self._require_owned(conversation_id, requester_id)
        return list(self._messages[conversation_id.value])
