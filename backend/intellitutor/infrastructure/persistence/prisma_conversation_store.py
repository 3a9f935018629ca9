"""
Prisma Conversation Store Implementation.

- Implements ConversationStore port from domain layer
- Uses Prisma client (PostgreSQL) for database operations
- Maps between Prisma models and domain entities
- All methods are async

Schema: prisma/schema.prisma
- Conversation: id, user_id, title, created_at, updated_at
- Message: id, seq (autoincrement), conversation_id, role, content, created_at
  with onDelete: Cascade on the conversation relation

Atomicity:
- append_message is ONE nested write on the conversation row: the message
  insert and the updated_at bump commit together.
- rename_conversation updates title and updated_at in one statement.
- delete relies on the cascade, so messages vanish with their conversation.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from prisma.errors import PrismaError

from intellitutor.config.settings import Config
from intellitutor.domain.entities.conversation import Conversation
from intellitutor.domain.entities.message import Message
from intellitutor.domain.exceptions import (
    AccessDeniedError,
    EntityNotFoundError,
    StorageError,
)
from intellitutor.domain.ports.repositories import ConversationStore
from intellitutor.domain.value_objects.conversation_id import ConversationId
from intellitutor.domain.value_objects.message_id import MessageId
from intellitutor.domain.value_objects.user_id import UserId

if TYPE_CHECKING:
    # generated by `prisma generate`
    from prisma import Prisma
    from prisma.models import Conversation as PrismaConversation
    from prisma.models import Message as PrismaMessage

logger = logging.getLogger(__name__)


@contextmanager
def _storage_errors(operation: str):
    """Re-raise Prisma engine/client failures as StorageError."""
    try:
        yield
    except PrismaError as e:
        logger.error(f"[Prisma] {operation} failed: {e}")
        raise StorageError(f"{operation} failed") from e


class PrismaConversationStore(ConversationStore):
    _prisma: Prisma

    def __init__(self, prisma: Prisma):
        self._prisma = prisma

    def _to_conversation(self, record: PrismaConversation) -> Conversation:
        """Map Prisma record to domain entity."""
        return Conversation(
            id=ConversationId(record.id),
            user_id=UserId(record.user_id),
            title=record.title,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )

    def _to_message(self, record: PrismaMessage) -> Message:
        return Message(
            id=MessageId(record.id),
            conversation_id=ConversationId(record.conversation_id),
            role=record.role,
            content=record.content,
            created_at=record.created_at,
        )

    async def _find_owned(
        self, conversation_id: ConversationId, requester_id: UserId
    ) -> PrismaConversation:
        with _storage_errors("get conversation"):
            record = await self._prisma.conversation.find_unique(
                where={"id": conversation_id.value}
            )
        if record is None:
            raise EntityNotFoundError(f"Conversation {conversation_id.value} not found")
        if record.user_id != requester_id.value:
            raise AccessDeniedError("User does not own this conversation.")
        return record

    async def create_conversation(
        self, owner_id: UserId, title: Optional[str] = None
    ) -> Conversation:
        if not title or not title.strip():
            title = Config.DEFAULT_CONVERSATION_TITLE
        conversation = Conversation.create(user_id=owner_id, title=title.strip())
        with _storage_errors("create conversation"):
            await self._prisma.conversation.create(
                data={
                    "id": conversation.id.value,
                    "user_id": conversation.user_id.value,
                    "title": conversation.title,
                    "created_at": conversation.created_at,
                    "updated_at": conversation.updated_at,
                }
            )
        return conversation

    async def list_conversations(
        self, owner_id: UserId, limit: Optional[int] = None
    ) -> list[Conversation]:
        """Get conversations for user, ordered by updated_at desc. No message bodies."""
        with _storage_errors("list conversations"):
            query = {
                "where": {"user_id": owner_id.value},
                "order": {"updated_at": "desc"},
            }
            if limit is not None:
                query["take"] = limit
            records = await self._prisma.conversation.find_many(**query)
        return [self._to_conversation(record) for record in records]

    async def get_conversation(
        self, conversation_id: ConversationId, requester_id: UserId
    ) -> Conversation:
        record = await self._find_owned(conversation_id, requester_id)
        return self._to_conversation(record)

    async def append_message(
        self, conversation_id: ConversationId, role: str, content: str
    ) -> Message:
        now = datetime.now(timezone.utc)
        message = Message.create(
            conversation_id=conversation_id,
            role=role,
            content=content,
            created_at=now,
        )
        with _storage_errors("append message"):
            updated = await self._prisma.conversation.update(
                where={"id": conversation_id.value},
                data={
                    "updated_at": now,
                    "messages": {
                        "create": [
                            {
                                "id": message.id.value,
                                "role": message.role,
                                "content": message.content,
                                "created_at": message.created_at,
                            }
                        ]
                    },
                },
            )
        if updated is None:
            raise EntityNotFoundError(f"Conversation {conversation_id.value} not found")
        return message

    async def rename_conversation(
        self, conversation_id: ConversationId, new_title: str
    ) -> None:
        with _storage_errors("rename conversation"):
            updated = await self._prisma.conversation.update(
                where={"id": conversation_id.value},
                data={"title": new_title, "updated_at": datetime.now(timezone.utc)},
            )
        if updated is None:
            raise EntityNotFoundError(f"Conversation {conversation_id.value} not found")

    async def delete_conversation(
        self, conversation_id: ConversationId, requester_id: UserId
    ) -> None:
        await self._find_owned(conversation_id, requester_id)
        with _storage_errors("delete conversation"):
            deleted = await self._prisma.conversation.delete_many(
                where={"id": conversation_id.value, "user_id": requester_id.value}
            )
        if not deleted:
            raise EntityNotFoundError(f"Conversation {conversation_id.value} not found")

    async def list_messages(
        self, conversation_id: ConversationId, requester_id: UserId
    ) -> list[Message]:
        """Full history, oldest first (insertion sequence)."""
        await self._find_owned(conversation_id, requester_id)
        with _storage_errors("list messages"):
            records = await self._prisma.message.find_many(
                where={"conversation_id": conversation_id.value},
                order={"seq": "asc"},
            )
        return [self._to_message(record) for record in records]
