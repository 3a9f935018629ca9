"""
GetChatHistory Query - Get conversation with its ordered messages.

Used by the chat window to load a conversation when the user opens it, and
by GET /conversations/{id}/messages.
"""

from dataclasses import dataclass

from intellitutor.application.common.interfaces import Query, QueryHandler
from intellitutor.domain.entities.conversation import Conversation
from intellitutor.domain.entities.message import Message
from intellitutor.domain.ports.repositories import ConversationStore
from intellitutor.domain.value_objects.conversation_id import ConversationId
from intellitutor.domain.value_objects.user_id import UserId


@dataclass
class GetChatHistoryResult:
    """Result containing conversation metadata and messages."""

    conversation: Conversation
    messages: list[Message]


@dataclass(frozen=True)
class GetChatHistoryQuery(Query[GetChatHistoryResult]):
    conversation_id: ConversationId
    user_id: UserId


class GetChatHistoryHandler(QueryHandler[GetChatHistoryResult]):
    def __init__(self, conversation_store: ConversationStore):
        self._conversation_store = conversation_store

    async def execute(self, query: GetChatHistoryQuery) -> GetChatHistoryResult:
        """
        Get conversation with chat history.

        Raises:
            EntityNotFoundError: If conversation doesn't exist
            AccessDeniedError: If user doesn't own the conversation
        """
        conversation = await self._conversation_store.get_conversation(
            query.conversation_id, query.user_id
        )
        messages = await self._conversation_store.list_messages(
            query.conversation_id, query.user_id
        )
        return GetChatHistoryResult(conversation=conversation, messages=messages)
