"""List Conversations Query. No limit returns every conversation the user owns."""

from dataclasses import dataclass
from typing import Optional
from intellitutor.domain.ports.repositories import ConversationStore
from intellitutor.application.common.interfaces import Query, QueryHandler
from intellitutor.domain.entities.conversation import Conversation
from intellitutor.domain.value_objects.user_id import UserId


@dataclass(frozen=True)
class ListConversationsQuery(Query[list[Conversation]]):
    user_id: UserId
    limit: Optional[int] = None


class ListConversationsHandler(QueryHandler[list[Conversation]]):
    def __init__(self, conversation_store: ConversationStore):
        self._conversation_store = conversation_store

    async def execute(self, query: ListConversationsQuery) -> list[Conversation]:
        return await self._conversation_store.list_conversations(
            query.user_id, query.limit
        )
