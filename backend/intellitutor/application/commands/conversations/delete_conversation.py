"""Delete Conversation Command. Messages go with the conversation."""

import logging
from dataclasses import dataclass
from intellitutor.domain.value_objects.conversation_id import ConversationId
from intellitutor.domain.value_objects.user_id import UserId
from intellitutor.domain.ports.repositories import ConversationStore
from intellitutor.application.common.interfaces import Command, CommandHandler

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeleteConversationCommand(Command[bool]):
    conversation_id: ConversationId
    user_id: UserId


class DeleteConversationHandler(CommandHandler[bool]):
    def __init__(self, conversation_store: ConversationStore):
        self._conversation_store = conversation_store

    async def execute(self, command: DeleteConversationCommand) -> bool:
        await self._conversation_store.delete_conversation(
            command.conversation_id, command.user_id
        )
        logger.info(f"Deleted conversation {command.conversation_id.value}")
        return True
