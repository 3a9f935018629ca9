"""Create Conversation Command."""

from dataclasses import dataclass
from typing import Optional
from intellitutor.domain.entities.conversation import Conversation
from intellitutor.domain.exceptions import DomainValidationError
from intellitutor.domain.ports.repositories import ConversationStore
from intellitutor.domain.value_objects.user_id import UserId
from intellitutor.application.common.interfaces import Command, CommandHandler
from intellitutor.config.settings import Config


@dataclass(frozen=True)
class CreateConversationCommand(Command[Conversation]):
    user_id: UserId
    title: Optional[str] = None


class CreateConversationHandler(CommandHandler[Conversation]):
    _conversation_store: ConversationStore

    def __init__(self, conversation_store: ConversationStore):
        self._conversation_store = conversation_store

    async def execute(self, command: CreateConversationCommand) -> Conversation:
        if command.title and len(command.title.strip()) > Config.TITLE_MAX_LENGTH:
            raise DomainValidationError(
                f"Title cannot exceed {Config.TITLE_MAX_LENGTH} characters"
            )
        return await self._conversation_store.create_conversation(
            command.user_id, command.title
        )
