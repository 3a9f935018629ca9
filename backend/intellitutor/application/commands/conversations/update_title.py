"""
Update Title Command (explicit rename by the owner).

The rename runs under the conversation lock, the same one a send holds while
it derives the first-exchange title, so a user's rename is never overwritten
by a derivation that read the default title earlier.
"""

from dataclasses import dataclass
from intellitutor.domain.entities.conversation import Conversation
from intellitutor.application.common.interfaces import Command, CommandHandler
from intellitutor.domain.exceptions import DomainValidationError
from intellitutor.domain.ports.conversation_lock import ConversationLock
from intellitutor.domain.ports.repositories import ConversationStore
from intellitutor.domain.value_objects.conversation_id import ConversationId
from intellitutor.domain.value_objects.user_id import UserId
from intellitutor.config.settings import Config


@dataclass(frozen=True)
class UpdateTitleCommand(Command[Conversation]):
    conversation_id: ConversationId
    user_id: UserId
    new_title: str


class UpdateTitleHandler(CommandHandler[Conversation]):
    def __init__(
        self,
        conversation_store: ConversationStore,
        conversation_lock: ConversationLock,
    ):
        self._conversation_store = conversation_store
        self._lock = conversation_lock

    async def execute(self, command: UpdateTitleCommand) -> Conversation:
        new_title = command.new_title.strip()
        if not new_title:
            raise DomainValidationError("Title cannot be empty")
        if len(new_title) > Config.TITLE_MAX_LENGTH:
            raise DomainValidationError(
                f"Title cannot exceed {Config.TITLE_MAX_LENGTH} characters"
            )

        # Ownership check before waiting on the lock
        await self._conversation_store.get_conversation(
            command.conversation_id, command.user_id
        )
        async with self._lock.hold(command.conversation_id):
            await self._conversation_store.rename_conversation(
                command.conversation_id, new_title
            )
            return await self._conversation_store.get_conversation(
                command.conversation_id, command.user_id
            )
