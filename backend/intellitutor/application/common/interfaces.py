"""
Base interfaces for CQRS pattern.

Usage:
    @dataclass(frozen=True)
    class CreateConversationCommand(Command[Conversation]):
        user_id: UserId
        title: Optional[str]

    class CreateConversationHandler(CommandHandler[Conversation]):
        def __init__(self, store: ConversationStore):
            self._store = store

        async def execute(self, cmd: CreateConversationCommand) -> Conversation:
            return await self._store.create_conversation(cmd.user_id, cmd.title)
"""
from abc import ABC, abstractmethod
from typing import TypeVar, Generic

T = TypeVar("T")


class Command(ABC, Generic[T]):
    """Base class for write operations"""
    pass


class CommandHandler(ABC, Generic[T]):
    @abstractmethod
    async def execute(self, command: Command[T]) -> T:
        """Execute the command and return a result of type T"""
        ...


class Query(ABC, Generic[T]):
    """Base class for read operations"""
    pass


class QueryHandler(ABC, Generic[T]):
    @abstractmethod
    async def execute(self, query: Query[T]) -> T:
        """Execute the query and return a result of type T"""
        ...
