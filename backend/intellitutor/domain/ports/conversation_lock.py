"""
Conversation Lock Port - single-writer semantics per conversation.

Implementations:
- intellitutor/infrastructure/locks/in_process_lock.py (one process)
- intellitutor/infrastructure/locks/redis_lock.py (many processes)

Usage:
    async with lock.hold(conversation_id):
        ...  # append, call model, append
"""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager

from intellitutor.domain.value_objects.conversation_id import ConversationId


class ConversationLock(ABC):
    @abstractmethod
    def hold(
        self, conversation_id: ConversationId
    ) -> AbstractAsyncContextManager[None]: ...
