"""
In-Process Conversation Lock.

One asyncio.Lock per conversation id, reference counted so entries for idle
conversations are dropped. Gives single-writer semantics inside one process.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from intellitutor.domain.ports.conversation_lock import ConversationLock
from intellitutor.domain.value_objects.conversation_id import ConversationId


class InProcessConversationLock(ConversationLock):
    def __init__(self):
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: dict[str, int] = {}

    @property
    def active_keys(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, conversation_id: ConversationId) -> AsyncIterator[None]:
        key = conversation_id.value
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._waiters[key] = self._waiters.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[key] -= 1
            if self._waiters[key] == 0:
                del self._waiters[key]
                del self._locks[key]
