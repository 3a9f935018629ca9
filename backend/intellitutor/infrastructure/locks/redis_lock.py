"""
Redis Conversation Lock.

Distributed single-writer lock so the per-conversation guarantee holds when
several API processes share one database.

Redis Data Structure:
- Key pattern: "lock:conversation:{conversation_id}"
- Lease: Config.LOCK_TIMEOUT seconds, renewed every third of the lease while
  the holder is still inside hold(), so a slow exchange (model timeout times
  retries) never outlives it
- Waiting: Config.LOCK_BLOCKING_TIMEOUT seconds, then StorageError
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from redis.asyncio import Redis
from redis.asyncio.lock import Lock
from redis.exceptions import LockError, RedisError

from intellitutor.config.settings import Config
from intellitutor.domain.exceptions import StorageError
from intellitutor.domain.ports.conversation_lock import ConversationLock
from intellitutor.domain.value_objects.conversation_id import ConversationId

logger = logging.getLogger(__name__)


class RedisConversationLock(ConversationLock):
    KEY_PREFIX = "lock:conversation:"

    def __init__(
        self,
        redis: Redis,
        timeout: float = Config.LOCK_TIMEOUT,
        blocking_timeout: float = Config.LOCK_BLOCKING_TIMEOUT,
    ):
        self._redis = redis
        self._timeout = timeout
        self._blocking_timeout = blocking_timeout

    @asynccontextmanager
    async def hold(self, conversation_id: ConversationId) -> AsyncIterator[None]:
        name = f"{self.KEY_PREFIX}{conversation_id.value}"
        lock = self._redis.lock(
            name,
            timeout=self._timeout,
            blocking_timeout=self._blocking_timeout,
        )
        try:
            acquired = await lock.acquire()
        except RedisError as e:
            raise StorageError(f"Conversation lock unavailable: {e}") from e
        if not acquired:
            raise StorageError(
                f"Timed out waiting for conversation lock {conversation_id.value}"
            )

        renewer = asyncio.create_task(self._keep_alive(lock, name))
        try:
            yield
        finally:
            renewer.cancel()
            try:
                await renewer
            except asyncio.CancelledError:
                pass
            try:
                await lock.release()
            except LockError as e:
                # lease was lost despite renewal (e.g. Redis restarted)
                logger.warning(f"[RedisLock] release failed for {name}: {e}")

    async def _keep_alive(self, lock: Lock, name: str) -> None:
        """Reset the lease TTL until cancelled by hold()."""
        interval = self._timeout / 3
        while True:
            await asyncio.sleep(interval)
            try:
                await lock.extend(self._timeout, replace_ttl=True)
            except (LockError, RedisError) as e:
                logger.error(f"[RedisLock] could not renew lease for {name}: {e}")
                return
