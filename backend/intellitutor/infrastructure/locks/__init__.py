"""
Lock Layer - ConversationLock implementations.

- InProcessConversationLock: asyncio locks, one process
- RedisConversationLock: redis.asyncio locks, many processes
"""

from intellitutor.infrastructure.locks.in_process_lock import InProcessConversationLock
from intellitutor.infrastructure.locks.redis_lock import RedisConversationLock

__all__ = [
    "InProcessConversationLock",
    "RedisConversationLock",
]
