"""
Cache Layer - Redis client factory.
"""

from intellitutor.infrastructure.cache.redis_client import (
    close_redis_client,
    create_redis_client,
)

__all__ = [
    "create_redis_client",
    "close_redis_client",
]
