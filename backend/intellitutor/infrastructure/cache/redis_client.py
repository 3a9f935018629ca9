"""
Redis connection for the distributed conversation lock (LOCK_BACKEND=redis).

Lock keys are plain strings, so responses are decoded. Socket timeouts stay
well below Config.LOCK_BLOCKING_TIMEOUT so a dead server surfaces as a
RedisError instead of a hung request.
"""

import logging
from typing import Optional

import redis.asyncio as redis
from redis.asyncio import Redis

from intellitutor.config.settings import Config

logger = logging.getLogger(__name__)


async def create_redis_client(url: Optional[str] = None) -> Redis:
    """
    Connect and ping once, so a bad REDIS_URL fails at startup.

    Raises:
        redis.ConnectionError: If Redis is not reachable
    """
    url = url or Config.REDIS_URL
    client = redis.from_url(
        url,
        decode_responses=True,
        socket_timeout=5.0,
        socket_connect_timeout=5.0,
        health_check_interval=30,
    )
    await client.ping()
    logger.info("[Redis] Lock backend connected (%s)", client.connection_pool)
    return client


async def close_redis_client(client: Optional[Redis]) -> None:
    if client is None:
        return
    await client.aclose()
    logger.info("[Redis] Lock backend connection closed")
