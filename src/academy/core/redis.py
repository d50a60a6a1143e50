"""
Redis Connection

Shared async client backing the rate limit counters when
RATE_LIMIT_BACKEND=redis. Nothing else in the API depends on Redis, so a
missing connection is only fatal in production (see main.lifespan).
"""

import logging

from redis.asyncio import Redis, from_url
from redis.exceptions import RedisError

from academy.core.config import settings

logger = logging.getLogger(__name__)

_client: Redis | None = None


async def init_redis(url: str | None = None) -> Redis:
    """
    Connect to Redis and verify the connection with PING.

    Raises:
        RedisError: If the server cannot be reached; no client is kept
    """
    global _client
    client = from_url(url or settings.redis_url, decode_responses=True)
    try:
        await client.ping()
    except RedisError:
        await client.aclose()
        raise

    _client = client
    logger.info("Redis connection established")
    return _client


def get_redis() -> Redis | None:
    """Return the connected client, or None if init_redis never succeeded."""
    return _client


def is_redis_available() -> bool:
    return _client is not None


async def close_redis() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
        logger.info("Redis connection closed")
