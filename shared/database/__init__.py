"""
Database Module
===============

Async Redis client used by the Redis persistence backend.

Usage:
    from shared.database import RedisClient, redis_lock

    client = RedisClient.get_client()
    async with redis_lock("zkvault:ledger", client=client) as acquired:
        ...
"""

from shared.database.redis import (
    RedisClient,
    redis_lock,
)


__all__ = [
    "RedisClient",
    "redis_lock",
]
