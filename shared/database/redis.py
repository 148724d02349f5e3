"""
Redis Client
============

Async Redis client shared by the Redis-backed ledger store and nullifier
registry.

Version: 0.1.0
"""

import asyncio
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager, suppress
from typing import Any

import redis.asyncio as aioredis
from redis.asyncio import Redis
from redis.asyncio.lock import Lock
from redis.exceptions import LockError

from shared.config import settings
from shared.logging import get_logger

logger = get_logger(__name__)


class RedisClient:
    """
    Async Redis client wrapper.

    Holds one process-wide connection pool.
    """

    _client: Redis | None = None  # type: ignore[type-arg]

    @classmethod
    def get_client(cls) -> Redis:  # type: ignore[type-arg]
        """Get or create the async client."""
        if cls._client is None:
            cls._client = aioredis.from_url(
                settings.redis.url,
                encoding="utf-8",
                decode_responses=True,
                max_connections=50,
            )
            logger.info(
                "redis_client_created",
                host=settings.redis.host,
            )
        return cls._client

    @classmethod
    async def close(cls) -> None:
        """Close the client and release all connections."""
        if cls._client is not None:
            await cls._client.aclose()
            cls._client = None
            logger.info("redis_client_closed")

    @classmethod
    async def health_check(cls) -> dict[str, Any]:
        """
        Check Redis health.

        Returns:
            dict with status and server info
        """
        try:
            start = time.perf_counter()
            client = cls.get_client()
            pong = await client.ping()
            latency_ms = (time.perf_counter() - start) * 1000

            info = await client.info("server")

            return {
                "status": "healthy" if pong else "unhealthy",
                "latency_ms": round(latency_ms, 2),
                "redis_version": info.get("redis_version", "unknown"),
                "uptime_seconds": info.get("uptime_in_seconds", 0),
            }
        except Exception as e:
            logger.error("redis_health_check_failed", error=str(e))
            return {
                "status": "unhealthy",
                "error": str(e),
            }


async def _keep_alive(lock: Lock, timeout_seconds: float) -> None:
    """Reset the lock TTL every third of its lifetime while it is held."""
    interval = timeout_seconds / 3
    while True:
        await asyncio.sleep(interval)
        await lock.reacquire()


@asynccontextmanager
async def redis_lock(
    key: str,
    timeout_seconds: int = 10,
    blocking: bool = True,
    client: Redis | None = None,  # type: ignore[type-arg]
) -> AsyncGenerator[bool, None]:
    """
    Distributed lock using Redis.

    Acquisition and release go through redis-py's token-checked Lock, so a
    holder never deletes a lock it no longer owns. The TTL is renewed while
    the body runs.

    Usage:
        async with redis_lock("my-resource") as acquired:
            if acquired:
                # Do work with lock
                pass

    Raises:
        LockError: If the lock was lost before release
    """
    client = client or RedisClient.get_client()
    lock = client.lock(
        f"lock:{key}",
        timeout=timeout_seconds or None,
        blocking=blocking,
        blocking_timeout=timeout_seconds,
    )

    if not await lock.acquire():
        yield False
        return

    renewal = asyncio.create_task(_keep_alive(lock, timeout_seconds)) if timeout_seconds else None
    try:
        yield True
    finally:
        if renewal is not None:
            renewal.cancel()
            with suppress(asyncio.CancelledError, LockError):
                await renewal
        try:
            await lock.release()
        except LockError as e:
            logger.error("redis_lock_lost", key=key, error=str(e))
            raise
