"""
Nullifier Registry
==================

Tracks consumed proof nullifiers so a proof is accepted at most once.

The registry is persisted independently of the ledger. Consumption goes
through add_if_absent, a single compare-and-set step, so two concurrent
verifications of the same proof cannot both succeed.

Version: 0.1.0
"""

import asyncio
from abc import ABC, abstractmethod

from redis.asyncio import Redis

from shared.logging import get_logger


logger = get_logger(__name__)


class NullifierRegistry(ABC):
    """Abstract set of consumed nullifiers."""

    @abstractmethod
    async def has(self, nullifier: str) -> bool:
        """Check whether a nullifier has been consumed."""
        ...

    @abstractmethod
    async def add(self, nullifier: str) -> None:
        """Mark a nullifier as consumed. Idempotent."""
        ...

    @abstractmethod
    async def add_if_absent(self, nullifier: str) -> bool:
        """
        Atomically consume a nullifier.

        Returns:
            True if this call consumed it, False if it was already present
        """
        ...

    @abstractmethod
    async def count(self) -> int:
        """Number of consumed nullifiers."""
        ...

    @abstractmethod
    async def clear(self) -> None:
        """Forget all nullifiers (for testing)."""
        ...


class InMemoryNullifierRegistry(NullifierRegistry):
    """
    Process-local registry.

    Data is stored in memory and lost on restart.
    """

    def __init__(self) -> None:
        self._nullifiers: set[str] = set()
        self._lock = asyncio.Lock()

    async def has(self, nullifier: str) -> bool:
        return nullifier in self._nullifiers

    async def add(self, nullifier: str) -> None:
        async with self._lock:
            self._nullifiers.add(nullifier)

    async def add_if_absent(self, nullifier: str) -> bool:
        async with self._lock:
            if nullifier in self._nullifiers:
                return False
            self._nullifiers.add(nullifier)
            return True

    async def count(self) -> int:
        return len(self._nullifiers)

    async def clear(self) -> None:
        async with self._lock:
            self._nullifiers.clear()
        logger.debug("nullifier_registry_cleared")


class RedisNullifierRegistry(NullifierRegistry):
    """Registry backed by a Redis set; SADD provides the compare-and-set."""

    def __init__(self, client: Redis, key_prefix: str = "zkvault") -> None:  # type: ignore[type-arg]
        self._client = client
        self._key = f"{key_prefix}:nullifiers"

    async def has(self, nullifier: str) -> bool:
        return bool(await self._client.sismember(self._key, nullifier))

    async def add(self, nullifier: str) -> None:
        await self._client.sadd(self._key, nullifier)

    async def add_if_absent(self, nullifier: str) -> bool:
        added = await self._client.sadd(self._key, nullifier)
        return added == 1

    async def count(self) -> int:
        return int(await self._client.scard(self._key))

    async def clear(self) -> None:
        await self._client.delete(self._key)
        logger.debug("nullifier_registry_cleared", key=self._key)
