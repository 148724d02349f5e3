"""
Redis Ledger Store
==================

Ledger store backed by Redis.

Key layout (under the configured prefix):
- ledger:records             hash   certificate id -> record JSON
- ledger:record_order        list   certificate ids in issuance order
- ledger:fingerprint:<fp>    list   certificate ids for a fingerprint
- ledger:blocks              list   block JSON
- ledger:transactions        list   transaction JSON
- ledger:events              list   event JSON

The critical section is a redis_lock on ledger:lock; commits run in a single
MULTI/EXEC pipeline.

Version: 0.1.0
"""

from collections.abc import AsyncGenerator
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Any

from redis.asyncio import Redis

from shared.database.redis import redis_lock
from shared.ledger.models import (
    Block,
    CertificateRecord,
    ContractEvent,
    Transaction,
    contract_event_adapter,
)
from shared.ledger.store import LedgerStore
from shared.logging import get_logger


logger = get_logger(__name__)


class RedisLedgerStore(LedgerStore):
    """Ledger store persisted in Redis."""

    def __init__(
        self,
        client: Redis,  # type: ignore[type-arg]
        key_prefix: str = "zkvault",
        lock_timeout_seconds: int = 10,
    ) -> None:
        self._client = client
        self._prefix = f"{key_prefix}:ledger"
        self._lock_timeout = lock_timeout_seconds

    def _key(self, name: str) -> str:
        return f"{self._prefix}:{name}"

    def lock(self) -> AbstractAsyncContextManager[Any]:
        return self._locked()

    @asynccontextmanager
    async def _locked(self) -> AsyncGenerator[None, None]:
        async with redis_lock(
            self._key("lock"),
            timeout_seconds=self._lock_timeout,
            client=self._client,
        ) as acquired:
            if not acquired:
                logger.error("ledger_lock_timeout", timeout_seconds=self._lock_timeout)
                raise TimeoutError("Could not acquire the ledger lock")
            yield

    async def commit(
        self,
        *,
        transaction: Transaction,
        block: Block,
        event: ContractEvent,
        record: CertificateRecord | None = None,
        new_record: bool = False,
    ) -> None:
        pipe = self._client.pipeline(transaction=True)
        if record is not None:
            pipe.hset(self._key("records"), record.id, record.model_dump_json())
            if new_record:
                pipe.rpush(self._key("record_order"), record.id)
                pipe.rpush(self._key(f"fingerprint:{record.document_fingerprint}"), record.id)
        pipe.rpush(self._key("transactions"), transaction.model_dump_json())
        pipe.rpush(self._key("blocks"), block.model_dump_json())
        pipe.rpush(self._key("events"), contract_event_adapter.dump_json(event).decode())
        await pipe.execute()

    async def get_record(self, certificate_id: str) -> CertificateRecord | None:
        data = await self._client.hget(self._key("records"), certificate_id)
        if data is None:
            return None
        return CertificateRecord.model_validate_json(data)

    async def _records_for(self, ids: list[str]) -> list[CertificateRecord]:
        if not ids:
            return []
        values = await self._client.hmget(self._key("records"), ids)
        return [CertificateRecord.model_validate_json(v) for v in values if v is not None]

    async def find_by_fingerprint(self, document_fingerprint: str) -> list[CertificateRecord]:
        ids = await self._client.lrange(self._key(f"fingerprint:{document_fingerprint}"), 0, -1)
        return await self._records_for(ids)

    async def list_records(self) -> list[CertificateRecord]:
        ids = await self._client.lrange(self._key("record_order"), 0, -1)
        return await self._records_for(ids)

    async def latest_block(self) -> Block | None:
        data = await self._client.lindex(self._key("blocks"), -1)
        if data is None:
            return None
        return Block.model_validate_json(data)

    async def list_blocks(self) -> list[Block]:
        values = await self._client.lrange(self._key("blocks"), 0, -1)
        return [Block.model_validate_json(v) for v in values]

    async def list_transactions(self) -> list[Transaction]:
        values = await self._client.lrange(self._key("transactions"), 0, -1)
        return [Transaction.model_validate_json(v) for v in values]

    async def list_events(self) -> list[ContractEvent]:
        values = await self._client.lrange(self._key("events"), 0, -1)
        return [contract_event_adapter.validate_json(v) for v in values]

    async def reset(self) -> None:
        keys = [key async for key in self._client.scan_iter(match=f"{self._prefix}:*")]
        if keys:
            await self._client.delete(*keys)
        logger.debug("ledger_store_cleared", keys=len(keys))
