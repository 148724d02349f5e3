"""
Unit tests for the Redis ledger store and the blob store.
"""

import asyncio
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import LockNotOwnedError

from shared.ledger import (
    Block,
    CertificateLedger,
    CertificateVerifiedEvent,
    RedisLedgerStore,
    Transaction,
)
from shared.ledger.models import CertificateVerifiedArgs, contract_event_adapter
from shared.storage import InMemoryBlobStore, compute_locator


NOW = datetime(2024, 1, 1, tzinfo=UTC)


def _audit_entry() -> tuple[Transaction, Block, CertificateVerifiedEvent]:
    tx = Transaction(
        hash="0xaa",
        from_address="employer",
        to="CertificateRegistry",
        block_number=1,
        timestamp=NOW,
        method="verifyCertificate",
        args={"document_fingerprint": "fp"},
        events=("0xaa:0",),
    )
    block = Block(number=1, hash="0xbb", parent_hash="0x0", timestamp=NOW, transactions=("0xaa",))
    event = CertificateVerifiedEvent(
        id="0xaa:0",
        transaction_hash="0xaa",
        block_number=1,
        timestamp=NOW,
        args=CertificateVerifiedArgs(certificate_id="NOT_FOUND", verifier="employer", result=False, proof_valid=False),
    )
    return tx, block, event


class TestRedisLedgerStore:
    """Tests for the Redis store against a mocked client."""

    @pytest.fixture
    def pipe(self) -> MagicMock:
        pipe = MagicMock()
        pipe.execute = AsyncMock(return_value=[])
        return pipe

    @pytest.fixture
    def lock(self) -> MagicMock:
        lock = MagicMock()
        lock.acquire = AsyncMock(return_value=True)
        lock.reacquire = AsyncMock(return_value=True)
        lock.release = AsyncMock()
        return lock

    @pytest.fixture
    def client(self, pipe: MagicMock, lock: MagicMock) -> MagicMock:
        client = MagicMock()
        client.pipeline.return_value = pipe
        client.lock.return_value = lock
        return client

    @pytest.mark.asyncio
    async def test_commit_is_one_transaction(self, client: MagicMock, pipe: MagicMock) -> None:
        store = RedisLedgerStore(client, key_prefix="test")
        tx, block, event = _audit_entry()

        await store.commit(transaction=tx, block=block, event=event)

        client.pipeline.assert_called_once_with(transaction=True)
        pushed = [c.args[0] for c in pipe.rpush.call_args_list]
        assert pushed == ["test:ledger:transactions", "test:ledger:blocks", "test:ledger:events"]
        pipe.hset.assert_not_called()
        pipe.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_latest_block_roundtrip(self, client: MagicMock) -> None:
        _, block, _ = _audit_entry()
        client.lindex = AsyncMock(return_value=block.model_dump_json())
        store = RedisLedgerStore(client)

        assert await store.latest_block() == block
        client.lindex.assert_awaited_once_with("zkvault:ledger:blocks", -1)

    @pytest.mark.asyncio
    async def test_latest_block_empty(self, client: MagicMock) -> None:
        client.lindex = AsyncMock(return_value=None)

        assert await RedisLedgerStore(client).latest_block() is None

    @pytest.mark.asyncio
    async def test_events_keep_their_type(self, client: MagicMock) -> None:
        _, _, event = _audit_entry()
        client.lrange = AsyncMock(return_value=[contract_event_adapter.dump_json(event).decode()])

        events = await RedisLedgerStore(client).list_events()

        assert isinstance(events[0], CertificateVerifiedEvent)
        assert events[0].args.certificate_id == "NOT_FOUND"

    @pytest.mark.asyncio
    async def test_lock_timeout_raises(self, client: MagicMock, lock: MagicMock) -> None:
        lock.acquire.return_value = False
        store = RedisLedgerStore(client, lock_timeout_seconds=0)

        with pytest.raises(TimeoutError):
            async with store.lock():
                pass

    @pytest.mark.asyncio
    async def test_ledger_over_redis_store(self, client: MagicMock, pipe: MagicMock, lock: MagicMock) -> None:
        """An unknown fingerprint still mines block 1 through the pipeline."""
        client.lrange = AsyncMock(return_value=[])
        client.lindex = AsyncMock(return_value=None)
        ledger = CertificateLedger(RedisLedgerStore(client))

        result = await ledger.verify("missing", None, "employer")

        assert result.block.number == 1
        pipe.execute.assert_awaited_once()
        client.lock.assert_called_once_with(
            "lock:zkvault:ledger:lock",
            timeout=10,
            blocking=True,
            blocking_timeout=10,
        )
        lock.release.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_lock_renewed_while_held(self, client: MagicMock, lock: MagicMock) -> None:
        store = RedisLedgerStore(client, lock_timeout_seconds=1)

        async with store.lock():
            await asyncio.sleep(0.5)

        lock.reacquire.assert_awaited()
        lock.release.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_lost_lock_surfaces_on_release(self, client: MagicMock, lock: MagicMock) -> None:
        """Release is token-checked, so a lock taken over by another writer is reported."""
        lock.release.side_effect = LockNotOwnedError("Cannot release a lock that's no longer owned")
        store = RedisLedgerStore(client)

        with pytest.raises(LockNotOwnedError):
            async with store.lock():
                pass


class TestBlobStore:
    """Tests for the content-addressed blob store."""

    def test_locator_is_cidv1(self) -> None:
        locator = compute_locator(b"hello")

        assert locator.startswith("bafkrei")
        assert locator == compute_locator(b"hello")
        assert locator != compute_locator(b"hello!")

    @pytest.mark.asyncio
    async def test_store_and_retrieve(self) -> None:
        store = InMemoryBlobStore()

        locator = await store.store(b"%PDF", filename="degree.pdf", content_type="application/pdf")

        assert await store.retrieve(locator) == b"%PDF"
        metadata = await store.get_metadata(locator)
        assert metadata is not None
        assert metadata.size == 4
        assert metadata.filename == "degree.pdf"
        assert store.gateway_url(locator).endswith(f"/{locator}")

    @pytest.mark.asyncio
    async def test_duplicate_content_stored_once(self) -> None:
        store = InMemoryBlobStore()

        first = await store.store(b"same", filename="a.pdf")
        second = await store.store(b"same", filename="b.pdf")

        assert first == second
        assert len(store._blobs) == 1
        metadata = await store.get_metadata(first)
        assert metadata is not None and metadata.filename == "a.pdf"

    @pytest.mark.asyncio
    async def test_unknown_locator(self) -> None:
        store = InMemoryBlobStore()

        assert await store.retrieve("bafkreiunknown") is None
        assert await store.get_metadata("bafkreiunknown") is None
