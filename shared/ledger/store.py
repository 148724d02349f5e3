"""
Ledger Store
============

Persistence port for the certificate ledger and its in-memory implementation.

Every ledger call runs inside lock() and writes its record, transaction,
block and event through a single commit(), so readers never observe a
partially applied call.

Version: 0.1.0
"""

import asyncio
from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager
from typing import Any

from shared.ledger.models import (
    Block,
    CertificateRecord,
    ContractEvent,
    Transaction,
)
from shared.logging import get_logger


logger = get_logger(__name__)


class LedgerStore(ABC):
    """
    Abstract append-only store for ledger state.

    Implements the Strategy pattern for different persistence backends.
    """

    @abstractmethod
    def lock(self) -> AbstractAsyncContextManager[Any]:
        """Critical section covering read-validate-mine-commit."""
        ...

    @abstractmethod
    async def commit(
        self,
        *,
        transaction: Transaction,
        block: Block,
        event: ContractEvent,
        record: CertificateRecord | None = None,
        new_record: bool = False,
    ) -> None:
        """
        Atomically persist the outputs of one ledger call.

        Args:
            transaction: Transaction of the call
            block: Block mined for the call
            event: Event emitted by the call
            record: Created or updated certificate, if any
            new_record: Whether record is a new certificate to index
        """
        ...

    @abstractmethod
    async def get_record(self, certificate_id: str) -> CertificateRecord | None:
        ...

    @abstractmethod
    async def find_by_fingerprint(self, document_fingerprint: str) -> list[CertificateRecord]:
        """All records for a fingerprint, oldest first."""
        ...

    @abstractmethod
    async def list_records(self) -> list[CertificateRecord]:
        """All records in issuance order."""
        ...

    @abstractmethod
    async def latest_block(self) -> Block | None:
        ...

    @abstractmethod
    async def list_blocks(self) -> list[Block]:
        ...

    @abstractmethod
    async def list_transactions(self) -> list[Transaction]:
        ...

    @abstractmethod
    async def list_events(self) -> list[ContractEvent]:
        ...

    @abstractmethod
    async def reset(self) -> None:
        """Drop all ledger state (for testing)."""
        ...


class InMemoryLedgerStore(LedgerStore):
    """
    Process-local ledger store.

    Data is stored in memory and lost on restart.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._records: dict[str, CertificateRecord] = {}
        self._fingerprint_index: dict[str, list[str]] = {}
        self._blocks: list[Block] = []
        self._transactions: list[Transaction] = []
        self._events: list[ContractEvent] = []

    def lock(self) -> AbstractAsyncContextManager[Any]:
        return self._lock

    async def commit(
        self,
        *,
        transaction: Transaction,
        block: Block,
        event: ContractEvent,
        record: CertificateRecord | None = None,
        new_record: bool = False,
    ) -> None:
        if record is not None:
            self._records[record.id] = record
            if new_record:
                self._fingerprint_index.setdefault(record.document_fingerprint, []).append(record.id)
        self._transactions.append(transaction)
        self._blocks.append(block)
        self._events.append(event)

    async def get_record(self, certificate_id: str) -> CertificateRecord | None:
        return self._records.get(certificate_id)

    async def find_by_fingerprint(self, document_fingerprint: str) -> list[CertificateRecord]:
        ids = self._fingerprint_index.get(document_fingerprint, [])
        return [self._records[i] for i in ids]

    async def list_records(self) -> list[CertificateRecord]:
        return list(self._records.values())

    async def latest_block(self) -> Block | None:
        return self._blocks[-1] if self._blocks else None

    async def list_blocks(self) -> list[Block]:
        return list(self._blocks)

    async def list_transactions(self) -> list[Transaction]:
        return list(self._transactions)

    async def list_events(self) -> list[ContractEvent]:
        return list(self._events)

    async def reset(self) -> None:
        self._records.clear()
        self._fingerprint_index.clear()
        self._blocks.clear()
        self._transactions.clear()
        self._events.clear()
        logger.debug("ledger_store_cleared")
