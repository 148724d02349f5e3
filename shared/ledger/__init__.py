"""
Ledger Module
=============

Append-only certificate ledger with a status lifecycle.

Backends:
- In-memory (development/testing)
- Redis

Usage:
    from shared.ledger import CertificateLedger, RedisLedgerStore

    ledger = CertificateLedger(RedisLedgerStore(RedisClient.get_client()))
    result = await ledger.issue(...)
    await ledger.revoke(fingerprint, revoked_by="admin", reason="Fraud")
"""

from shared.ledger.contract import (
    CertificateLedger,
    ProofCheck,
    compute_block_hash,
    generate_certificate_id,
)
from shared.ledger.models import (
    GENESIS_PARENT_HASH,
    Block,
    CertificateIssuedEvent,
    CertificateRecord,
    CertificateReinstatedEvent,
    CertificateRevokedEvent,
    CertificateStatus,
    CertificateSuspendedEvent,
    CertificateVerifiedEvent,
    ChainIntegrityReport,
    ContractEvent,
    IssueResult,
    LedgerStats,
    LedgerVerification,
    MutationResult,
    StatusAction,
    StatusChange,
    Transaction,
    TransactionStatus,
    apply_transition,
    check_transition,
)
from shared.ledger.redis_store import RedisLedgerStore
from shared.ledger.store import InMemoryLedgerStore, LedgerStore


__all__ = [
    # Contract
    "CertificateLedger",
    "ProofCheck",
    "compute_block_hash",
    "generate_certificate_id",
    # Stores
    "LedgerStore",
    "InMemoryLedgerStore",
    "RedisLedgerStore",
    # State machine
    "CertificateStatus",
    "StatusAction",
    "StatusChange",
    "apply_transition",
    "check_transition",
    # Models
    "GENESIS_PARENT_HASH",
    "Block",
    "CertificateRecord",
    "Transaction",
    "TransactionStatus",
    "ContractEvent",
    "CertificateIssuedEvent",
    "CertificateVerifiedEvent",
    "CertificateRevokedEvent",
    "CertificateSuspendedEvent",
    "CertificateReinstatedEvent",
    # Results
    "IssueResult",
    "MutationResult",
    "LedgerVerification",
    "LedgerStats",
    "ChainIntegrityReport",
]
