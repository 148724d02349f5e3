"""
Certificate Registry - Dependencies
===================================

Wiring of the ledger, proof engine and blob store for the HTTP layer.

Version: 0.1.0
"""

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Request

from shared.config import Settings, StorageBackend
from shared.database.redis import RedisClient
from shared.ledger import CertificateLedger, InMemoryLedgerStore, LedgerStore, RedisLedgerStore
from shared.logging import get_logger
from shared.storage import BlobStore, InMemoryBlobStore
from shared.verification import VerificationOrchestrator
from shared.zk import (
    CertificateProver,
    InMemoryNullifierRegistry,
    NullifierRegistry,
    ProofVerifier,
    RedisNullifierRegistry,
)


logger = get_logger(__name__)


@dataclass
class RegistryContainer:
    """Everything the routes need, built once per application."""

    ledger: CertificateLedger
    prover: CertificateProver
    verifier: ProofVerifier
    nullifiers: NullifierRegistry
    orchestrator: VerificationOrchestrator
    blob_store: BlobStore
    backend: StorageBackend

    async def reset(self) -> None:
        """Drop ledger, nullifier and blob state (for testing)."""
        await self.ledger.reset()
        await self.nullifiers.clear()
        if isinstance(self.blob_store, InMemoryBlobStore):
            await self.blob_store.clear()


def build_container(config: Settings) -> RegistryContainer:
    """
    Build the registry components for the configured backend.

    Args:
        config: Application settings

    Returns:
        RegistryContainer ready to attach to app.state
    """
    store: LedgerStore
    nullifiers: NullifierRegistry

    if config.ledger.backend is StorageBackend.REDIS:
        client = RedisClient.get_client()
        store = RedisLedgerStore(
            client,
            key_prefix=config.redis.key_prefix,
            lock_timeout_seconds=config.ledger.lock_timeout_seconds,
        )
        nullifiers = RedisNullifierRegistry(client, key_prefix=config.redis.key_prefix)
    else:
        store = InMemoryLedgerStore()
        nullifiers = InMemoryNullifierRegistry()

    ledger = CertificateLedger(store, config.ledger)
    verifier = ProofVerifier(nullifiers, config.proof)

    logger.info("registry_container_built", backend=config.ledger.backend.value)

    return RegistryContainer(
        ledger=ledger,
        prover=CertificateProver(config.proof),
        verifier=verifier,
        nullifiers=nullifiers,
        orchestrator=VerificationOrchestrator(ledger, verifier),
        blob_store=InMemoryBlobStore(),
        backend=config.ledger.backend,
    )


def get_registry(request: Request) -> RegistryContainer:
    """Dependency returning the application's registry container."""
    return request.app.state.registry


Registry = Annotated[RegistryContainer, Depends(get_registry)]
