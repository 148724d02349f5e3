"""
Test Configuration
==================

Pytest fixtures for ZK-Vault tests.
"""

import os
from collections.abc import AsyncGenerator, Callable
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Set test environment
os.environ["ENVIRONMENT"] = "testing"
os.environ["LEDGER_BACKEND"] = "memory"

from shared.hashing import hash_bytes  # noqa: E402
from shared.ledger import CertificateLedger, InMemoryLedgerStore  # noqa: E402
from shared.verification import VerificationOrchestrator  # noqa: E402
from shared.zk import (  # noqa: E402
    CertificateProver,
    InMemoryNullifierRegistry,
    ProofRequest,
    ProofVerifier,
    SimulatedProof,
)


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio backend for async tests."""
    return "asyncio"


# =============================================================================
# Core Components
# =============================================================================


@pytest.fixture
def prover() -> CertificateProver:
    return CertificateProver()


@pytest.fixture
def nullifiers() -> InMemoryNullifierRegistry:
    return InMemoryNullifierRegistry()


@pytest.fixture
def verifier(nullifiers: InMemoryNullifierRegistry) -> ProofVerifier:
    return ProofVerifier(nullifiers)


@pytest.fixture
def ledger() -> CertificateLedger:
    return CertificateLedger(InMemoryLedgerStore())


@pytest.fixture
def orchestrator(ledger: CertificateLedger, verifier: ProofVerifier) -> VerificationOrchestrator:
    return VerificationOrchestrator(ledger, verifier)


@pytest.fixture
def document_bytes() -> bytes:
    return b"%PDF-1.7 Bachelor of Science, Jane Doe, 2020"


@pytest.fixture
def document_fingerprint(document_bytes: bytes) -> str:
    return hash_bytes(document_bytes)


@pytest.fixture
def proof_request(document_fingerprint: str) -> ProofRequest:
    """Proof request for an educational certificate."""
    return ProofRequest(
        document_fingerprint=document_fingerprint,
        document_type="degree",
        document_category="educational",
        document_data={"institution": "State University", "graduationDate": "2020-06-15"},
        holder_name="Jane Doe",
        holder_dob="1998-03-02",
        selected_disclosures=["degreeVerified", "graduationYear"],
    )


@pytest_asyncio.fixture
async def proof(prover: CertificateProver, proof_request: ProofRequest) -> SimulatedProof:
    return await prover.generate(proof_request)


@pytest.fixture
def issue_kwargs(document_fingerprint: str) -> Callable[[SimulatedProof], dict[str, Any]]:
    """Build ledger.issue keyword arguments for a proof."""

    def build(proof: SimulatedProof, fingerprint: str | None = None) -> dict[str, Any]:
        return {
            "document_fingerprint": fingerprint or document_fingerprint,
            "storage_locator": "bafkreitestlocator",
            "proof": proof,
            "issuer": "state-university",
            "holder": "Jane Doe",
            "document_type": "degree",
            "document_category": "educational",
        }

    return build


# =============================================================================
# HTTP Service
# =============================================================================


@pytest_asyncio.fixture
async def registry_client() -> AsyncGenerator[AsyncClient, None]:
    """Create test client for the Certificate Registry Service."""
    from services.certificate_registry.dependencies import build_container
    from services.certificate_registry.main import app
    from shared.config import settings

    app.state.registry = build_container(settings)

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    await app.state.registry.reset()


def _headers(sub: str, roles: list[str], organization: str | None = None) -> dict[str, str]:
    from shared.auth import create_access_token

    claims: dict[str, Any] = {"sub": sub, "roles": roles}
    if organization:
        claims["organization"] = organization
    return {"Authorization": f"Bearer {create_access_token(claims)}"}


@pytest.fixture
def issuer_headers() -> dict[str, str]:
    return _headers("registrar-1", ["issuer"], organization="state-university")


@pytest.fixture
def verifier_headers() -> dict[str, str]:
    return _headers("hr-1", ["verifier"], organization="acme-corp")


@pytest.fixture
def holder_headers() -> dict[str, str]:
    return _headers("jane", ["holder"])


@pytest.fixture
def admin_headers() -> dict[str, str]:
    return _headers("admin-1", ["admin"])
