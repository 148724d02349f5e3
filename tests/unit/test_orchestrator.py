"""
Unit tests for end-to-end certificate verification.
"""

import asyncio

import pytest

from shared.errors import ErrorCode
from shared.ledger import CertificateLedger, CertificateStatus, CertificateVerifiedEvent
from shared.verification import VerificationOrchestrator
from shared.zk import CertificateProver, InMemoryNullifierRegistry, ProofRequest, SimulatedProof


@pytest.fixture
def id_request() -> ProofRequest:
    return ProofRequest(
        document_fingerprint="doc1",
        document_type="passport",
        document_category="identity",
        holder_name="Jane Doe",
        holder_dob="1990-01-01",
        selected_disclosures=["ageOver18"],
    )


async def _issue(ledger: CertificateLedger, proof: SimulatedProof, fingerprint: str = "doc1") -> None:
    result = await ledger.issue(
        document_fingerprint=fingerprint,
        storage_locator="bafkreidoc1",
        proof=proof,
        issuer="city-registry",
        holder="Jane Doe",
        document_type="passport",
        document_category="identity",
    )
    assert result.success


class TestVerifyCertificate:
    """Tests for the composed verification flow."""

    @pytest.mark.asyncio
    async def test_single_use_proof(
        self,
        orchestrator: VerificationOrchestrator,
        ledger: CertificateLedger,
        prover: CertificateProver,
        nullifiers: InMemoryNullifierRegistry,
        id_request: ProofRequest,
    ) -> None:
        proof = await prover.generate(id_request)
        await _issue(ledger, proof)

        first = await orchestrator.verify_certificate("doc1", proof, "employer")

        assert first.valid is True
        assert first.status is CertificateStatus.ACTIVE
        assert [(d.key, d.value) for d in first.disclosures] == [("ageOver18", True)]
        assert first.proof_result is not None and first.proof_result.nullifier_consumed
        assert await nullifiers.has(proof.nullifier)

        second = await orchestrator.verify_certificate("doc1", proof, "employer")

        assert second.valid is False
        assert second.error_code is ErrorCode.NULLIFIER_REUSED
        assert second.disclosures == []

        events = await ledger.get_all_events()
        verified = [e for e in events if isinstance(e, CertificateVerifiedEvent)]
        assert [e.args.result for e in verified] == [True, False]

    @pytest.mark.asyncio
    async def test_json_proof_accepted(
        self,
        orchestrator: VerificationOrchestrator,
        ledger: CertificateLedger,
        prover: CertificateProver,
        id_request: ProofRequest,
    ) -> None:
        proof = await prover.generate(id_request)
        await _issue(ledger, proof)

        outcome = await orchestrator.verify_certificate("doc1", proof.to_json(), "employer")

        assert outcome.valid is True

    @pytest.mark.asyncio
    async def test_not_found_leaves_nullifier_unused(
        self,
        orchestrator: VerificationOrchestrator,
        prover: CertificateProver,
        nullifiers: InMemoryNullifierRegistry,
        id_request: ProofRequest,
    ) -> None:
        proof = await prover.generate(id_request)

        outcome = await orchestrator.verify_certificate("doc1", proof, "employer")

        assert outcome.valid is False
        assert outcome.error_code is ErrorCode.NOT_FOUND
        assert outcome.proof_result is None
        assert await nullifiers.count() == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("action", "error_code"),
        [
            ("revoke", ErrorCode.CERTIFICATE_REVOKED),
            ("suspend", ErrorCode.CERTIFICATE_SUSPENDED),
        ],
    )
    async def test_inactive_certificate_leaves_nullifier_unused(
        self,
        orchestrator: VerificationOrchestrator,
        ledger: CertificateLedger,
        prover: CertificateProver,
        nullifiers: InMemoryNullifierRegistry,
        id_request: ProofRequest,
        action: str,
        error_code: ErrorCode,
    ) -> None:
        proof = await prover.generate(id_request)
        await _issue(ledger, proof)
        await getattr(ledger, action)("doc1", "admin", "audit")

        outcome = await orchestrator.verify_certificate("doc1", proof, "employer")

        assert outcome.valid is False
        assert outcome.error_code is error_code
        assert await nullifiers.has(proof.nullifier) is False

    @pytest.mark.asyncio
    async def test_mismatched_proof_leaves_nullifier_unused(
        self,
        orchestrator: VerificationOrchestrator,
        ledger: CertificateLedger,
        prover: CertificateProver,
        nullifiers: InMemoryNullifierRegistry,
        id_request: ProofRequest,
    ) -> None:
        await _issue(ledger, await prover.generate(id_request))
        stranger = await prover.generate(id_request)

        outcome = await orchestrator.verify_certificate("doc1", stranger, "employer")

        assert outcome.error_code is ErrorCode.PROOF_MISMATCH
        assert await nullifiers.count() == 0

    @pytest.mark.asyncio
    async def test_hash_only_mode(
        self,
        orchestrator: VerificationOrchestrator,
        ledger: CertificateLedger,
        prover: CertificateProver,
        id_request: ProofRequest,
    ) -> None:
        await _issue(ledger, await prover.generate(id_request))

        strict = await orchestrator.verify_certificate("doc1", None, "employer")
        lenient = await orchestrator.verify_certificate("doc1", None, "employer", require_proof=False)

        assert strict.error_code is ErrorCode.PROOF_REQUIRED
        assert lenient.valid is True
        assert lenient.proof_result is None

    @pytest.mark.asyncio
    async def test_concurrent_verifications_accept_once(
        self,
        orchestrator: VerificationOrchestrator,
        ledger: CertificateLedger,
        prover: CertificateProver,
        id_request: ProofRequest,
    ) -> None:
        proof = await prover.generate(id_request)
        await _issue(ledger, proof)

        outcomes = await asyncio.gather(
            *(orchestrator.verify_certificate("doc1", proof, f"verifier-{i}") for i in range(8))
        )

        assert sum(o.valid for o in outcomes) == 1
        rejected = [o for o in outcomes if not o.valid]
        assert all(o.error_code is ErrorCode.NULLIFIER_REUSED for o in rejected)
        assert (await ledger.verify_chain_integrity()).valid
