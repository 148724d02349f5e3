"""
Unit Tests for Proof Verification
=================================

Stage-by-stage tests for the simulated proof verifier.
"""

from collections.abc import Sequence
from datetime import timedelta

import pytest

from shared.errors import ErrorCode
from shared.zk.models import (
    ProofPoints,
    ProofRequest,
    ProofVerificationStatus,
    SimulatedProof,
    VerificationStage,
)
from shared.zk.nullifiers import InMemoryNullifierRegistry
from shared.zk.prover import CertificateProver
from shared.zk.verifier import ProofVerifier


def _with_points(proof: SimulatedProof, **changes: object) -> SimulatedProof:
    points = ProofPoints.model_validate(proof.proof.model_dump() | changes)
    return proof.model_copy(update={"proof": points})


def _with_signals(proof: SimulatedProof, signals: Sequence[str]) -> SimulatedProof:
    return proof.model_copy(update={"public_signals": tuple(signals)})


def _verifier_at(nullifiers: InMemoryNullifierRegistry, proof: SimulatedProof, offset: timedelta) -> ProofVerifier:
    moment = proof.metadata.generated_at + offset
    return ProofVerifier(nullifiers, clock=lambda: moment)


class TestValidProofs:
    """Tests for proofs that pass every stage."""

    @pytest.mark.asyncio
    async def test_fresh_proof_is_valid(self, verifier: ProofVerifier, proof: SimulatedProof) -> None:
        result = await verifier.verify(proof, "any-fingerprint")

        assert result.valid is True
        assert result.status is ProofVerificationStatus.VALID
        assert result.failed_stage is None
        assert result.error_code is None
        assert result.commitment == proof.commitment
        assert result.nullifier == proof.nullifier
        assert [d.key for d in result.disclosed_attributes] == ["degreeVerified", "graduationYear"]
        assert result.details.proof_valid
        assert result.details.nullifier_unique
        assert result.details.commitment_valid
        assert result.details.disclosures_verified

    @pytest.mark.asyncio
    async def test_dict_and_json_inputs(self, verifier: ProofVerifier, proof: SimulatedProof) -> None:
        assert (await verifier.verify(proof.model_dump(mode="json"), "fp")).valid
        assert (await verifier.verify(proof.to_json(), "fp")).valid

    @pytest.mark.asyncio
    async def test_without_consume_registry_untouched(
        self,
        verifier: ProofVerifier,
        nullifiers: InMemoryNullifierRegistry,
        proof: SimulatedProof,
    ) -> None:
        first = await verifier.verify(proof, "fp")
        second = await verifier.verify(proof, "fp")

        assert first.valid and second.valid
        assert first.nullifier_consumed is False
        assert await nullifiers.count() == 0

    @pytest.mark.asyncio
    async def test_proof_without_disclosures(self, prover: CertificateProver, verifier: ProofVerifier) -> None:
        proof = await prover.generate(
            ProofRequest(
                document_fingerprint="fp",
                document_type="passport",
                document_category="identity",
                holder_name="John Roe",
            )
        )

        result = await verifier.verify(proof, "fp")

        assert result.valid
        assert result.disclosed_attributes == []


class TestNullifierConsumption:
    """Tests for single-use proofs."""

    @pytest.mark.asyncio
    async def test_second_consume_rejected(
        self,
        verifier: ProofVerifier,
        nullifiers: InMemoryNullifierRegistry,
        proof: SimulatedProof,
    ) -> None:
        first = await verifier.verify(proof, "fp", consume_nullifier=True)
        second = await verifier.verify(proof, "fp", consume_nullifier=True)

        assert first.valid and first.nullifier_consumed
        assert await nullifiers.has(proof.nullifier)

        assert second.valid is False
        assert second.status is ProofVerificationStatus.NULLIFIER_REUSED
        assert second.failed_stage is VerificationStage.NULLIFIER
        assert second.error_code is ErrorCode.NULLIFIER_REUSED
        assert second.message == "Proof has already been used (nullifier reuse detected)"

    @pytest.mark.asyncio
    async def test_failed_verification_does_not_consume(
        self,
        nullifiers: InMemoryNullifierRegistry,
        proof: SimulatedProof,
    ) -> None:
        verifier = _verifier_at(nullifiers, proof, timedelta(hours=25))

        result = await verifier.verify(proof, "fp", consume_nullifier=True)

        assert result.status is ProofVerificationStatus.EXPIRED
        assert await nullifiers.count() == 0

    @pytest.mark.asyncio
    async def test_lost_race_reports_reuse(
        self,
        verifier: ProofVerifier,
        nullifiers: InMemoryNullifierRegistry,
        proof: SimulatedProof,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Another caller consumes the nullifier between the check and the add."""

        async def consumed_elsewhere(nullifier: str) -> bool:
            return False

        monkeypatch.setattr(nullifiers, "add_if_absent", consumed_elsewhere)

        result = await verifier.verify(proof, "fp", consume_nullifier=True)

        assert result.status is ProofVerificationStatus.NULLIFIER_REUSED
        assert result.nullifier_consumed is False


class TestStructureStage:
    @pytest.mark.asyncio
    async def test_unparseable_payload(self, verifier: ProofVerifier) -> None:
        result = await verifier.verify("{not json", "fp")

        assert result.status is ProofVerificationStatus.STRUCTURE_INVALID
        assert result.failed_stage is VerificationStage.STRUCTURE
        assert result.error_code is ErrorCode.PROOF_STRUCTURE_INVALID

    @pytest.mark.asyncio
    async def test_missing_fields(self, verifier: ProofVerifier) -> None:
        result = await verifier.verify({"proof": {}}, "fp")

        assert result.status is ProofVerificationStatus.STRUCTURE_INVALID

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "changes",
        [
            {"protocol": "plonk"},
            {"curve": "bls12-381"},
            {"pi_a": ["0xabc", "0xdef"]},
            {"pi_a": ["0xabc", "0xdef", "2"]},
            {"pi_c": ["0xabc", "not-hex", "1"]},
            {"pi_b": [["0xab", "0xcd"], ["0xab", "0xcd"], ["0", "1"]]},
            {"pi_b": [["0xab", "0xcd"], ["1", "0"]]},
        ],
    )
    async def test_malformed_points(
        self,
        verifier: ProofVerifier,
        proof: SimulatedProof,
        changes: dict[str, object],
    ) -> None:
        result = await verifier.verify(_with_points(proof, **changes), "fp")

        assert result.valid is False
        assert result.failed_stage is VerificationStage.STRUCTURE
        assert result.details.proof_valid is False


class TestSignalStages:
    @pytest.mark.asyncio
    async def test_too_few_signals(self, verifier: ProofVerifier, proof: SimulatedProof) -> None:
        result = await verifier.verify(_with_signals(proof, [proof.commitment]), "fp")

        assert result.failed_stage is VerificationStage.PUBLIC_SIGNALS

    @pytest.mark.asyncio
    async def test_short_nullifier(self, verifier: ProofVerifier, proof: SimulatedProof) -> None:
        signals = [proof.commitment, proof.nullifier[:40], *proof.public_signals[2:]]

        result = await verifier.verify(_with_signals(proof, signals), "fp")

        assert result.failed_stage is VerificationStage.PUBLIC_SIGNALS

    @pytest.mark.asyncio
    async def test_short_commitment(self, verifier: ProofVerifier, proof: SimulatedProof) -> None:
        signals = [proof.commitment[:20], *proof.public_signals[1:]]

        result = await verifier.verify(_with_signals(proof, signals), "fp")

        assert result.status is ProofVerificationStatus.COMMITMENT_INVALID
        assert result.failed_stage is VerificationStage.COMMITMENT
        assert result.details.nullifier_unique is True

    @pytest.mark.asyncio
    async def test_commitment_equal_to_nullifier(self, verifier: ProofVerifier, proof: SimulatedProof) -> None:
        signals = [proof.nullifier, *proof.public_signals[1:]]

        result = await verifier.verify(_with_signals(proof, signals), "fp")

        assert result.failed_stage is VerificationStage.COMMITMENT

    @pytest.mark.asyncio
    async def test_disclosure_not_signalled(self, verifier: ProofVerifier, proof: SimulatedProof) -> None:
        signals = proof.public_signals[:2]

        result = await verifier.verify(_with_signals(proof, signals), "fp")

        assert result.status is ProofVerificationStatus.DISCLOSURES_INVALID
        assert result.failed_stage is VerificationStage.DISCLOSURES
        assert result.details.commitment_valid is True

    @pytest.mark.asyncio
    async def test_reused_nullifier_checked_before_commitment(
        self,
        verifier: ProofVerifier,
        nullifiers: InMemoryNullifierRegistry,
        proof: SimulatedProof,
    ) -> None:
        await nullifiers.add(proof.nullifier)
        signals = [proof.commitment[:20], *proof.public_signals[1:]]

        result = await verifier.verify(_with_signals(proof, signals), "fp")

        assert result.failed_stage is VerificationStage.NULLIFIER


class TestFreshnessStage:
    @pytest.mark.asyncio
    async def test_expired_after_25_hours(self, nullifiers: InMemoryNullifierRegistry, proof: SimulatedProof) -> None:
        verifier = _verifier_at(nullifiers, proof, timedelta(hours=25))

        result = await verifier.verify(proof, "fp")

        assert result.valid is False
        assert result.status is ProofVerificationStatus.EXPIRED
        assert result.failed_stage is VerificationStage.FRESHNESS
        assert result.error_code is ErrorCode.PROOF_EXPIRED
        assert result.message == "Proof has expired (older than 24 hours)"

    @pytest.mark.asyncio
    async def test_fresh_after_1_hour(self, nullifiers: InMemoryNullifierRegistry, proof: SimulatedProof) -> None:
        verifier = _verifier_at(nullifiers, proof, timedelta(hours=1))

        result = await verifier.verify(proof, "fp")

        assert result.valid is True

    @pytest.mark.asyncio
    async def test_future_dated_within_skew(self, nullifiers: InMemoryNullifierRegistry, proof: SimulatedProof) -> None:
        verifier = _verifier_at(nullifiers, proof, -timedelta(seconds=60))

        assert (await verifier.verify(proof, "fp")).valid

    @pytest.mark.asyncio
    async def test_future_dated_beyond_skew(self, nullifiers: InMemoryNullifierRegistry, proof: SimulatedProof) -> None:
        verifier = _verifier_at(nullifiers, proof, -timedelta(hours=1))

        result = await verifier.verify(proof, "fp")

        assert result.status is ProofVerificationStatus.NOT_YET_VALID
        assert result.failed_stage is VerificationStage.FRESHNESS
        assert result.error_code is ErrorCode.PROOF_STRUCTURE_INVALID
