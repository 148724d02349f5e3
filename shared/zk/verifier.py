"""
Simulated Proof Verification
============================

Verifies selective-disclosure proofs in six ordered stages:

1. Structure        - placeholder curve points and protocol tags
2. Public signals   - commitment/nullifier present and well formed
3. Nullifier        - not previously consumed (replay protection)
4. Commitment       - hard shape gate on the commitment
5. Disclosures      - every disclosed attribute is well formed and signalled
6. Freshness        - generated within the validity window

The first failing stage ends verification. The registry is only written when
every stage passes and the caller asks for the nullifier to be consumed.

Version: 2.0.0
"""

import re
import time
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

from pydantic import ValidationError

from shared.config import settings
from shared.config.settings import ProofSettings
from shared.logging import get_logger
from shared.zk.models import (
    ProofCheckDetails,
    ProofVerificationResult,
    ProofVerificationStatus,
    SimulatedProof,
    VerificationStage,
)
from shared.zk.nullifiers import NullifierRegistry


logger = get_logger(__name__)

HASH_SIGNAL_RE = re.compile(r"^0x[0-9a-fA-F]{64}$")
FIELD_ELEMENT_RE = re.compile(r"^0x[0-9a-fA-F]{1,64}$")


def _verify_point_format(point: tuple[str, ...], expected_length: int) -> bool:
    if len(point) != expected_length:
        return False
    return all(p in ("0", "1") or FIELD_ELEMENT_RE.match(p) for p in point)


class ProofVerifier:
    """
    Simulated proof verifier.

    Usage:
        verifier = ProofVerifier(InMemoryNullifierRegistry())
        result = await verifier.verify(proof, fingerprint, consume_nullifier=True)
    """

    def __init__(
        self,
        nullifiers: NullifierRegistry,
        proof_settings: ProofSettings | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """
        Initialize the verifier.

        Args:
            nullifiers: Registry of consumed nullifiers
            proof_settings: Protocol tags and validity window
            clock: Source of the current UTC time
        """
        self.nullifiers = nullifiers
        self.config = proof_settings or settings.proof
        self._clock = clock or (lambda: datetime.now(UTC))

    @property
    def validity_window(self) -> timedelta:
        return timedelta(hours=self.config.validity_hours)

    @staticmethod
    def parse(proof: SimulatedProof | dict[str, Any] | str) -> SimulatedProof | None:
        """Coerce a proof payload into a SimulatedProof, or None if malformed."""
        if isinstance(proof, SimulatedProof):
            return proof
        try:
            if isinstance(proof, str):
                return SimulatedProof.model_validate_json(proof)
            return SimulatedProof.model_validate(proof)
        except ValidationError:
            return None

    def _check_structure(self, proof: SimulatedProof) -> bool:
        points = proof.proof

        if not _verify_point_format(points.pi_a, 3):
            return False
        if len(points.pi_b) != 3 or not all(_verify_point_format(p, 2) for p in points.pi_b):
            return False
        if not _verify_point_format(points.pi_c, 3):
            return False

        if points.protocol != self.config.protocol or points.curve != self.config.curve:
            return False

        # Identity elements of the mock pairing
        if points.pi_a[2] != "1" or points.pi_c[2] != "1":
            return False
        return points.pi_b[2] == ("1", "0")

    @staticmethod
    def _check_public_signals(signals: tuple[str, ...]) -> bool:
        if len(signals) < 2:
            return False

        commitment, nullifier, *elements = signals
        if not commitment.startswith("0x") or not HASH_SIGNAL_RE.match(nullifier):
            return False
        return all(FIELD_ELEMENT_RE.match(e) for e in elements)

    @staticmethod
    def _check_commitment(commitment: str, nullifier: str) -> bool:
        return bool(HASH_SIGNAL_RE.match(commitment)) and commitment != nullifier

    @staticmethod
    def _check_disclosures(proof: SimulatedProof) -> bool:
        signalled = set(proof.public_signals[2:])
        return all(
            d.key
            and d.label
            and FIELD_ELEMENT_RE.match(d.proof_element)
            and d.proof_element in signalled
            for d in proof.metadata.disclosures
        )

    def _check_freshness(self, generated_at: datetime) -> ProofVerificationStatus:
        if generated_at.tzinfo is None:
            generated_at = generated_at.replace(tzinfo=UTC)

        age = self._clock() - generated_at
        if age > self.validity_window:
            return ProofVerificationStatus.EXPIRED
        if age < -timedelta(seconds=self.config.clock_skew_seconds):
            return ProofVerificationStatus.NOT_YET_VALID
        return ProofVerificationStatus.VALID

    async def verify(
        self,
        proof: SimulatedProof | dict[str, Any] | str,
        document_fingerprint: str,
        consume_nullifier: bool = False,
    ) -> ProofVerificationResult:
        """
        Verify a proof.

        Args:
            proof: Proof model, dict or JSON string
            document_fingerprint: Fingerprint of the document the proof is for
            consume_nullifier: Record the nullifier as used on success

        Returns:
            ProofVerificationResult naming the failed stage, if any
        """
        start_time = time.perf_counter()
        details = ProofCheckDetails()

        def finish(
            status: ProofVerificationStatus,
            message: str,
            stage: VerificationStage | None = None,
            parsed: SimulatedProof | None = None,
            consumed: bool = False,
        ) -> ProofVerificationResult:
            valid = status is ProofVerificationStatus.VALID
            result = ProofVerificationResult(
                valid=valid,
                status=status,
                message=message,
                failed_stage=stage,
                details=details,
                commitment=parsed.commitment if parsed else None,
                nullifier=parsed.nullifier if parsed else None,
                nullifier_consumed=consumed,
                disclosed_attributes=list(parsed.disclosures) if parsed and valid else [],
                verification_time_ms=int((time.perf_counter() - start_time) * 1000),
            )
            log = logger.info if valid else logger.warning
            log(
                "proof_verified" if valid else "proof_rejected",
                document_fingerprint=document_fingerprint,
                status=status.value,
                stage=stage.value if stage else None,
                nullifier_consumed=consumed,
            )
            return result

        # Stage 1: structure
        parsed = self.parse(proof)
        if parsed is None or not self._check_structure(parsed):
            return finish(
                ProofVerificationStatus.STRUCTURE_INVALID,
                "Pairing check failed - proof structure is invalid",
                VerificationStage.STRUCTURE,
                parsed,
            )
        details.proof_valid = True

        # Stage 2: public signals
        if not self._check_public_signals(parsed.public_signals):
            return finish(
                ProofVerificationStatus.PUBLIC_SIGNALS_INVALID,
                "Public signals verification failed",
                VerificationStage.PUBLIC_SIGNALS,
                parsed,
            )

        # Stage 3: nullifier uniqueness
        nullifier = parsed.nullifier
        if await self.nullifiers.has(nullifier):
            logger.warning("nullifier_reuse_detected", nullifier=nullifier)
            return finish(
                ProofVerificationStatus.NULLIFIER_REUSED,
                "Proof has already been used (nullifier reuse detected)",
                VerificationStage.NULLIFIER,
                parsed,
            )
        details.nullifier_unique = True

        # Stage 4: commitment
        if not self._check_commitment(parsed.commitment, nullifier):
            return finish(
                ProofVerificationStatus.COMMITMENT_INVALID,
                "Commitment verification failed",
                VerificationStage.COMMITMENT,
                parsed,
            )
        details.commitment_valid = True

        # Stage 5: disclosures
        if not self._check_disclosures(parsed):
            return finish(
                ProofVerificationStatus.DISCLOSURES_INVALID,
                "Disclosed attributes verification failed",
                VerificationStage.DISCLOSURES,
                parsed,
            )
        details.disclosures_verified = True

        # Stage 6: freshness
        freshness = self._check_freshness(parsed.metadata.generated_at)
        if freshness is ProofVerificationStatus.EXPIRED:
            return finish(
                freshness,
                f"Proof has expired (older than {self.config.validity_hours} hours)",
                VerificationStage.FRESHNESS,
                parsed,
            )
        if freshness is ProofVerificationStatus.NOT_YET_VALID:
            return finish(
                freshness,
                "Proof is dated in the future",
                VerificationStage.FRESHNESS,
                parsed,
            )

        if consume_nullifier and not await self.nullifiers.add_if_absent(nullifier):
            # Another verification consumed it after stage 3
            details.nullifier_unique = False
            logger.warning("nullifier_reuse_detected", nullifier=nullifier, concurrent=True)
            return finish(
                ProofVerificationStatus.NULLIFIER_REUSED,
                "Proof has already been used (nullifier reuse detected)",
                VerificationStage.NULLIFIER,
                parsed,
            )

        return finish(
            ProofVerificationStatus.VALID,
            "Proof verified successfully",
            parsed=parsed,
            consumed=consume_nullifier,
        )
