"""
Verification Orchestrator
=========================

Composes the ledger lookup, the proof verifier and the nullifier registry
into one verification decision.

The proof verifier runs as the last gate of the ledger's verify call with
consume_nullifier=True. Not-found, revoked and suspended certificates return
before the verifier is touched, and a nullifier is consumed only once every
earlier check has passed.

Version: 0.1.0
"""

from typing import Any

from pydantic import BaseModel, Field

from shared.errors import ErrorCode
from shared.ledger import (
    Block,
    CertificateLedger,
    CertificateRecord,
    CertificateStatus,
    ContractEvent,
    Transaction,
)
from shared.logging import get_logger
from shared.zk import (
    DisclosedAttribute,
    ProofVerificationResult,
    ProofVerifier,
    SimulatedProof,
)


logger = get_logger(__name__)


class CertificateVerificationOutcome(BaseModel):
    """Composite result of an end-to-end certificate verification."""

    valid: bool
    message: str
    error_code: ErrorCode | None = None
    status: CertificateStatus | None = Field(default=None, description="Ledger status of the certificate")
    certificate: CertificateRecord | None = None
    proof_result: ProofVerificationResult | None = None
    disclosures: list[DisclosedAttribute] = Field(default_factory=list)
    transaction: Transaction
    block: Block
    events: list[ContractEvent] = Field(default_factory=list)


class VerificationOrchestrator:
    """
    End-to-end certificate verification.

    Usage:
        orchestrator = VerificationOrchestrator(ledger, verifier)
        outcome = await orchestrator.verify_certificate(fingerprint, proof, "employer")
    """

    def __init__(self, ledger: CertificateLedger, verifier: ProofVerifier):
        self.ledger = ledger
        self.verifier = verifier

    async def verify_certificate(
        self,
        document_fingerprint: str,
        proof: SimulatedProof | dict[str, Any] | str | None,
        verifier_id: str,
        require_proof: bool = True,
    ) -> CertificateVerificationOutcome:
        """
        Verify a certificate and its proof.

        Args:
            document_fingerprint: Fingerprint of the certificate's document
            proof: Proof presented by the holder
            verifier_id: Who is verifying
            require_proof: Reject when no proof is presented

        Returns:
            CertificateVerificationOutcome with the ledger status, the
            proof-level result and the disclosed attributes
        """

        async def check_proof(parsed: SimulatedProof) -> ProofVerificationResult:
            return await self.verifier.verify(parsed, document_fingerprint, consume_nullifier=True)

        result = await self.ledger.verify(
            document_fingerprint,
            proof,
            verifier_id,
            require_proof=require_proof,
            proof_check=check_proof,
        )

        disclosures = result.proof_result.disclosed_attributes if result.proof_result else []

        logger.info(
            "certificate_verification_completed",
            document_fingerprint=document_fingerprint,
            verifier=verifier_id,
            valid=result.valid,
            status=result.status.value if result.status else None,
            proof_checked=result.proof_result is not None,
            disclosures=[d.key for d in disclosures],
        )

        return CertificateVerificationOutcome(
            valid=result.valid,
            message=result.message,
            error_code=result.error_code,
            status=result.status,
            certificate=result.certificate,
            proof_result=result.proof_result,
            disclosures=disclosures,
            transaction=result.transaction,
            block=result.block,
            events=result.events,
        )
