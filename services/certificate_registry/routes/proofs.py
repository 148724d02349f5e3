"""
Proof Routes
============

Generate selective-disclosure proofs and verify them standalone.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from services.certificate_registry.dependencies import Registry
from shared.auth import Role, User, require_roles, require_verifier
from shared.logging import get_logger
from shared.zk import (
    DISCLOSURE_CATALOG,
    ProofRequest,
    ProofVerificationResult,
    SimulatedProof,
    describe_disclosures,
)


logger = get_logger(__name__)
router = APIRouter()

require_prover = require_roles([Role.HOLDER, Role.ISSUER, Role.ADMIN])


class ProofResponse(BaseModel):
    proof: SimulatedProof
    descriptions: list[str] = Field(default_factory=list)


class ProofVerifyRequest(BaseModel):
    """Standalone proof verification."""

    proof: dict[str, Any] | str
    document_fingerprint: str
    consume_nullifier: bool = False


class DisclosureOption(BaseModel):
    key: str
    label: str
    description: str


@router.get("/disclosures", response_model=list[DisclosureOption])
async def list_disclosures() -> list[DisclosureOption]:
    """List the attributes a holder can disclose."""
    return [
        DisclosureOption(key=spec.key, label=spec.label, description=spec.description)
        for spec in DISCLOSURE_CATALOG.values()
    ]


@router.post("", response_model=ProofResponse)
async def generate_proof(
    request: ProofRequest,
    registry: Registry,
    _: Annotated[User, Depends(require_prover)],
) -> ProofResponse:
    """Generate a proof for a document."""
    proof = await registry.prover.generate(request)
    return ProofResponse(proof=proof, descriptions=describe_disclosures(proof.disclosures))


@router.post("/verify", response_model=ProofVerificationResult)
async def verify_proof(
    request: ProofVerifyRequest,
    registry: Registry,
    user: Annotated[User, Depends(require_verifier)],
) -> ProofVerificationResult:
    """
    Verify a proof without a ledger lookup.

    Failed verification is a normal 200 response with valid=false.
    """
    logger.info(
        "proof_verification_requested",
        verifier=user.id,
        document_fingerprint=request.document_fingerprint,
    )
    return await registry.verifier.verify(
        request.proof,
        request.document_fingerprint,
        consume_nullifier=request.consume_nullifier,
    )
