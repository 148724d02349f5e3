"""
Simulated Proof Data Models
===========================

Pydantic models for selective-disclosure proofs.

The proof mimics the shape of a snarkjs Groth16 proof but is produced from
SHA-256 hash chains. It offers hash-preimage resistance only: there is no
succinctness, zero-knowledge or soundness guarantee behind the curve-point
placeholders.

Version: 2.0.0
"""

import json
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from shared.errors import ErrorCode


class CircuitType(str, Enum):
    """Circuit families, one per kind of claim."""

    DOCUMENT_VERIFICATION = "document_verification"
    AGE_VERIFICATION = "age_verification"
    IDENTITY_VERIFICATION = "identity_verification"
    CREDENTIAL_VERIFICATION = "credential_verification"


class ProofPoints(BaseModel):
    """
    Placeholder curve points.

    Compatible with the snarkjs Groth16 proof layout.
    """

    model_config = ConfigDict(frozen=True)

    # Proof points (G1 and G2 elements)
    pi_a: tuple[str, ...] = Field(..., description="Proof point A (G1)")
    pi_b: tuple[tuple[str, ...], ...] = Field(..., description="Proof point B (G2)")
    pi_c: tuple[str, ...] = Field(..., description="Proof point C (G1)")

    # Protocol info
    protocol: str = Field(default="groth16")
    curve: str = Field(default="bn128")


class DisclosedAttribute(BaseModel):
    """One attribute revealed by the holder."""

    model_config = ConfigDict(frozen=True)

    key: str
    label: str
    value: str | bool | int
    proof_element: str


class SimulatedProofMetadata(BaseModel):
    """Metadata about a generated proof."""

    model_config = ConfigDict(frozen=True)

    circuit_type: CircuitType
    generated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    version: str = "2.0.0"
    disclosures: tuple[DisclosedAttribute, ...] = ()


class SimulatedProof(BaseModel):
    """
    Complete selective-disclosure proof.

    public_signals holds [commitment, nullifier, *disclosure proof elements].
    """

    model_config = ConfigDict(frozen=True)

    proof: ProofPoints
    public_signals: tuple[str, ...]
    metadata: SimulatedProofMetadata

    @property
    def commitment(self) -> str:
        """Get the document commitment (first signal)."""
        return self.public_signals[0] if self.public_signals else ""

    @property
    def nullifier(self) -> str:
        """Get the single-use nullifier (second signal)."""
        return self.public_signals[1] if len(self.public_signals) > 1 else ""

    @property
    def disclosures(self) -> tuple[DisclosedAttribute, ...]:
        return self.metadata.disclosures

    def to_json(self) -> str:
        """Serialize for storage or transmission."""
        return self.model_dump_json()

    @classmethod
    def from_json(cls, data: str) -> "SimulatedProof":
        """Create from a JSON string."""
        return cls.model_validate(json.loads(data))


class ProofRequest(BaseModel):
    """Request to generate a proof for a document."""

    document_fingerprint: str = Field(..., min_length=1, description="Document content hash")
    document_type: str = Field(..., description="Document type id, e.g. degree")
    document_category: str = Field(..., description="educational, identity, professional, medical")
    document_data: dict[str, Any] = Field(default_factory=dict)
    holder_name: str
    holder_dob: str | None = None
    selected_disclosures: list[str] = Field(default_factory=list)


class VerificationStage(str, Enum):
    """Proof verification stages, in execution order."""

    STRUCTURE = "structure"
    PUBLIC_SIGNALS = "public_signals"
    NULLIFIER = "nullifier"
    COMMITMENT = "commitment"
    DISCLOSURES = "disclosures"
    FRESHNESS = "freshness"


class ProofVerificationStatus(str, Enum):
    """Outcome of proof verification."""

    VALID = "valid"
    STRUCTURE_INVALID = "structure_invalid"
    PUBLIC_SIGNALS_INVALID = "public_signals_invalid"
    NULLIFIER_REUSED = "nullifier_reused"
    COMMITMENT_INVALID = "commitment_invalid"
    DISCLOSURES_INVALID = "disclosures_invalid"
    EXPIRED = "expired"
    NOT_YET_VALID = "not_yet_valid"

    @property
    def error_code(self) -> ErrorCode | None:
        """Map the status onto the error taxonomy."""
        if self is ProofVerificationStatus.VALID:
            return None
        if self is ProofVerificationStatus.EXPIRED:
            return ErrorCode.PROOF_EXPIRED
        if self is ProofVerificationStatus.NULLIFIER_REUSED:
            return ErrorCode.NULLIFIER_REUSED
        return ErrorCode.PROOF_STRUCTURE_INVALID


class ProofCheckDetails(BaseModel):
    """Per-check flags reported with every verification."""

    proof_valid: bool = False
    commitment_valid: bool = False
    nullifier_unique: bool = False
    disclosures_verified: bool = False


class ProofVerificationResult(BaseModel):
    """Result of proof verification."""

    valid: bool
    status: ProofVerificationStatus
    message: str
    failed_stage: VerificationStage | None = None
    details: ProofCheckDetails = Field(default_factory=ProofCheckDetails)
    commitment: str | None = None
    nullifier: str | None = None
    nullifier_consumed: bool = False
    disclosed_attributes: list[DisclosedAttribute] = Field(default_factory=list)
    verified_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    verification_time_ms: int = Field(default=0, ge=0)

    @property
    def error_code(self) -> ErrorCode | None:
        return self.status.error_code
