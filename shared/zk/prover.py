"""
Simulated Proof Generation
==========================

Generates selective-disclosure proofs bound to a document fingerprint.

The commitment is a SHA-256 chain over the private inputs and a fresh salt,
the nullifier a salted hash of the fingerprint. Curve points are field-element
shaped hashes so the output matches the snarkjs Groth16 layout.

Version: 2.0.0
"""

import secrets
import time
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from shared.config import settings
from shared.config.settings import ProofSettings
from shared.hashing import canonical_json, hash_string
from shared.logging import get_logger
from shared.zk.circuits import DISCLOSURE_CATALOG, get_circuit_for_category
from shared.zk.models import (
    DisclosedAttribute,
    ProofPoints,
    ProofRequest,
    SimulatedProof,
    SimulatedProofMetadata,
)


logger = get_logger(__name__)

# Field elements keep 62 hex digits (248 bits) to stay under the BN254 order
FIELD_ELEMENT_HEX_DIGITS = 62


def field_element(seed: str) -> str:
    """Derive a field-element shaped value from a seed string."""
    return "0x" + hash_string(seed)[:FIELD_ELEMENT_HEX_DIGITS]


def commitment_chain(inputs: list[str]) -> str:
    """
    Fold inputs into a single commitment.

    Each step hashes the previous digest concatenated with the next input.
    """
    combined = ""
    for item in inputs:
        combined = hash_string(combined + item)
    return "0x" + combined


def derive_nullifier(document_fingerprint: str, salt: str) -> str:
    """Derive the single-use nullifier for a fingerprint and salt."""
    return "0x" + hash_string(document_fingerprint + salt + "nullifier")


def build_disclosures(
    document_data: dict[str, Any],
    selected_disclosures: list[str],
) -> list[DisclosedAttribute]:
    """
    Build disclosed attributes for the requested keys.

    Keys missing from the catalogue are skipped.
    """
    disclosed: list[DisclosedAttribute] = []
    seen: set[str] = set()

    for key in selected_disclosures:
        spec = DISCLOSURE_CATALOG.get(key)
        if spec is None or key in seen:
            continue
        seen.add(key)

        value = spec.resolve_value(document_data)
        disclosed.append(
            DisclosedAttribute(
                key=spec.key,
                label=spec.label,
                value=value,
                proof_element=field_element(spec.seed_for(value)),
            )
        )

    return disclosed


class CertificateProver:
    """
    Simulated proof generator for certificate verification.

    Usage:
        prover = CertificateProver()

        proof = await prover.generate(
            ProofRequest(
                document_fingerprint="ab12...",
                document_type="passport",
                document_category="identity",
                holder_name="Jane Doe",
                selected_disclosures=["ageOver18"],
            )
        )
    """

    def __init__(self, proof_settings: ProofSettings | None = None):
        """
        Initialize the prover.

        Args:
            proof_settings: Protocol tags and version.
                      Defaults to the global settings.
        """
        self.config = proof_settings or settings.proof

    def _generate_salt(self) -> str:
        """Generate a fresh 32-byte random salt as hex."""
        return secrets.token_hex(32)

    async def generate(self, request: ProofRequest) -> SimulatedProof:
        """
        Generate a selective-disclosure proof.

        Args:
            request: Document fingerprint, holder fields, attributes
                and the disclosure keys to reveal

        Returns:
            SimulatedProof ready to embed in a certificate record
        """
        start_time = time.perf_counter()

        salt = self._generate_salt()
        commitment = commitment_chain(
            [
                request.document_fingerprint,
                request.holder_name,
                request.holder_dob or "",
                canonical_json(request.document_data),
                salt,
            ]
        )
        nullifier = derive_nullifier(request.document_fingerprint, salt)

        circuit_type = get_circuit_for_category(request.document_category)
        disclosures = build_disclosures(request.document_data, request.selected_disclosures)

        pi_a = (
            field_element(commitment + "a1"),
            field_element(commitment + "a2"),
            "1",
        )
        pi_b = (
            (field_element(nullifier + "b11"), field_element(nullifier + "b12")),
            (field_element(nullifier + "b21"), field_element(nullifier + "b22")),
            ("1", "0"),
        )
        pi_c = (
            field_element(salt + "c1"),
            field_element(salt + "c2"),
            "1",
        )

        proof = SimulatedProof(
            proof=ProofPoints(
                pi_a=pi_a,
                pi_b=pi_b,
                pi_c=pi_c,
                protocol=self.config.protocol,
                curve=self.config.curve,
            ),
            public_signals=(commitment, nullifier, *(d.proof_element for d in disclosures)),
            metadata=SimulatedProofMetadata(
                circuit_type=circuit_type,
                generated_at=datetime.now(UTC),
                version=self.config.version,
                disclosures=tuple(disclosures),
            ),
        )

        proving_time_ms = int((time.perf_counter() - start_time) * 1000)
        logger.info(
            "proof_generated",
            circuit=circuit_type.value,
            document_type=request.document_type,
            disclosures=[d.key for d in disclosures],
            ignored_disclosures=[k for k in request.selected_disclosures if k not in DISCLOSURE_CATALOG],
            proving_time_ms=proving_time_ms,
        )

        return proof


def serialize_proof(proof: SimulatedProof) -> str:
    """Serialize a proof for storage/transmission."""
    return proof.to_json()


def deserialize_proof(proof_json: str) -> SimulatedProof:
    """Deserialize a proof from storage/transmission."""
    return SimulatedProof.from_json(proof_json)


def describe_disclosures(disclosures: Sequence[DisclosedAttribute]) -> list[str]:
    """Get human-readable descriptions of disclosed attributes."""
    descriptions = []
    for d in disclosures:
        if isinstance(d.value, bool):
            descriptions.append(f"{d.label}: Verified" if d.value else f"{d.label}: Not verified")
        else:
            descriptions.append(f"{d.label}: {d.value}")
    return descriptions
