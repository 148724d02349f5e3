"""
Selective-Disclosure Proof Module
=================================

Simulated proof generation and verification for certificate holders.

Usage:
    from shared.zk import CertificateProver, ProofRequest, ProofVerifier

    # Generate a proof
    prover = CertificateProver()
    proof = await prover.generate(
        ProofRequest(
            document_fingerprint=fingerprint,
            document_type="degree",
            document_category="educational",
            holder_name="Jane Doe",
            selected_disclosures=["degreeVerified"],
        )
    )

    # Verify proof
    verifier = ProofVerifier(InMemoryNullifierRegistry())
    result = await verifier.verify(proof, fingerprint, consume_nullifier=True)

Version: 2.0.0
"""

from shared.zk.circuits import (
    CIRCUIT_CONFIGS,
    DISCLOSURE_CATALOG,
    CircuitConfig,
    DisclosureSpec,
    get_circuit_for_category,
)
from shared.zk.models import (
    CircuitType,
    DisclosedAttribute,
    ProofCheckDetails,
    ProofPoints,
    ProofRequest,
    ProofVerificationResult,
    ProofVerificationStatus,
    SimulatedProof,
    SimulatedProofMetadata,
    VerificationStage,
)
from shared.zk.nullifiers import (
    InMemoryNullifierRegistry,
    NullifierRegistry,
    RedisNullifierRegistry,
)
from shared.zk.prover import (
    CertificateProver,
    build_disclosures,
    describe_disclosures,
    deserialize_proof,
    serialize_proof,
)
from shared.zk.verifier import ProofVerifier


__all__ = [
    # Prover
    "CertificateProver",
    "build_disclosures",
    "describe_disclosures",
    "serialize_proof",
    "deserialize_proof",
    # Verifier
    "ProofVerifier",
    # Nullifiers
    "NullifierRegistry",
    "InMemoryNullifierRegistry",
    "RedisNullifierRegistry",
    # Circuits
    "CircuitConfig",
    "CIRCUIT_CONFIGS",
    "DisclosureSpec",
    "DISCLOSURE_CATALOG",
    "get_circuit_for_category",
    # Models
    "CircuitType",
    "DisclosedAttribute",
    "ProofCheckDetails",
    "ProofPoints",
    "ProofRequest",
    "ProofVerificationResult",
    "ProofVerificationStatus",
    "SimulatedProof",
    "SimulatedProofMetadata",
    "VerificationStage",
]
