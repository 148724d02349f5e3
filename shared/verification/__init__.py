"""
Verification Module
===================

End-to-end certificate verification.

Usage:
    from shared.verification import VerificationOrchestrator

    orchestrator = VerificationOrchestrator(ledger, verifier)
    outcome = await orchestrator.verify_certificate(fingerprint, proof, "employer")
"""

from shared.verification.orchestrator import (
    CertificateVerificationOutcome,
    VerificationOrchestrator,
)


__all__ = [
    "CertificateVerificationOutcome",
    "VerificationOrchestrator",
]
