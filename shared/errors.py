"""
Error Taxonomy
==============

Error codes and exceptions shared by the ledger, the proof engine and the
verification orchestrator.

Business failures (duplicate issuance, illegal transitions, invalid proofs)
travel as typed results carrying an ErrorCode. The exceptions below are
raised only inside the core and converted at the ledger boundary, except
EncodingError which surfaces to callers of the hasher.

Version: 0.1.0
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Machine-readable failure codes."""

    DUPLICATE_FINGERPRINT = "duplicate_fingerprint"
    NOT_FOUND = "not_found"
    INVALID_STATE_TRANSITION = "invalid_state_transition"
    PROOF_STRUCTURE_INVALID = "proof_structure_invalid"
    PROOF_EXPIRED = "proof_expired"
    NULLIFIER_REUSED = "nullifier_reused"
    ENCODING_ERROR = "encoding_error"
    PROOF_MISMATCH = "proof_mismatch"
    PROOF_REQUIRED = "proof_required"
    CERTIFICATE_REVOKED = "certificate_revoked"
    CERTIFICATE_SUSPENDED = "certificate_suspended"


class ZKVaultError(Exception):
    """Base class for core errors."""

    code: ErrorCode

    def __init__(self, message: str, code: ErrorCode | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class EncodingError(ZKVaultError):
    """Input could not be canonicalized for hashing."""

    code = ErrorCode.ENCODING_ERROR


class InvalidStateTransition(ZKVaultError):
    """A lifecycle transition is not allowed from the current status."""

    code = ErrorCode.INVALID_STATE_TRANSITION
