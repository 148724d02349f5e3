"""
Hashing Module
==============

Deterministic SHA-256 content fingerprints for documents, proofs,
transactions and blocks.

Usage:
    from shared.hashing import hash_bytes, hash_object

    fingerprint = hash_bytes(document_bytes)
    proof_fingerprint = hash_object(proof)
"""

from shared.hashing.hasher import (
    HASH_ALGORITHM,
    canonical_json,
    hash_bytes,
    hash_object,
    hash_string,
    verify_hash,
)


__all__ = [
    "HASH_ALGORITHM",
    "canonical_json",
    "hash_bytes",
    "hash_object",
    "hash_string",
    "verify_hash",
]
