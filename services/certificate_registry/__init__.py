"""
Certificate Registry Service
============================

HTTP wrapper over the certificate ledger and the proof engine.

This service provides:
- Document storage with content fingerprints
- Selective-disclosure proof generation and verification
- Certificate issuance, verification and lifecycle changes
- Ledger explorer (blocks, transactions, events, stats, integrity)

Version: 0.1.0
"""

__version__ = "0.1.0"
