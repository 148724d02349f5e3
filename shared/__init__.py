"""
ZK-Vault Shared Library
=======================

Certificate ledger and proof verification core, plus the utilities the
services share.

Modules:
    - config: Configuration management with Pydantic Settings
    - logging: Structured logging with structlog
    - hashing: Canonical SHA-256 fingerprints
    - zk: Simulated selective-disclosure proofs and nullifier registry
    - ledger: Append-only certificate ledger
    - verification: End-to-end certificate verification
    - storage: Content-addressed blob store
    - auth: JWT authentication and roles
    - database: Redis client

Version: 0.1.0
"""

__version__ = "0.1.0"
__author__ = "ZK-Vault Team"

from shared.config import settings
from shared.logging import get_logger, setup_logging

__all__ = [
    "settings",
    "get_logger",
    "setup_logging",
    "__version__",
]
