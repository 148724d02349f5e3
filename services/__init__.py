"""
ZK-Vault Services
=================

Services:
- certificate_registry: HTTP wrapper over the certificate ledger and proof engine
"""

__all__ = [
    "certificate_registry",
]
