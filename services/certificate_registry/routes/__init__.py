"""
Certificate Registry Routes
===========================

API route handlers for the certificate registry service.
"""

from services.certificate_registry.routes import certificates, documents, ledger, proofs


__all__ = ["certificates", "documents", "ledger", "proofs"]
