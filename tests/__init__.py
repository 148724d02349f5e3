"""
ZK-Vault Test Suite
===================

Test organization:
- tests/unit/                       - Core library tests (no external services)
- tests/services/certificate_registry/ - HTTP API tests over ASGI

Run tests:
    pytest                          # All tests
    pytest tests/unit               # Unit tests only
"""
