"""
Shared Models
=============

Response envelopes shared across ZK-Vault services.
"""

from shared.models.common import (
    ErrorResponse,
    HealthResponse,
    PaginatedResponse,
    Pagination,
)

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "PaginatedResponse",
    "Pagination",
]
