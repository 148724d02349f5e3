"""
Common Models
=============

Response envelopes and pagination shared by the HTTP services.

Version: 0.1.0
"""

from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

from shared.errors import ErrorCode

T = TypeVar("T")


class ErrorResponse(BaseModel):
    """Body returned by the service exception handlers."""

    success: bool = False
    error: str
    status_code: int
    error_code: ErrorCode | None = None


class HealthResponse(BaseModel):
    """Service health check response."""

    status: str = "healthy"
    service: str
    version: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    # Component health
    components: dict[str, dict[str, Any]] = Field(default_factory=dict)


class Pagination(BaseModel):
    """Pagination parameters."""

    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=50, ge=1, le=500)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


class PaginatedResponse(BaseModel, Generic[T]):
    """One page of a ledger listing."""

    items: list[T]
    total: int
    page: int = 1
    page_size: int = 50
    pages: int = 1

    @classmethod
    def from_items(cls, items: Sequence[T], pagination: Pagination) -> "PaginatedResponse[T]":
        """Slice a full listing into the requested page."""
        total = len(items)
        start = pagination.offset
        return cls(
            items=list(items[start : start + pagination.page_size]),
            total=total,
            page=pagination.page,
            page_size=pagination.page_size,
            pages=max(1, -(-total // pagination.page_size)),
        )
