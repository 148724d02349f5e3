"""
Blob Store
==========

Content-addressed storage for uploaded documents.

Locators are CIDv1 strings (raw codec, SHA-256 multihash, base32 multibase),
so the same bytes always map to the same locator.

Version: 0.1.0
"""

import asyncio
import base64
import hashlib
from abc import ABC, abstractmethod
from datetime import UTC, datetime

from pydantic import BaseModel, Field

from shared.config import settings
from shared.logging import get_logger


logger = get_logger(__name__)

# CIDv1 header: version 1, raw codec (0x55), sha2-256 (0x12), 32-byte digest
_CID_V1_RAW_SHA256 = bytes([0x01, 0x55, 0x12, 0x20])


def compute_locator(data: bytes) -> str:
    """Derive the CIDv1 locator for content."""
    digest = hashlib.sha256(data).digest()
    encoded = base64.b32encode(_CID_V1_RAW_SHA256 + digest).decode("ascii")
    return "b" + encoded.lower().rstrip("=")


class BlobMetadata(BaseModel):
    """What is known about a stored blob."""

    locator: str
    size: int = Field(..., ge=0)
    filename: str | None = None
    content_type: str | None = None
    uploaded_by: str | None = None
    uploaded_at: datetime = Field(default_factory=lambda: datetime.now(UTC))


class BlobStore(ABC):
    """Abstract content-addressed blob store."""

    @abstractmethod
    async def store(
        self,
        data: bytes,
        filename: str | None = None,
        content_type: str | None = None,
        uploaded_by: str | None = None,
    ) -> str:
        """
        Store content.

        Returns:
            The content locator
        """
        ...

    @abstractmethod
    async def retrieve(self, locator: str) -> bytes | None:
        """Fetch content by locator, or None if unknown."""
        ...

    @abstractmethod
    async def get_metadata(self, locator: str) -> BlobMetadata | None:
        ...

    def gateway_url(self, locator: str) -> str:
        """Public gateway URL for a locator."""
        return f"{settings.blob_store.gateway_url.rstrip('/')}/{locator}"


class InMemoryBlobStore(BlobStore):
    """
    Process-local blob store.

    Data is stored in memory and lost on restart.
    """

    def __init__(self) -> None:
        self._blobs: dict[str, bytes] = {}
        self._metadata: dict[str, BlobMetadata] = {}
        self._lock = asyncio.Lock()

    async def store(
        self,
        data: bytes,
        filename: str | None = None,
        content_type: str | None = None,
        uploaded_by: str | None = None,
    ) -> str:
        locator = compute_locator(data)
        async with self._lock:
            if locator not in self._blobs:
                self._blobs[locator] = data
                self._metadata[locator] = BlobMetadata(
                    locator=locator,
                    size=len(data),
                    filename=filename,
                    content_type=content_type,
                    uploaded_by=uploaded_by,
                )

        logger.info("blob_stored", locator=locator, size=len(data), filename=filename)
        return locator

    async def retrieve(self, locator: str) -> bytes | None:
        return self._blobs.get(locator)

    async def get_metadata(self, locator: str) -> BlobMetadata | None:
        return self._metadata.get(locator)

    async def clear(self) -> None:
        """Drop all blobs (for testing)."""
        async with self._lock:
            self._blobs.clear()
            self._metadata.clear()
        logger.debug("blob_store_cleared")
