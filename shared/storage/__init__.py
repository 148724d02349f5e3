"""
Storage Module
==============

Content-addressed document storage.

Usage:
    from shared.storage import InMemoryBlobStore

    store = InMemoryBlobStore()
    locator = await store.store(document_bytes, filename="degree.pdf")
"""

from shared.storage.blob import (
    BlobMetadata,
    BlobStore,
    InMemoryBlobStore,
    compute_locator,
)


__all__ = [
    "BlobMetadata",
    "BlobStore",
    "InMemoryBlobStore",
    "compute_locator",
]
