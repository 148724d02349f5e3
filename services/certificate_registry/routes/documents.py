"""
Document Storage Routes
=======================

Upload documents to the blob store and obtain their fingerprint.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import Base64Bytes, BaseModel, Field

from services.certificate_registry.dependencies import Registry
from shared.auth import User, get_current_user, require_issuer
from shared.hashing import hash_bytes
from shared.logging import get_logger
from shared.storage import BlobMetadata


logger = get_logger(__name__)
router = APIRouter()


class DocumentUpload(BaseModel):
    """Base64-encoded document upload."""

    content: Base64Bytes = Field(..., description="Document bytes, base64 encoded")
    filename: str | None = None
    content_type: str | None = None


class DocumentStored(BaseModel):
    document_fingerprint: str
    storage_locator: str
    size: int
    gateway_url: str


@router.post("", response_model=DocumentStored, status_code=status.HTTP_201_CREATED)
async def store_document(
    upload: DocumentUpload,
    registry: Registry,
    user: Annotated[User, Depends(require_issuer)],
) -> DocumentStored:
    """Store a document and return its fingerprint and locator."""
    fingerprint = hash_bytes(upload.content)
    locator = await registry.blob_store.store(
        upload.content,
        filename=upload.filename,
        content_type=upload.content_type,
        uploaded_by=user.id,
    )

    logger.info("document_stored", document_fingerprint=fingerprint, storage_locator=locator)

    return DocumentStored(
        document_fingerprint=fingerprint,
        storage_locator=locator,
        size=len(upload.content),
        gateway_url=registry.blob_store.gateway_url(locator),
    )


@router.get("/{locator}", response_model=BlobMetadata)
async def get_document_metadata(
    locator: str,
    registry: Registry,
    _: Annotated[User, Depends(get_current_user)],
) -> BlobMetadata:
    """Get metadata for a stored document."""
    metadata = await registry.blob_store.get_metadata(locator)
    if metadata is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Document not found: {locator}",
        )
    return metadata
