"""
Certificate Routes
==================

Issue, verify, revoke, suspend, reinstate and query certificates.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from services.certificate_registry.dependencies import Registry
from shared.auth import User, get_current_user, require_admin, require_issuer, require_verifier
from shared.errors import ErrorCode
from shared.ledger import CertificateRecord, ContractEvent, IssueResult, MutationResult
from shared.logging import get_logger
from shared.models import PaginatedResponse, Pagination
from shared.verification import CertificateVerificationOutcome
from shared.zk import SimulatedProof


logger = get_logger(__name__)
router = APIRouter()

_FAILURE_STATUS: dict[ErrorCode, int] = {
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.DUPLICATE_FINGERPRINT: status.HTTP_409_CONFLICT,
    ErrorCode.INVALID_STATE_TRANSITION: status.HTTP_409_CONFLICT,
}


class LedgerCallFailed(HTTPException):
    """A ledger call returned a business failure."""

    def __init__(self, status_code: int, detail: str, error_code: ErrorCode | None) -> None:
        super().__init__(status_code=status_code, detail=detail)
        self.error_code = error_code


def _raise_for_failure(result: IssueResult | MutationResult) -> None:
    if result.success:
        return
    status_code = _FAILURE_STATUS.get(result.error_code, status.HTTP_400_BAD_REQUEST)  # type: ignore[arg-type]
    raise LedgerCallFailed(status_code, result.message, result.error_code)


# ============================================================================
# Request Models
# ============================================================================


class IssueCertificateRequest(BaseModel):
    document_fingerprint: str = Field(..., min_length=1)
    storage_locator: str
    proof: SimulatedProof
    holder: str
    document_type: str
    document_category: str
    metadata: dict[str, Any] = Field(default_factory=dict)


class VerifyCertificateRequest(BaseModel):
    document_fingerprint: str
    proof: dict[str, Any] | str | None = None
    require_proof: bool = True


class StatusChangeRequest(BaseModel):
    reason: str = Field(..., min_length=1)


class ReinstateRequest(BaseModel):
    reason: str = "Reinstated"


# ============================================================================
# Contract Calls
# ============================================================================


@router.post("", response_model=IssueResult, status_code=status.HTTP_201_CREATED)
async def issue_certificate(
    request: IssueCertificateRequest,
    registry: Registry,
    user: Annotated[User, Depends(require_issuer)],
) -> IssueResult:
    """Issue a certificate. 409 if an active certificate has the fingerprint."""
    result = await registry.ledger.issue(
        document_fingerprint=request.document_fingerprint,
        storage_locator=request.storage_locator,
        proof=request.proof,
        issuer=user.actor,
        holder=request.holder,
        document_type=request.document_type,
        document_category=request.document_category,
        metadata=request.metadata,
    )
    _raise_for_failure(result)
    return result


@router.post("/verify", response_model=CertificateVerificationOutcome)
async def verify_certificate(
    request: VerifyCertificateRequest,
    registry: Registry,
    user: Annotated[User, Depends(require_verifier)],
) -> CertificateVerificationOutcome:
    """
    Verify a certificate end to end.

    An invalid certificate or proof is a normal 200 response with valid=false.
    """
    return await registry.orchestrator.verify_certificate(
        request.document_fingerprint,
        request.proof,
        user.actor,
        require_proof=request.require_proof,
    )


@router.post("/{fingerprint}/revoke", response_model=MutationResult)
async def revoke_certificate(
    fingerprint: str,
    request: StatusChangeRequest,
    registry: Registry,
    user: Annotated[User, Depends(require_admin)],
) -> MutationResult:
    result = await registry.ledger.revoke(fingerprint, user.actor, request.reason)
    _raise_for_failure(result)
    return result


@router.post("/{fingerprint}/suspend", response_model=MutationResult)
async def suspend_certificate(
    fingerprint: str,
    request: StatusChangeRequest,
    registry: Registry,
    user: Annotated[User, Depends(require_admin)],
) -> MutationResult:
    result = await registry.ledger.suspend(fingerprint, user.actor, request.reason)
    _raise_for_failure(result)
    return result


@router.post("/{fingerprint}/reinstate", response_model=MutationResult)
async def reinstate_certificate(
    fingerprint: str,
    request: ReinstateRequest,
    registry: Registry,
    user: Annotated[User, Depends(require_admin)],
) -> MutationResult:
    result = await registry.ledger.reinstate(fingerprint, user.actor, request.reason)
    _raise_for_failure(result)
    return result


# ============================================================================
# Queries
# ============================================================================


@router.get("", response_model=PaginatedResponse[CertificateRecord])
async def list_certificates(
    registry: Registry,
    _: Annotated[User, Depends(get_current_user)],
    issuer: str | None = None,
    holder: str | None = None,
    category: str | None = None,
    storage_locator: str | None = None,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=50, ge=1, le=500),
) -> PaginatedResponse[CertificateRecord]:
    """List certificates, optionally filtered."""
    if issuer:
        records = await registry.ledger.get_certificates_by_issuer(issuer)
    elif holder:
        records = await registry.ledger.get_certificates_by_holder(holder)
    elif category:
        records = await registry.ledger.get_certificates_by_category(category)
    elif storage_locator:
        records = await registry.ledger.get_certificates_by_storage_locator(storage_locator)
    else:
        records = await registry.ledger.get_all_certificates()

    # Remaining filters narrow the first one
    if holder:
        records = [r for r in records if r.holder == holder]
    if category:
        records = [r for r in records if r.document_category == category]
    if storage_locator:
        records = [r for r in records if r.storage_locator == storage_locator]

    return PaginatedResponse[CertificateRecord].from_items(
        records, Pagination(page=page, page_size=page_size)
    )


async def _get_or_404(registry: Registry, fingerprint: str) -> CertificateRecord:
    record = await registry.ledger.get_certificate_by_fingerprint(fingerprint)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Certificate not found: {fingerprint}",
        )
    return record


@router.get("/{fingerprint}", response_model=CertificateRecord)
async def get_certificate(
    fingerprint: str,
    registry: Registry,
    _: Annotated[User, Depends(get_current_user)],
) -> CertificateRecord:
    """Get the active certificate for a fingerprint, else the latest one."""
    return await _get_or_404(registry, fingerprint)


@router.get("/{fingerprint}/events", response_model=list[ContractEvent])
async def get_certificate_events(
    fingerprint: str,
    registry: Registry,
    _: Annotated[User, Depends(get_current_user)],
) -> list[ContractEvent]:
    """Event history of a certificate."""
    record = await _get_or_404(registry, fingerprint)
    return await registry.ledger.get_events_for_certificate(record.id)
