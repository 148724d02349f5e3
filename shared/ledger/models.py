"""
Ledger Data Models
==================

Certificate records, blocks, transactions and contract events, plus the
certificate status state machine.

Persisted records are frozen. A status change produces a new record via
apply_transition; nothing else changes status.

Version: 0.1.0
"""

from datetime import UTC, datetime
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from shared.errors import ErrorCode, InvalidStateTransition
from shared.zk.models import ProofVerificationResult, SimulatedProof


GENESIS_PARENT_HASH = "0x" + "0" * 64


class CertificateStatus(str, Enum):
    """Certificate lifecycle status."""

    ACTIVE = "active"
    REVOKED = "revoked"
    SUSPENDED = "suspended"


class StatusAction(str, Enum):
    """Lifecycle actions that change status after issuance."""

    REVOKE = "revoke"
    SUSPEND = "suspend"
    REINSTATE = "reinstate"


class TransactionStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"


class StatusChange(BaseModel):
    """One entry of a certificate's status history."""

    model_config = ConfigDict(frozen=True)

    from_status: str = Field(..., description='"none" or a CertificateStatus value')
    to_status: CertificateStatus
    changed_by: str
    reason: str
    timestamp: datetime
    transaction_hash: str


class CertificateRecord(BaseModel):
    """A certificate stored on the ledger."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="CERT_<base36 ms>_<8 hex>")
    document_fingerprint: str = Field(..., min_length=1)
    storage_locator: str
    proof: SimulatedProof
    proof_fingerprint: str = Field(..., description="Canonical hash of the proof")
    issuer: str
    holder: str
    document_type: str
    document_category: str
    metadata: dict[str, Any] = Field(default_factory=dict)

    status: CertificateStatus = CertificateStatus.ACTIVE
    status_history: tuple[StatusChange, ...] = ()

    created_at: datetime
    updated_at: datetime

    # Issuance coordinates
    block_number: int
    transaction_hash: str


class Block(BaseModel):
    """A mined block. Each ledger call produces exactly one."""

    model_config = ConfigDict(frozen=True)

    number: int = Field(..., ge=1)
    hash: str
    parent_hash: str
    timestamp: datetime
    transactions: tuple[str, ...] = ()


class Transaction(BaseModel):
    """A ledger call."""

    model_config = ConfigDict(frozen=True)

    hash: str
    from_address: str
    to: str
    block_number: int
    timestamp: datetime
    method: str
    args: dict[str, Any] = Field(default_factory=dict)
    status: TransactionStatus = TransactionStatus.SUCCESS
    events: tuple[str, ...] = ()


# =============================================================================
# Contract Events
# =============================================================================


class CertificateIssuedArgs(BaseModel):
    model_config = ConfigDict(frozen=True)

    certificate_id: str
    document_fingerprint: str
    storage_locator: str
    issuer: str
    holder: str
    document_type: str


class CertificateVerifiedArgs(BaseModel):
    model_config = ConfigDict(frozen=True)

    certificate_id: str = Field(..., description='Certificate id or "NOT_FOUND"')
    verifier: str
    result: bool
    proof_valid: bool


class StatusChangeArgs(BaseModel):
    model_config = ConfigDict(frozen=True)

    certificate_id: str
    actor: str
    reason: str


class _EventBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="<transaction hash>:<log index>")
    transaction_hash: str
    block_number: int
    timestamp: datetime
    log_index: int = 0


class CertificateIssuedEvent(_EventBase):
    event_name: Literal["CertificateIssued"] = "CertificateIssued"
    args: CertificateIssuedArgs


class CertificateVerifiedEvent(_EventBase):
    event_name: Literal["CertificateVerified"] = "CertificateVerified"
    args: CertificateVerifiedArgs


class CertificateRevokedEvent(_EventBase):
    event_name: Literal["CertificateRevoked"] = "CertificateRevoked"
    args: StatusChangeArgs


class CertificateSuspendedEvent(_EventBase):
    event_name: Literal["CertificateSuspended"] = "CertificateSuspended"
    args: StatusChangeArgs


class CertificateReinstatedEvent(_EventBase):
    event_name: Literal["CertificateReinstated"] = "CertificateReinstated"
    args: StatusChangeArgs


ContractEvent = Annotated[
    CertificateIssuedEvent
    | CertificateVerifiedEvent
    | CertificateRevokedEvent
    | CertificateSuspendedEvent
    | CertificateReinstatedEvent,
    Field(discriminator="event_name"),
]

contract_event_adapter: TypeAdapter[ContractEvent] = TypeAdapter(ContractEvent)


# =============================================================================
# State Machine
# =============================================================================


# action -> (allowed source statuses, target status, failure message)
_TRANSITIONS: dict[StatusAction, tuple[frozenset[CertificateStatus], CertificateStatus, str]] = {
    StatusAction.REVOKE: (
        frozenset({CertificateStatus.ACTIVE, CertificateStatus.SUSPENDED}),
        CertificateStatus.REVOKED,
        "Certificate already revoked",
    ),
    StatusAction.SUSPEND: (
        frozenset({CertificateStatus.ACTIVE}),
        CertificateStatus.SUSPENDED,
        "Cannot suspend certificate with status: {status}",
    ),
    StatusAction.REINSTATE: (
        frozenset({CertificateStatus.SUSPENDED}),
        CertificateStatus.ACTIVE,
        "Can only reinstate suspended certificates",
    ),
}


def check_transition(status: CertificateStatus, action: StatusAction) -> CertificateStatus:
    """
    Validate a transition against the table.

    Returns:
        The target status

    Raises:
        InvalidStateTransition: If the action is not allowed from status
    """
    allowed, target, message = _TRANSITIONS[action]
    if status not in allowed:
        raise InvalidStateTransition(message.format(status=status.value))
    return target


def apply_transition(
    record: CertificateRecord,
    action: StatusAction,
    changed_by: str,
    reason: str,
    timestamp: datetime,
    transaction_hash: str,
) -> CertificateRecord:
    """
    Apply a lifecycle action to a record.

    Args:
        record: Current record
        action: Action to apply
        changed_by: Actor performing the change
        reason: Free-text reason
        timestamp: Time of the change
        transaction_hash: Transaction carrying the change

    Returns:
        New record with updated status and one more history entry

    Raises:
        InvalidStateTransition: If the action is not allowed
    """
    target = check_transition(record.status, action)
    change = StatusChange(
        from_status=record.status.value,
        to_status=target,
        changed_by=changed_by,
        reason=reason,
        timestamp=timestamp,
        transaction_hash=transaction_hash,
    )
    return record.model_copy(
        update={
            "status": target,
            "status_history": (*record.status_history, change),
            "updated_at": timestamp,
        }
    )


# =============================================================================
# Results
# =============================================================================


class IssueResult(BaseModel):
    """Outcome of an issue call."""

    success: bool
    message: str
    error_code: ErrorCode | None = None
    certificate: CertificateRecord | None = None
    transaction: Transaction | None = None
    block: Block | None = None
    events: list[ContractEvent] = Field(default_factory=list)


class MutationResult(BaseModel):
    """Outcome of a revoke, suspend or reinstate call."""

    success: bool
    message: str
    error_code: ErrorCode | None = None
    certificate: CertificateRecord | None = None
    transaction: Transaction | None = None
    block: Block | None = None
    events: list[ContractEvent] = Field(default_factory=list)


class LedgerVerification(BaseModel):
    """Outcome of a ledger verify call."""

    valid: bool
    message: str
    error_code: ErrorCode | None = None
    status: CertificateStatus | None = None
    certificate: CertificateRecord | None = None
    proof_result: ProofVerificationResult | None = None
    transaction: Transaction
    block: Block
    events: list[ContractEvent] = Field(default_factory=list)


class LedgerStats(BaseModel):
    total_certificates: int = 0
    active_certificates: int = 0
    revoked_certificates: int = 0
    suspended_certificates: int = 0
    total_blocks: int = 0
    total_transactions: int = 0
    total_events: int = 0
    current_block_number: int = 0
    total_verifications: int = 0
    successful_verifications: int = 0


class ChainIntegrityReport(BaseModel):
    """Result of walking the block chain."""

    valid: bool
    blocks_checked: int
    first_invalid_block: int | None = None
    message: str
    checked_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
