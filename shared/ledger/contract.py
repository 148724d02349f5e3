"""
Certificate Ledger
==================

The certificate registry contract: issuance, verification and lifecycle
changes over an append-only store of records, blocks, transactions and
events.

Every call runs inside the store's critical section and mines exactly one
transaction in one block. Business failures come back as typed results;
storage errors propagate.

Version: 0.1.0
"""

import secrets
import uuid
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any

from shared.config import settings
from shared.config.settings import LedgerSettings
from shared.errors import ErrorCode, InvalidStateTransition
from shared.hashing import hash_object, hash_string
from shared.ledger.models import (
    GENESIS_PARENT_HASH,
    Block,
    CertificateIssuedArgs,
    CertificateIssuedEvent,
    CertificateRecord,
    CertificateReinstatedEvent,
    CertificateRevokedEvent,
    CertificateStatus,
    CertificateSuspendedEvent,
    CertificateVerifiedArgs,
    CertificateVerifiedEvent,
    ChainIntegrityReport,
    ContractEvent,
    IssueResult,
    LedgerStats,
    LedgerVerification,
    MutationResult,
    StatusAction,
    StatusChange,
    StatusChangeArgs,
    Transaction,
    apply_transition,
)
from shared.ledger.store import InMemoryLedgerStore, LedgerStore
from shared.logging import get_logger
from shared.zk.models import ProofVerificationResult, SimulatedProof
from shared.zk.verifier import ProofVerifier


logger = get_logger(__name__)

ProofCheck = Callable[[SimulatedProof], Awaitable[ProofVerificationResult]]

_BASE36 = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"

StatusEvent = CertificateRevokedEvent | CertificateSuspendedEvent | CertificateReinstatedEvent

# action -> (contract method, event type, success message)
_STATUS_CALLS: dict[StatusAction, tuple[str, type[StatusEvent], str]] = {
    StatusAction.REVOKE: (
        "revokeCertificate",
        CertificateRevokedEvent,
        "Certificate revoked successfully",
    ),
    StatusAction.SUSPEND: (
        "suspendCertificate",
        CertificateSuspendedEvent,
        "Certificate suspended successfully",
    ),
    StatusAction.REINSTATE: (
        "reinstateCertificate",
        CertificateReinstatedEvent,
        "Certificate reinstated successfully",
    ),
}

# action -> statuses to target, in order of preference
_TARGET_STATUSES: dict[StatusAction, tuple[CertificateStatus, ...]] = {
    StatusAction.REVOKE: (CertificateStatus.ACTIVE, CertificateStatus.SUSPENDED),
    StatusAction.SUSPEND: (CertificateStatus.ACTIVE,),
    StatusAction.REINSTATE: (CertificateStatus.ACTIVE, CertificateStatus.SUSPENDED),
}


def _select_target(records: list[CertificateRecord], action: StatusAction) -> CertificateRecord | None:
    """
    Pick the record a status change applies to.

    The newest record in the first preferred status wins. With none, the
    newest record overall, so the transition table reports the failure.
    """
    for status in _TARGET_STATUSES[action]:
        for record in reversed(records):
            if record.status is status:
                return record
    return records[-1] if records else None


def _base36(value: int) -> str:
    digits = ""
    while value:
        value, rem = divmod(value, 36)
        digits = _BASE36[rem] + digits
    return digits or "0"


def generate_certificate_id(now: datetime) -> str:
    """CERT_<base36 ms timestamp>_<8 uppercase hex>."""
    millis = int(now.timestamp() * 1000)
    return f"CERT_{_base36(millis)}_{secrets.token_hex(4).upper()}"


def compute_block_hash(
    number: int,
    transactions: tuple[str, ...],
    parent_hash: str,
    timestamp: datetime,
) -> str:
    """Block hash over number, transactions, parent and timestamp."""
    return "0x" + hash_string(
        f"block_{number}_{'_'.join(transactions)}_{parent_hash}_{timestamp.isoformat()}"
    )


class CertificateLedger:
    """
    Certificate registry contract.

    Usage:
        ledger = CertificateLedger()

        result = await ledger.issue(
            document_fingerprint=fingerprint,
            storage_locator=locator,
            proof=proof,
            issuer="university",
            holder="Jane Doe",
            document_type="degree",
            document_category="educational",
        )

        check = await ledger.verify(fingerprint, proof, "employer")
    """

    def __init__(
        self,
        store: LedgerStore | None = None,
        ledger_settings: LedgerSettings | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        """
        Initialize the ledger.

        Args:
            store: Persistence backend. Defaults to an in-memory store.
            ledger_settings: Registry name and lock settings
            clock: Source of the current UTC time
        """
        self.store = store or InMemoryLedgerStore()
        self.config = ledger_settings or settings.ledger
        self._clock = clock or (lambda: datetime.now(UTC))

    # =========================================================================
    # Mining
    # =========================================================================

    def _new_transaction(
        self,
        from_address: str,
        method: str,
        args: dict[str, Any],
        block_number: int,
        timestamp: datetime,
    ) -> Transaction:
        tx_hash = "0x" + hash_object(
            {
                "from": from_address,
                "to": self.config.registry_name,
                "method": method,
                "args": args,
                "timestamp": timestamp,
                "nonce": uuid.uuid4().hex,
            }
        )
        return Transaction(
            hash=tx_hash,
            from_address=from_address,
            to=self.config.registry_name,
            block_number=block_number,
            timestamp=timestamp,
            method=method,
            args=args,
            events=(f"{tx_hash}:0",),
        )

    async def _mine(
        self,
        from_address: str,
        method: str,
        args: dict[str, Any],
        timestamp: datetime,
    ) -> tuple[Transaction, Block]:
        """Build the transaction and block for one call. Must run under the lock."""
        latest = await self.store.latest_block()
        number = latest.number + 1 if latest else 1
        parent_hash = latest.hash if latest else GENESIS_PARENT_HASH

        tx = self._new_transaction(from_address, method, args, number, timestamp)
        block = Block(
            number=number,
            hash=compute_block_hash(number, (tx.hash,), parent_hash, timestamp),
            parent_hash=parent_hash,
            timestamp=timestamp,
            transactions=(tx.hash,),
        )
        return tx, block

    async def _resolve(self, document_fingerprint: str) -> CertificateRecord | None:
        """The ACTIVE record for a fingerprint, else the most recent one."""
        records = await self.store.find_by_fingerprint(document_fingerprint)
        for record in records:
            if record.status is CertificateStatus.ACTIVE:
                return record
        return records[-1] if records else None

    # =========================================================================
    # Contract Calls
    # =========================================================================

    async def issue(
        self,
        document_fingerprint: str,
        storage_locator: str,
        proof: SimulatedProof,
        issuer: str,
        holder: str,
        document_type: str,
        document_category: str,
        metadata: dict[str, Any] | None = None,
    ) -> IssueResult:
        """
        Issue a certificate.

        Fails with DUPLICATE_FINGERPRINT if an ACTIVE certificate already
        exists for the fingerprint.
        """
        async with self.store.lock():
            existing = await self._resolve(document_fingerprint)
            if existing is not None and existing.status is CertificateStatus.ACTIVE:
                logger.warning(
                    "certificate_issue_rejected",
                    document_fingerprint=document_fingerprint,
                    existing_id=existing.id,
                )
                return IssueResult(
                    success=False,
                    message="Certificate with this document hash already exists",
                    error_code=ErrorCode.DUPLICATE_FINGERPRINT,
                    certificate=existing,
                )

            now = self._clock()
            tx, block = await self._mine(
                issuer,
                "issueCertificate",
                {
                    "document_fingerprint": document_fingerprint,
                    "storage_locator": storage_locator,
                    "holder": holder,
                    "document_type": document_type,
                },
                now,
            )

            record = CertificateRecord(
                id=generate_certificate_id(now),
                document_fingerprint=document_fingerprint,
                storage_locator=storage_locator,
                proof=proof,
                proof_fingerprint=hash_object(proof),
                issuer=issuer,
                holder=holder,
                document_type=document_type,
                document_category=document_category,
                metadata=metadata or {},
                status=CertificateStatus.ACTIVE,
                status_history=(
                    StatusChange(
                        from_status="none",
                        to_status=CertificateStatus.ACTIVE,
                        changed_by=issuer,
                        reason="Initial issuance",
                        timestamp=now,
                        transaction_hash=tx.hash,
                    ),
                ),
                created_at=now,
                updated_at=now,
                block_number=block.number,
                transaction_hash=tx.hash,
            )
            event = CertificateIssuedEvent(
                id=tx.events[0],
                transaction_hash=tx.hash,
                block_number=block.number,
                timestamp=now,
                args=CertificateIssuedArgs(
                    certificate_id=record.id,
                    document_fingerprint=document_fingerprint,
                    storage_locator=storage_locator,
                    issuer=issuer,
                    holder=holder,
                    document_type=document_type,
                ),
            )
            await self.store.commit(
                transaction=tx,
                block=block,
                event=event,
                record=record,
                new_record=True,
            )

        logger.info(
            "certificate_issued",
            certificate_id=record.id,
            document_fingerprint=document_fingerprint,
            block_number=block.number,
        )
        return IssueResult(
            success=True,
            message="Certificate issued successfully",
            certificate=record,
            transaction=tx,
            block=block,
            events=[event],
        )

    async def verify(
        self,
        document_fingerprint: str,
        proof: SimulatedProof | dict[str, Any] | str | None,
        verifier_id: str,
        *,
        require_proof: bool = True,
        proof_check: ProofCheck | None = None,
    ) -> LedgerVerification:
        """
        Verify a certificate by fingerprint.

        Never changes the certificate. Always records a transaction, a block
        and a CertificateVerified event, whatever the outcome.

        Args:
            document_fingerprint: Fingerprint to look up
            proof: Proof presented by the holder, if any
            verifier_id: Who is verifying
            require_proof: Fail when no proof is presented. With False a
                present ACTIVE record is enough (hash-only mode).
            proof_check: Proof-level verification run after the proof
                fingerprint matches. Its result decides validity.

        Returns:
            LedgerVerification with the audit transaction, block and event
        """
        async with self.store.lock():
            record = await self._resolve(document_fingerprint)
            valid = False
            proof_valid = False
            error_code: ErrorCode | None = None
            proof_result: ProofVerificationResult | None = None

            if record is None:
                message = "Certificate not found in registry"
                error_code = ErrorCode.NOT_FOUND
            elif record.status is CertificateStatus.REVOKED:
                message = "Certificate has been revoked"
                error_code = ErrorCode.CERTIFICATE_REVOKED
            elif record.status is CertificateStatus.SUSPENDED:
                message = "Certificate is currently suspended"
                error_code = ErrorCode.CERTIFICATE_SUSPENDED
            elif proof is None:
                if require_proof:
                    message = "A proof is required to verify this certificate"
                    error_code = ErrorCode.PROOF_REQUIRED
                else:
                    valid = True
                    message = "Certificate exists and is active (no proof provided)"
            else:
                parsed = ProofVerifier.parse(proof)
                if parsed is None or hash_object(parsed) != record.proof_fingerprint:
                    message = "Proof does not match the registered certificate"
                    error_code = ErrorCode.PROOF_MISMATCH
                elif proof_check is not None:
                    proof_result = await proof_check(parsed)
                    valid = proof_valid = proof_result.valid
                    message = proof_result.message
                    error_code = proof_result.error_code
                else:
                    valid = proof_valid = True
                    message = "Certificate verified successfully"

            now = self._clock()
            tx, block = await self._mine(
                verifier_id,
                "verifyCertificate",
                {"document_fingerprint": document_fingerprint, "has_proof": proof is not None},
                now,
            )
            event = CertificateVerifiedEvent(
                id=tx.events[0],
                transaction_hash=tx.hash,
                block_number=block.number,
                timestamp=now,
                args=CertificateVerifiedArgs(
                    certificate_id=record.id if record else "NOT_FOUND",
                    verifier=verifier_id,
                    result=valid,
                    proof_valid=proof_valid,
                ),
            )
            await self.store.commit(transaction=tx, block=block, event=event)

        logger.info(
            "certificate_verified",
            document_fingerprint=document_fingerprint,
            verifier=verifier_id,
            valid=valid,
            error_code=error_code.value if error_code else None,
        )
        return LedgerVerification(
            valid=valid,
            message=message,
            error_code=error_code,
            status=record.status if record else None,
            certificate=record,
            proof_result=proof_result,
            transaction=tx,
            block=block,
            events=[event],
        )

    async def _change_status(
        self,
        document_fingerprint: str,
        action: StatusAction,
        actor: str,
        reason: str,
    ) -> MutationResult:
        method, event_type, success_message = _STATUS_CALLS[action]

        async with self.store.lock():
            records = await self.store.find_by_fingerprint(document_fingerprint)
            record = _select_target(records, action)
            if record is None:
                return MutationResult(
                    success=False,
                    message="Certificate not found",
                    error_code=ErrorCode.NOT_FOUND,
                )

            if (
                action is StatusAction.REINSTATE
                and record.status is CertificateStatus.ACTIVE
                and any(r.status is CertificateStatus.SUSPENDED for r in records)
            ):
                # A suspended duplicate cannot come back while another is active
                return MutationResult(
                    success=False,
                    message="Another certificate with this document hash is active",
                    error_code=ErrorCode.DUPLICATE_FINGERPRINT,
                    certificate=record,
                )

            now = self._clock()
            tx, block = await self._mine(
                actor,
                method,
                {"document_fingerprint": document_fingerprint, "reason": reason},
                now,
            )
            try:
                updated = apply_transition(record, action, actor, reason, now, tx.hash)
            except InvalidStateTransition as e:
                logger.warning(
                    "certificate_transition_rejected",
                    certificate_id=record.id,
                    action=action.value,
                    status=record.status.value,
                )
                return MutationResult(
                    success=False,
                    message=e.message,
                    error_code=e.code,
                    certificate=record,
                )

            event = event_type(
                id=tx.events[0],
                transaction_hash=tx.hash,
                block_number=block.number,
                timestamp=now,
                args=StatusChangeArgs(certificate_id=record.id, actor=actor, reason=reason),
            )
            await self.store.commit(transaction=tx, block=block, event=event, record=updated)

        logger.info(
            "certificate_status_changed",
            certificate_id=record.id,
            action=action.value,
            from_status=record.status.value,
            to_status=updated.status.value,
            block_number=block.number,
        )
        return MutationResult(
            success=True,
            message=success_message,
            certificate=updated,
            transaction=tx,
            block=block,
            events=[event],
        )

    async def revoke(self, document_fingerprint: str, revoked_by: str, reason: str) -> MutationResult:
        """Revoke an ACTIVE or SUSPENDED certificate. Terminal."""
        return await self._change_status(document_fingerprint, StatusAction.REVOKE, revoked_by, reason)

    async def suspend(self, document_fingerprint: str, suspended_by: str, reason: str) -> MutationResult:
        """Suspend an ACTIVE certificate."""
        return await self._change_status(document_fingerprint, StatusAction.SUSPEND, suspended_by, reason)

    async def reinstate(
        self,
        document_fingerprint: str,
        reinstated_by: str,
        reason: str = "Reinstated",
    ) -> MutationResult:
        """Reinstate a SUSPENDED certificate."""
        return await self._change_status(document_fingerprint, StatusAction.REINSTATE, reinstated_by, reason)

    # =========================================================================
    # Queries
    # =========================================================================

    async def get_all_certificates(self) -> list[CertificateRecord]:
        return await self.store.list_records()

    async def get_certificate_by_fingerprint(self, document_fingerprint: str) -> CertificateRecord | None:
        return await self._resolve(document_fingerprint)

    async def get_certificate_by_id(self, certificate_id: str) -> CertificateRecord | None:
        return await self.store.get_record(certificate_id)

    async def get_certificates_by_issuer(self, issuer: str) -> list[CertificateRecord]:
        return [r for r in await self.store.list_records() if r.issuer == issuer]

    async def get_certificates_by_holder(self, holder: str) -> list[CertificateRecord]:
        return [r for r in await self.store.list_records() if r.holder == holder]

    async def get_certificates_by_category(self, category: str) -> list[CertificateRecord]:
        return [r for r in await self.store.list_records() if r.document_category == category]

    async def get_certificates_by_storage_locator(self, storage_locator: str) -> list[CertificateRecord]:
        return [r for r in await self.store.list_records() if r.storage_locator == storage_locator]

    async def get_all_blocks(self) -> list[Block]:
        return await self.store.list_blocks()

    async def get_all_transactions(self) -> list[Transaction]:
        return await self.store.list_transactions()

    async def get_all_events(self) -> list[ContractEvent]:
        return await self.store.list_events()

    async def get_events_for_certificate(self, certificate_id: str) -> list[ContractEvent]:
        return [e for e in await self.store.list_events() if e.args.certificate_id == certificate_id]

    async def get_stats(self) -> LedgerStats:
        """Aggregate counts over the ledger."""
        records = await self.store.list_records()
        blocks = await self.store.list_blocks()
        events = await self.store.list_events()
        verifications = [e for e in events if isinstance(e, CertificateVerifiedEvent)]

        return LedgerStats(
            total_certificates=len(records),
            active_certificates=sum(r.status is CertificateStatus.ACTIVE for r in records),
            revoked_certificates=sum(r.status is CertificateStatus.REVOKED for r in records),
            suspended_certificates=sum(r.status is CertificateStatus.SUSPENDED for r in records),
            total_blocks=len(blocks),
            total_transactions=len(await self.store.list_transactions()),
            total_events=len(events),
            current_block_number=blocks[-1].number if blocks else 0,
            total_verifications=len(verifications),
            successful_verifications=sum(e.args.result for e in verifications),
        )

    async def verify_chain_integrity(self) -> ChainIntegrityReport:
        """
        Walk the chain from block 1.

        Checks gap-free numbering, parent links and recomputed block hashes.
        """
        blocks = await self.store.list_blocks()
        parent_hash = GENESIS_PARENT_HASH

        for expected_number, block in enumerate(blocks, start=1):
            problem = None
            if block.number != expected_number:
                problem = f"expected block number {expected_number}"
            elif block.parent_hash != parent_hash:
                problem = "parent hash does not match previous block"
            elif block.hash != compute_block_hash(
                block.number, block.transactions, block.parent_hash, block.timestamp
            ):
                problem = "block hash does not match contents"

            if problem:
                logger.error("ledger_chain_broken", block_number=block.number, problem=problem)
                return ChainIntegrityReport(
                    valid=False,
                    blocks_checked=expected_number,
                    first_invalid_block=block.number,
                    message=f"Block {block.number}: {problem}",
                )
            parent_hash = block.hash

        return ChainIntegrityReport(
            valid=True,
            blocks_checked=len(blocks),
            message="Chain is intact",
        )

    async def reset(self) -> None:
        """Drop all ledger state (for testing)."""
        await self.store.reset()
        logger.info("ledger_reset")
