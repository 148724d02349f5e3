"""
Ledger Explorer Routes
======================

Read-only views over blocks, transactions, events and ledger health.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from services.certificate_registry.dependencies import Registry
from shared.auth import User, get_current_user
from shared.ledger import Block, ChainIntegrityReport, ContractEvent, LedgerStats, Transaction
from shared.models import PaginatedResponse, Pagination


router = APIRouter(dependencies=[Depends(get_current_user)])

PageQuery = Annotated[int, Query(ge=1)]
PageSizeQuery = Annotated[int, Query(ge=1, le=500)]


@router.get("/blocks", response_model=PaginatedResponse[Block])
async def list_blocks(
    registry: Registry,
    page: PageQuery = 1,
    page_size: PageSizeQuery = 50,
) -> PaginatedResponse[Block]:
    blocks = await registry.ledger.get_all_blocks()
    return PaginatedResponse[Block].from_items(blocks, Pagination(page=page, page_size=page_size))


@router.get("/transactions", response_model=PaginatedResponse[Transaction])
async def list_transactions(
    registry: Registry,
    page: PageQuery = 1,
    page_size: PageSizeQuery = 50,
) -> PaginatedResponse[Transaction]:
    transactions = await registry.ledger.get_all_transactions()
    return PaginatedResponse[Transaction].from_items(
        transactions, Pagination(page=page, page_size=page_size)
    )


@router.get("/events", response_model=PaginatedResponse[ContractEvent])
async def list_events(
    registry: Registry,
    page: PageQuery = 1,
    page_size: PageSizeQuery = 50,
) -> PaginatedResponse[ContractEvent]:
    events = await registry.ledger.get_all_events()
    return PaginatedResponse[ContractEvent].from_items(events, Pagination(page=page, page_size=page_size))


@router.get("/stats", response_model=LedgerStats)
async def get_stats(registry: Registry) -> LedgerStats:
    return await registry.ledger.get_stats()


@router.get("/integrity", response_model=ChainIntegrityReport)
async def check_integrity(registry: Registry) -> ChainIntegrityReport:
    """Walk the block chain and report the first broken link, if any."""
    return await registry.ledger.verify_chain_integrity()
