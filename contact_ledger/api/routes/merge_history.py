"""Merge history API endpoints."""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from contact_ledger.api.deps import get_merge_history_service
from contact_ledger.api.schemas.merge_history import (
    MergeHistoryListResponse,
    MergeHistoryResponse,
    MergeStatisticsResponse,
)
from contact_ledger.core.enums import MergeType
from contact_ledger.domain.models.merge import MergeHistoryFilters
from contact_ledger.domain.services.merge_history_service import MergeHistoryService

router = APIRouter()

LedgerDep = Annotated[MergeHistoryService, Depends(get_merge_history_service)]


@router.get("", response_model=MergeHistoryListResponse)
async def get_merge_history(
    ledger: LedgerDep,
    contact_id: str | None = None,
    merge_type: MergeType | None = None,
    source_system: Annotated[list[str] | None, Query()] = None,
    email_only: bool = False,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    page: int = 1,
    limit: int | None = None,
) -> MergeHistoryListResponse:
    """Query the merge ledger, newest first.

    ``source_system`` may be repeated to match several systems.
    """
    result = await ledger.query(
        MergeHistoryFilters(
            contact_id=contact_id,
            merge_type=merge_type,
            source_system=source_system,
            email_only=email_only,
            start_date=start_date,
            end_date=end_date,
            page=page,
            limit=limit,
        )
    )
    return MergeHistoryListResponse(
        data=[MergeHistoryResponse.model_validate(row) for row in result.data],
        total=result.total,
        page=result.page,
        limit=result.limit,
        filters=result.filters,
    )


@router.get("/statistics", response_model=MergeStatisticsResponse)
async def get_merge_statistics(ledger: LedgerDep) -> MergeStatisticsResponse:
    return MergeStatisticsResponse.model_validate(await ledger.statistics())


@router.get("/email-sources", response_model=list[str])
async def get_email_sources(ledger: LedgerDep) -> list[str]:
    """Source systems treated as email origins."""
    return ledger.email_sources()


@router.get("/contact/{contact_id}", response_model=list[MergeHistoryResponse])
async def get_contact_merge_history(contact_id: str, ledger: LedgerDep) -> list[MergeHistoryResponse]:
    """Every ledger entry where the contact was primary or merged."""
    return [MergeHistoryResponse.model_validate(row) for row in await ledger.for_contact(contact_id)]
