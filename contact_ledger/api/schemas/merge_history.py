"""Merge ledger schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel


class MergeHistoryResponse(BaseModel):
    """A ledger entry with its snapshots deserialized."""

    id: str
    merge_type: str
    primary_contact_id: str
    primary_contact_name: str
    merged_contact_id: str | None
    merged_contact_name: str | None
    source_system: str
    source_record_id: str | None
    merge_reason: str
    merge_details: Any
    merged_by: str
    before_merge_data: dict[str, Any] | None
    after_merge_data: dict[str, Any] | None
    before_quality_score: int
    after_quality_score: int
    involved_source_systems: list[str]
    merged_at: datetime

    class Config:
        from_attributes = True


class MergeHistoryListResponse(BaseModel):
    """Paginated ledger query response."""

    data: list[MergeHistoryResponse]
    total: int
    page: int
    limit: int
    filters: dict[str, Any]


class MergeStatisticsResponse(BaseModel):
    total_merges: int
    merges_by_type: dict[str, int]
    merges_by_reason: dict[str, int]
    merges_by_source: dict[str, int]
    recent_merges: int
    email_source_stats: dict[str, int]

    class Config:
        from_attributes = True
