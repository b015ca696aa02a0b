"""Merge ledger input models and result types."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from contact_ledger.core.enums import MergeReason, MergeType


class MergeEvent(BaseModel):
    """A consolidation to be recorded in the ledger."""

    merge_type: MergeType
    primary_contact_id: str
    primary_contact_name: str
    merged_contact_id: str | None = None
    merged_contact_name: str | None = None
    source_system: str
    source_record_id: str | None = None
    merge_reason: MergeReason
    merge_details: Any = None
    merged_by: str | None = None  # None records the configured system actor
    before_merge_data: dict[str, Any] | None = None
    after_merge_data: dict[str, Any] | None = None
    before_quality_score: int = 0
    after_quality_score: int = 0
    involved_source_systems: list[str] = Field(default_factory=list)
    merged_at: datetime | None = None  # None records the current time


class MergeHistoryFilters(BaseModel):
    """Filters and pagination for querying the ledger."""

    contact_id: str | None = None
    merge_type: MergeType | None = None
    source_system: str | list[str] | None = None
    email_only: bool = False
    start_date: datetime | None = None
    end_date: datetime | None = None
    page: int = 1
    limit: int | None = None


@dataclass
class MergeStatistics:
    """Aggregate view over the whole ledger."""

    total_merges: int = 0
    merges_by_type: dict[str, int] = field(default_factory=dict)
    merges_by_reason: dict[str, int] = field(default_factory=dict)
    merges_by_source: dict[str, int] = field(default_factory=dict)
    recent_merges: int = 0
    email_source_stats: dict[str, int] = field(default_factory=dict)


@dataclass
class MergeConflict:
    """A field whose value differs between contacts being merged."""

    field: str
    values: dict[str, Any]  # {contact_id: value}


@dataclass
class MergePreview:
    """Preview of a merge operation."""

    contacts: list[Any]
    conflicts: list[MergeConflict]
    suggested_primary_id: str | None = None
