"""API schemas package."""

from contact_ledger.api.schemas.contact import (
    ContactListResponse,
    ContactResponse,
    ContactSummaryResponse,
    MergeContactsRequest,
    MergePreviewRequest,
    MergePreviewResponse,
)
from contact_ledger.api.schemas.merge_history import (
    MergeHistoryListResponse,
    MergeHistoryResponse,
    MergeStatisticsResponse,
)
from contact_ledger.api.schemas.relationships import (
    BatchResultResponse,
    BulkIdsRequest,
    ContactEmailResponse,
    MessageResponse,
    OwnerResponse,
    TagResponse,
)

__all__ = [
    "BatchResultResponse",
    "BulkIdsRequest",
    "ContactEmailResponse",
    "ContactListResponse",
    "ContactResponse",
    "ContactSummaryResponse",
    "MergeContactsRequest",
    "MergeHistoryListResponse",
    "MergeHistoryResponse",
    "MergePreviewRequest",
    "MergePreviewResponse",
    "MergeStatisticsResponse",
    "MessageResponse",
    "OwnerResponse",
    "TagResponse",
]
