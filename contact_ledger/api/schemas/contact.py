"""Contact-related schemas."""

from datetime import datetime

from pydantic import BaseModel

from contact_ledger.core.enums import MergeReason


class OwnerSummary(BaseModel):
    """Owner as embedded in a contact."""

    id: str
    name: str
    is_active: bool

    class Config:
        from_attributes = True


class ContactSummaryResponse(BaseModel):
    """Contact without its associations."""

    id: str
    name: str
    company_name: str
    email: str | None
    mobile: str | None
    relationship_type: str | None
    source_system: str
    source_record_id: str
    is_whatsapp_reachable: bool
    data_quality_score: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ContactResponse(ContactSummaryResponse):
    """Contact with its owners resolved."""

    owners: list[OwnerSummary] = []


class ContactListResponse(BaseModel):
    """Paginated contacts list response."""

    data: list[ContactResponse]
    total: int
    page: int
    limit: int


class MergePreviewRequest(BaseModel):
    """Merge preview request."""

    contact_ids: list[str]


class MergeConflictResponse(BaseModel):
    """Merge conflict response."""

    field: str
    values: dict[str, str]  # contact_id -> value


class MergePreviewResponse(BaseModel):
    """Merge preview response."""

    contacts: list[ContactSummaryResponse]
    conflicts: list[MergeConflictResponse]
    suggested_primary_id: str | None


class MergeContactsRequest(BaseModel):
    """Merge contacts request."""

    secondary_contact_ids: list[str]
    field_resolutions: dict[str, str] = {}  # field -> "primary" or contact_id
    merged_by: str | None = None
    merge_reason: MergeReason = MergeReason.DUPLICATE_ENTRY
