"""Input models for the identity store."""

from pydantic import BaseModel

from contact_ledger.core.enums import RelationshipType, SourceSystem


class ContactCreate(BaseModel):
    """Fields for a new contact. ``mobile`` must already be canonical (e.g. E.164)."""

    name: str
    company_name: str
    source_system: SourceSystem
    source_record_id: str
    email: str | None = None
    mobile: str | None = None
    relationship_type: RelationshipType | None = None


class ContactUpdate(BaseModel):
    """Partial update. Fields left unset are unchanged; explicit ``None`` clears."""

    name: str | None = None
    company_name: str | None = None
    email: str | None = None
    mobile: str | None = None
    relationship_type: RelationshipType | None = None
    is_whatsapp_reachable: bool | None = None


class ContactFilters(BaseModel):
    """Filters and pagination for listing contacts."""

    q: str | None = None
    owner_name: str | None = None
    relationship_type: RelationshipType | None = None
    whatsapp_reachable: bool | None = None
    min_score: int | None = None
    source_system: SourceSystem | None = None
    company: str | None = None
    page: int = 1
    limit: int | None = None  # None uses the configured default
