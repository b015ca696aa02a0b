"""Owner and tag schemas."""

from datetime import datetime

from pydantic import BaseModel


class OwnerResponse(BaseModel):
    """Owner response."""

    id: str
    name: str
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TagResponse(BaseModel):
    """Tag response. ``contact_count`` is absent where counts are not computed."""

    id: str
    name: str
    color: str
    description: str | None
    is_active: bool
    contact_count: int | None = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ContactEmailResponse(BaseModel):
    """Contact fields needed to message a tagged audience."""

    id: str
    name: str
    email: str
    company_name: str
    relationship_type: str | None

    class Config:
        from_attributes = True


class BulkIdsRequest(BaseModel):
    """IDs targeted by a bulk association change."""

    ids: list[str]


class SkippedItemResponse(BaseModel):
    id: str
    reason: str

    class Config:
        from_attributes = True


class BatchResultResponse(BaseModel):
    """Outcome of a bulk association change."""

    succeeded: int
    skipped: list[SkippedItemResponse]

    class Config:
        from_attributes = True


class MessageResponse(BaseModel):
    message: str
