"""Input models and result types for owners and tags."""

from dataclasses import dataclass, field
from datetime import datetime

from pydantic import BaseModel


class OwnerCreate(BaseModel):
    """Owner creation request."""

    name: str
    is_active: bool = True


class OwnerUpdate(BaseModel):
    """Owner update request."""

    name: str | None = None
    is_active: bool | None = None


class TagCreate(BaseModel):
    """Tag creation request."""

    name: str
    color: str | None = None  # defaults to the configured tag color
    description: str | None = None


class TagUpdate(BaseModel):
    """Tag update request. Unset fields are unchanged."""

    name: str | None = None
    color: str | None = None
    description: str | None = None
    is_active: bool | None = None


@dataclass
class TagWithCount:
    """A tag together with the number of contacts carrying it."""

    id: str
    name: str
    color: str
    description: str | None
    is_active: bool
    contact_count: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, tag, contact_count: int) -> "TagWithCount":
        return cls(
            id=tag.id,
            name=tag.name,
            color=tag.color,
            description=tag.description,
            is_active=tag.is_active,
            contact_count=contact_count,
            created_at=tag.created_at,
            updated_at=tag.updated_at,
        )


# Skip reasons reported by bulk association operations
ALREADY_ASSOCIATED = "already_associated"
NOT_ASSOCIATED = "not_associated"
CONTACT_NOT_FOUND = "contact_not_found"
TAG_NOT_FOUND = "tag_not_found"
OWNER_NOT_FOUND = "owner_not_found"
DUPLICATE_IN_REQUEST = "duplicate_in_request"


@dataclass
class SkippedItem:
    """A target that a bulk operation left untouched, and why."""

    id: str
    reason: str


@dataclass
class BatchResult:
    """Outcome of a best-effort bulk operation."""

    succeeded: int = 0
    skipped: list[SkippedItem] = field(default_factory=list)

    def skip(self, id: str, reason: str) -> None:
        self.skipped.append(SkippedItem(id=id, reason=reason))
