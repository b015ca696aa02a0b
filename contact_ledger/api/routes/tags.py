"""Tags API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Body, Depends, Query, status

from contact_ledger.api.deps import get_tag_service
from contact_ledger.api.schemas.contact import ContactSummaryResponse
from contact_ledger.api.schemas.relationships import (
    BatchResultResponse,
    BulkIdsRequest,
    ContactEmailResponse,
    MessageResponse,
    TagResponse,
)
from contact_ledger.domain.models.relationships import TagCreate, TagUpdate
from contact_ledger.domain.services.tag_service import DEFAULT_POPULAR_LIMIT, TagService

router = APIRouter()

TagServiceDep = Annotated[TagService, Depends(get_tag_service)]


# ============== Tag Management ==============

@router.post("", response_model=TagResponse, status_code=status.HTTP_201_CREATED)
async def create_tag(data: TagCreate, service: TagServiceDep) -> TagResponse:
    return TagResponse.model_validate(await service.create_tag(data))


@router.get("", response_model=list[TagResponse])
async def list_tags(service: TagServiceDep) -> list[TagResponse]:
    """Active tags with contact counts, ordered by name."""
    return [TagResponse.model_validate(t) for t in await service.list_tags()]


@router.get("/search", response_model=list[TagResponse])
async def search_tags(service: TagServiceDep, q: str = Query(..., min_length=1)) -> list[TagResponse]:
    """Search active tags by name or description (at most 20 results)."""
    return [TagResponse.model_validate(t) for t in await service.search_tags(q)]


@router.get("/popular", response_model=list[TagResponse])
async def popular_tags(
    service: TagServiceDep, limit: int = Query(DEFAULT_POPULAR_LIMIT)
) -> list[TagResponse]:
    return [TagResponse.model_validate(t) for t in await service.popular_tags(limit)]


@router.get("/{tag_id}", response_model=TagResponse)
async def get_tag(tag_id: str, service: TagServiceDep) -> TagResponse:
    return TagResponse.model_validate(await service.get_tag(tag_id))


@router.patch("/{tag_id}", response_model=TagResponse)
async def update_tag(tag_id: str, data: TagUpdate, service: TagServiceDep) -> TagResponse:
    """Update a tag. Set ``is_active`` to false to retire a tag that is still in use."""
    return TagResponse.model_validate(await service.update_tag(tag_id, data))


@router.delete("/{tag_id}", response_model=MessageResponse)
async def delete_tag(tag_id: str, service: TagServiceDep) -> MessageResponse:
    """Delete an unused tag. Fails with 409 and the blocking count otherwise."""
    await service.delete_tag(tag_id)
    return MessageResponse(message=f"Tag {tag_id} permanently deleted")


# ============== Contact-Tag Relationships ==============

@router.post("/contacts/{contact_id}/tags/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
async def add_tag_to_contact(contact_id: str, tag_id: str, service: TagServiceDep) -> None:
    """Tag a contact. Fails with 409 if the contact already has the tag."""
    await service.add_tag(contact_id, tag_id)


@router.delete("/contacts/{contact_id}/tags/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_tag_from_contact(contact_id: str, tag_id: str, service: TagServiceDep) -> None:
    await service.remove_tag(contact_id, tag_id)


@router.get("/contacts/{contact_id}/tags", response_model=list[TagResponse])
async def get_tags_for_contact(contact_id: str, service: TagServiceDep) -> list[TagResponse]:
    return [TagResponse.model_validate(t) for t in await service.tags_for_contact(contact_id)]


@router.get("/{tag_id}/contacts", response_model=list[ContactSummaryResponse])
async def get_contacts_with_tag(tag_id: str, service: TagServiceDep) -> list[ContactSummaryResponse]:
    return [ContactSummaryResponse.model_validate(c) for c in await service.contacts_with_tag(tag_id)]


@router.get("/{tag_id}/contacts/email", response_model=list[ContactEmailResponse])
async def get_contacts_with_email(tag_id: str, service: TagServiceDep) -> list[ContactEmailResponse]:
    """Tagged contacts that can be emailed."""
    contacts = await service.contacts_with_email_for_tag(tag_id)
    return [ContactEmailResponse.model_validate(c) for c in contacts]


# ============== Bulk Operations ==============

@router.post("/contacts/{contact_id}/tags", response_model=BatchResultResponse)
async def add_tags_to_contact(
    contact_id: str, request: BulkIdsRequest, service: TagServiceDep
) -> BatchResultResponse:
    """Add several tags to a contact; pairs that already exist are skipped."""
    return BatchResultResponse.model_validate(await service.add_tags_to_contact(contact_id, request.ids))


@router.delete("/contacts/{contact_id}/tags", response_model=BatchResultResponse)
async def remove_tags_from_contact(
    contact_id: str, service: TagServiceDep, request: BulkIdsRequest = Body(...)
) -> BatchResultResponse:
    return BatchResultResponse.model_validate(await service.remove_tags_from_contact(contact_id, request.ids))


@router.post("/{tag_id}/contacts", response_model=BatchResultResponse)
async def add_tag_to_contacts(
    tag_id: str, request: BulkIdsRequest, service: TagServiceDep
) -> BatchResultResponse:
    """Add a tag to several contacts; pairs that already exist are skipped."""
    return BatchResultResponse.model_validate(await service.add_tag_to_contacts(tag_id, request.ids))


@router.delete("/{tag_id}/contacts", response_model=BatchResultResponse)
async def remove_tag_from_contacts(
    tag_id: str, service: TagServiceDep, request: BulkIdsRequest = Body(...)
) -> BatchResultResponse:
    return BatchResultResponse.model_validate(await service.remove_tag_from_contacts(tag_id, request.ids))
