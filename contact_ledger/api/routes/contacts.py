"""Contacts API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from contact_ledger.api.deps import get_contact_merge_service, get_contact_service
from contact_ledger.api.schemas.contact import (
    ContactListResponse,
    ContactResponse,
    ContactSummaryResponse,
    MergeConflictResponse,
    MergeContactsRequest,
    MergePreviewRequest,
    MergePreviewResponse,
)
from contact_ledger.core.enums import RelationshipType, SourceSystem
from contact_ledger.domain.models.contact import ContactCreate, ContactFilters, ContactUpdate
from contact_ledger.domain.services.contact_merge_service import ContactMergeService
from contact_ledger.domain.services.contact_service import ContactService

router = APIRouter()

ContactServiceDep = Annotated[ContactService, Depends(get_contact_service)]
MergeServiceDep = Annotated[ContactMergeService, Depends(get_contact_merge_service)]


# ============== Contact CRUD Endpoints ==============

@router.post("", response_model=ContactResponse, status_code=status.HTTP_201_CREATED)
async def create_contact(data: ContactCreate, service: ContactServiceDep) -> ContactResponse:
    """Create a contact. Fails with 409 if (name, mobile) is taken."""
    contact = await service.create_contact(data)
    return ContactResponse.model_validate(contact)


@router.get("", response_model=ContactListResponse)
async def list_contacts(
    service: ContactServiceDep,
    q: str | None = Query(None, description="Search name, email and company"),
    owner_name: str | None = None,
    relationship_type: RelationshipType | None = None,
    whatsapp_reachable: bool | None = None,
    min_score: int | None = None,
    source_system: SourceSystem | None = None,
    company: str | None = None,
    page: int = 1,
    limit: int | None = None,
) -> ContactListResponse:
    """List contacts, newest first."""
    result = await service.list_contacts(
        ContactFilters(
            q=q,
            owner_name=owner_name,
            relationship_type=relationship_type,
            whatsapp_reachable=whatsapp_reachable,
            min_score=min_score,
            source_system=source_system,
            company=company,
            page=page,
            limit=limit,
        )
    )
    return ContactListResponse(
        data=[ContactResponse.model_validate(c) for c in result.data],
        total=result.total,
        page=result.page,
        limit=result.limit,
    )


@router.get("/{contact_id}", response_model=ContactResponse)
async def get_contact(contact_id: str, service: ContactServiceDep) -> ContactResponse:
    """Get a specific contact by ID."""
    contact = await service.get_contact(contact_id)
    return ContactResponse.model_validate(contact)


@router.patch("/{contact_id}", response_model=ContactResponse)
async def update_contact(
    contact_id: str,
    data: ContactUpdate,
    service: ContactServiceDep,
) -> ContactResponse:
    """Update a contact. Omitted fields are unchanged; null clears optional fields."""
    contact = await service.update_contact(contact_id, data)
    return ContactResponse.model_validate(contact)


@router.delete("/{contact_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_contact(contact_id: str, service: ContactServiceDep) -> None:
    """Permanently delete a contact."""
    await service.delete_contact(contact_id)


# ============== Merge Endpoints ==============

@router.post("/merge/preview", response_model=MergePreviewResponse)
async def get_merge_preview(
    request: MergePreviewRequest,
    service: MergeServiceDep,
) -> MergePreviewResponse:
    """Get a preview of merging multiple contacts."""
    preview = await service.preview(request.contact_ids)
    return MergePreviewResponse(
        contacts=[ContactSummaryResponse.model_validate(c) for c in preview.contacts],
        conflicts=[
            MergeConflictResponse(
                field=conflict.field,
                values={cid: str(value) for cid, value in conflict.values.items()},
            )
            for conflict in preview.conflicts
        ],
        suggested_primary_id=preview.suggested_primary_id,
    )


@router.post("/{contact_id}/merge", response_model=ContactResponse)
async def merge_contacts(
    contact_id: str,
    request: MergeContactsRequest,
    service: MergeServiceDep,
) -> ContactResponse:
    """Merge other contacts into this one."""
    contact = await service.merge(
        primary_id=contact_id,
        secondary_ids=request.secondary_contact_ids,
        field_resolutions=request.field_resolutions,
        merged_by=request.merged_by,
        merge_reason=request.merge_reason,
    )
    return ContactResponse.model_validate(contact)
