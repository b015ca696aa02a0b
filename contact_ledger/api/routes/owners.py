"""Owners API endpoints."""

from typing import Annotated

from fastapi import APIRouter, Body, Depends, status

from contact_ledger.api.deps import get_owner_service
from contact_ledger.api.schemas.contact import ContactSummaryResponse
from contact_ledger.api.schemas.relationships import BatchResultResponse, BulkIdsRequest, OwnerResponse
from contact_ledger.domain.models.relationships import OwnerCreate, OwnerUpdate
from contact_ledger.domain.services.owner_service import OwnerService

router = APIRouter()

OwnerServiceDep = Annotated[OwnerService, Depends(get_owner_service)]


@router.post("", response_model=OwnerResponse, status_code=status.HTTP_201_CREATED)
async def create_owner(data: OwnerCreate, service: OwnerServiceDep) -> OwnerResponse:
    owner = await service.create_owner(data)
    return OwnerResponse.model_validate(owner)


@router.get("", response_model=list[OwnerResponse])
async def list_owners(service: OwnerServiceDep) -> list[OwnerResponse]:
    """List all owners ordered by name."""
    return [OwnerResponse.model_validate(o) for o in await service.list_owners()]


@router.get("/{owner_id}", response_model=OwnerResponse)
async def get_owner(owner_id: str, service: OwnerServiceDep) -> OwnerResponse:
    return OwnerResponse.model_validate(await service.get_owner(owner_id))


@router.patch("/{owner_id}", response_model=OwnerResponse)
async def update_owner(owner_id: str, data: OwnerUpdate, service: OwnerServiceDep) -> OwnerResponse:
    return OwnerResponse.model_validate(await service.update_owner(owner_id, data))


@router.delete("/{owner_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_owner(owner_id: str, service: OwnerServiceDep) -> None:
    await service.delete_owner(owner_id)


@router.get("/{owner_id}/contacts", response_model=list[ContactSummaryResponse])
async def list_owner_contacts(owner_id: str, service: OwnerServiceDep) -> list[ContactSummaryResponse]:
    """Contacts associated with an owner, ordered by name."""
    contacts = await service.list_contacts_for_owner(owner_id)
    return [ContactSummaryResponse.model_validate(c) for c in contacts]


# ============== Association Endpoints ==============

@router.post("/contacts/{contact_id}/owners/{owner_id}", status_code=status.HTTP_204_NO_CONTENT)
async def add_owner_to_contact(contact_id: str, owner_id: str, service: OwnerServiceDep) -> None:
    """Associate an owner with a contact. Fails with 409 if already associated."""
    await service.add_owner(contact_id, owner_id)


@router.delete("/contacts/{contact_id}/owners/{owner_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_owner_from_contact(contact_id: str, owner_id: str, service: OwnerServiceDep) -> None:
    await service.remove_owner(contact_id, owner_id)


@router.post("/contacts/{contact_id}/owners", response_model=BatchResultResponse)
async def add_owners_to_contact(
    contact_id: str, request: BulkIdsRequest, service: OwnerServiceDep
) -> BatchResultResponse:
    """Bulk-associate owners with a contact; existing pairs are skipped."""
    result = await service.add_owners_to_contact(contact_id, request.ids)
    return BatchResultResponse.model_validate(result)


@router.delete("/contacts/{contact_id}/owners", response_model=BatchResultResponse)
async def remove_owners_from_contact(
    contact_id: str, service: OwnerServiceDep, request: BulkIdsRequest = Body(...)
) -> BatchResultResponse:
    result = await service.remove_owners_from_contact(contact_id, request.ids)
    return BatchResultResponse.model_validate(result)


@router.post("/{owner_id}/contacts", response_model=BatchResultResponse)
async def add_owner_to_contacts(
    owner_id: str, request: BulkIdsRequest, service: OwnerServiceDep
) -> BatchResultResponse:
    """Bulk-associate an owner with contacts; existing pairs are skipped."""
    result = await service.add_owner_to_contacts(owner_id, request.ids)
    return BatchResultResponse.model_validate(result)


@router.delete("/{owner_id}/contacts", response_model=BatchResultResponse)
async def remove_owner_from_contacts(
    owner_id: str, service: OwnerServiceDep, request: BulkIdsRequest = Body(...)
) -> BatchResultResponse:
    result = await service.remove_owner_from_contacts(owner_id, request.ids)
    return BatchResultResponse.model_validate(result)
