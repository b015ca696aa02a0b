"""Tests for owners and contact-owner associations."""

from unittest.mock import AsyncMock, patch

import pytest

from contact_ledger.core.errors import ConflictError, InvalidInputError, NotFoundError
from contact_ledger.domain.models.relationships import (
    ALREADY_ASSOCIATED,
    CONTACT_NOT_FOUND,
    DUPLICATE_IN_REQUEST,
    NOT_ASSOCIATED,
    OWNER_NOT_FOUND,
    OwnerCreate,
    OwnerUpdate,
)
from contact_ledger.domain.services.contact_service import ContactService
from contact_ledger.domain.services.owner_service import OwnerService


@pytest.mark.asyncio
async def test_owner_lifecycle(db_session):
    service = OwnerService(db_session)

    zoho = await service.create_owner(OwnerCreate(name="Zoho"))
    await service.create_owner(OwnerCreate(name="Accounts", is_active=False))

    assert [o.name for o in await service.list_owners()] == ["Accounts", "Zoho"]

    renamed = await service.update_owner(zoho.id, OwnerUpdate(name="Zoho CRM"))
    assert renamed.name == "Zoho CRM"
    assert (await service.get_owner(zoho.id)).name == "Zoho CRM"

    await service.delete_owner(zoho.id)
    with pytest.raises(NotFoundError):
        await service.get_owner(zoho.id)


@pytest.mark.asyncio
async def test_duplicate_owner_name_conflicts(db_session):
    service = OwnerService(db_session)
    await service.create_owner(OwnerCreate(name="Zoho"))
    other = await service.create_owner(OwnerCreate(name="Invoice"))
    other_id = other.id

    with pytest.raises(ConflictError):
        await service.create_owner(OwnerCreate(name="Zoho"))
    with pytest.raises(ConflictError):
        await service.update_owner(other_id, OwnerUpdate(name="Zoho"))
    with pytest.raises(InvalidInputError):
        await service.create_owner(OwnerCreate(name=" "))


@pytest.mark.asyncio
async def test_add_owner_is_strict(db_session, make_contact):
    service = OwnerService(db_session)
    contact = await make_contact("Alice")
    owner = await service.create_owner(OwnerCreate(name="Zoho"))
    contact_id, owner_id = contact.id, owner.id

    await service.add_owner(contact_id, owner_id)

    with pytest.raises(ConflictError):
        await service.add_owner(contact_id, owner_id)
    with pytest.raises(NotFoundError) as exc_info:
        await service.add_owner("missing-contact", owner_id)
    assert "missing-contact" in exc_info.value.message
    with pytest.raises(NotFoundError) as exc_info:
        await service.add_owner(contact_id, "missing-owner")
    assert "missing-owner" in exc_info.value.message

    contacts = await service.list_contacts_for_owner(owner_id)
    assert [c.id for c in contacts] == [contact_id]


@pytest.mark.asyncio
async def test_remove_owner_requires_existing_pair(db_session, make_contact):
    service = OwnerService(db_session)
    contact = await make_contact("Alice")
    owner = await service.create_owner(OwnerCreate(name="Zoho"))
    contact_id, owner_id = contact.id, owner.id
    await service.add_owner(contact_id, owner_id)

    await service.remove_owner(contact_id, owner_id)

    with pytest.raises(NotFoundError):
        await service.remove_owner(contact_id, owner_id)
    assert (await ContactService(db_session).get_contact(contact_id)).owners == []


@pytest.mark.asyncio
async def test_bulk_add_owners_skips_and_reports(db_session, make_contact):
    service = OwnerService(db_session)
    contact = await make_contact("Alice")
    zoho = await service.create_owner(OwnerCreate(name="Zoho"))
    invoice = await service.create_owner(OwnerCreate(name="Invoice"))
    await service.add_owner(contact.id, zoho.id)

    result = await service.add_owners_to_contact(
        contact.id, [zoho.id, invoice.id, invoice.id, "ghost"]
    )

    assert result.succeeded == 1
    assert [(s.id, s.reason) for s in result.skipped] == [
        (zoho.id, ALREADY_ASSOCIATED),
        (invoice.id, DUPLICATE_IN_REQUEST),
        ("ghost", OWNER_NOT_FOUND),
    ]

    # Re-running changes nothing and never raises
    again = await service.add_owners_to_contact(contact.id, [zoho.id, invoice.id])
    assert again.succeeded == 0


@pytest.mark.asyncio
async def test_bulk_owner_to_contacts_and_removal(db_session, make_contact):
    service = OwnerService(db_session)
    alice = await make_contact("Alice")
    bob = await make_contact("Bob")
    owner = await service.create_owner(OwnerCreate(name="Zoho"))

    added = await service.add_owner_to_contacts(owner.id, [alice.id, bob.id, "ghost"])
    assert added.succeeded == 2
    assert [(s.id, s.reason) for s in added.skipped] == [("ghost", CONTACT_NOT_FOUND)]

    removed = await service.remove_owner_from_contacts(owner.id, [alice.id])
    assert removed.succeeded == 1

    again = await service.remove_owner_from_contacts(owner.id, [alice.id, bob.id])
    assert again.succeeded == 1
    assert [(s.id, s.reason) for s in again.skipped] == [(alice.id, NOT_ASSOCIATED)]

    cleared = await service.remove_owners_from_contact(bob.id, [owner.id])
    assert cleared.succeeded == 0
    assert cleared.skipped[0].reason == NOT_ASSOCIATED


@pytest.mark.asyncio
async def test_bulk_requires_existing_anchor(db_session):
    service = OwnerService(db_session)

    with pytest.raises(NotFoundError):
        await service.add_owners_to_contact("missing", ["any"])
    with pytest.raises(NotFoundError):
        await service.add_owner_to_contacts("missing", ["any"])


@pytest.mark.asyncio
async def test_bulk_add_skips_pair_created_after_planning(db_session, make_contact):
    """A pair inserted by someone else after planning is skipped; the rest still land."""
    service = OwnerService(db_session)
    contact = await make_contact("Alice")
    old = await service.create_owner(OwnerCreate(name="Zoho"))
    new = await service.create_owner(OwnerCreate(name="Invoice"))
    contact_id, old_id, new_id = contact.id, old.id, new.id
    await service.add_owner(contact_id, old_id)

    with patch.object(service.owner_repo, "owner_ids_for_contact", AsyncMock(return_value=set())):
        result = await service.add_owners_to_contact(contact_id, [new_id, old_id])

    assert result.succeeded == 1
    assert [(s.id, s.reason) for s in result.skipped] == [(old_id, ALREADY_ASSOCIATED)]
    assert await service.owner_repo.owner_ids_for_contact(contact_id) == {old_id, new_id}



@pytest.mark.asyncio
async def test_deleting_owner_cascades_associations(db_session, make_contact):
    service = OwnerService(db_session)
    contact = await make_contact("Alice")
    contact_id = contact.id
    owner = await service.create_owner(OwnerCreate(name="Zoho"))
    await service.add_owner(contact_id, owner.id)

    await service.delete_owner(owner.id)

    assert (await ContactService(db_session).get_contact(contact_id)).owners == []
