"""Tests for the contact identity store."""

from datetime import datetime
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import OperationalError

from contact_ledger.core.errors import ConflictError, InvalidInputError, NotFoundError, StorageFailureError
from contact_ledger.core.scoring import ScoringPolicy
from contact_ledger.domain.models.contact import ContactCreate, ContactFilters, ContactUpdate
from contact_ledger.domain.models.relationships import OwnerCreate
from contact_ledger.domain.services.contact_service import ContactService
from contact_ledger.domain.services.owner_service import OwnerService

MOBILE = "+919876543210"


@pytest.mark.asyncio
async def test_create_contact_persists_score(db_session):
    """A complete contact from a trusted source scores 100."""
    service = ContactService(db_session)

    contact = await service.create_contact(
        ContactCreate(
            name="Test Contact",
            company_name="Test Corp",
            source_system="ZOHO",
            source_record_id="zoho-1",
            email="test@example.com",
            mobile=MOBILE,
            relationship_type="CLIENT",
        )
    )

    assert contact.id
    assert contact.data_quality_score == 100
    assert contact.is_whatsapp_reachable is False
    assert contact.owners == []

    stored = await service.get_contact(contact.id)
    assert stored.data_quality_score == 100
    assert stored.source_system == "ZOHO"
    assert stored.relationship_type == "CLIENT"


@pytest.mark.asyncio
async def test_create_contact_untrusted_source_and_unknown_company(db_session):
    service = ContactService(db_session)

    contact = await service.create_contact(
        ContactCreate(
            name="Test Contact",
            company_name="Unknown",
            source_system="MOBILE",
            source_record_id="m-1",
            email="test@example.com",
            mobile=MOBILE,
            relationship_type="CLIENT",
        )
    )

    assert contact.data_quality_score == 75


@pytest.mark.asyncio
async def test_create_duplicate_name_and_mobile_conflicts(db_session, make_contact):
    await make_contact("Test Contact", mobile=MOBILE)

    with pytest.raises(ConflictError):
        await make_contact("Test Contact", mobile=MOBILE, source_record_id="another")

    # Same mobile under a different name is a different identity
    other = await make_contact("Other Contact", mobile=MOBILE)
    assert other.mobile == MOBILE


@pytest.mark.asyncio
async def test_contacts_without_mobile_never_collide(db_session, make_contact):
    first = await make_contact("No Phone")
    second = await make_contact("No Phone")

    assert first.id != second.id
    assert first.mobile is None and second.mobile is None


@pytest.mark.asyncio
async def test_email_and_source_record_collisions_are_allowed(db_session, make_contact):
    await make_contact("Alice", email="shared@example.com", source_record_id="dup")
    bob = await make_contact("Bob", email="shared@example.com", source_record_id="dup")

    assert bob.email == "shared@example.com"


@pytest.mark.asyncio
async def test_create_requires_text_fields(db_session):
    service = ContactService(db_session)

    with pytest.raises(InvalidInputError):
        await service.create_contact(
            ContactCreate(name="  ", company_name="Acme", source_system="GMAIL", source_record_id="g-1")
        )
    with pytest.raises(InvalidInputError):
        await service.create_contact(
            ContactCreate(name="Alice", company_name="Acme", source_system="GMAIL", source_record_id="")
        )


@pytest.mark.asyncio
async def test_create_stores_empty_optional_fields_as_null(db_session, make_contact):
    contact = await make_contact("Alice", email="", mobile="")

    assert contact.email is None
    assert contact.mobile is None
    assert contact.data_quality_score == 15 + 10


@pytest.mark.asyncio
async def test_update_collision_leaves_row_unchanged(db_session, make_contact):
    """A conflicting update writes nothing."""
    service = ContactService(db_session)
    await make_contact("John Doe", mobile=MOBILE)
    other = await make_contact("John Doe", mobile="+15550000001", email="john@example.com")
    other_id = other.id

    with pytest.raises(ConflictError):
        await service.update_contact(other_id, ContactUpdate(mobile=MOBILE, email="changed@example.com"))

    reread = await service.get_contact(other_id)
    assert reread.mobile == "+15550000001"
    assert reread.email == "john@example.com"


@pytest.mark.asyncio
async def test_update_rename_onto_existing_identity_conflicts(db_session, make_contact):
    service = ContactService(db_session)
    await make_contact("Jane", mobile=MOBILE)
    other = await make_contact("Janet", mobile=MOBILE)
    other_id = other.id

    with pytest.raises(ConflictError):
        await service.update_contact(other_id, ContactUpdate(name="Jane"))

    assert (await service.get_contact(other_id)).name == "Janet"


@pytest.mark.asyncio
async def test_unique_constraint_backs_up_identity_check(db_session, make_contact):
    """With the pre-check blind, as under a concurrent writer, the store still rejects duplicates."""
    service = ContactService(db_session)
    original = await make_contact("John Doe", mobile=MOBILE)
    no_phone = await make_contact("John Doe", source_record_id="rec-no-phone")
    original_id, no_phone_id = original.id, no_phone.id

    with patch.object(service.contact_repo, "find_by_identity", AsyncMock(return_value=None)):
        with pytest.raises(ConflictError) as exc_info:
            await service.create_contact(
                ContactCreate(
                    name="John Doe",
                    company_name="Acme",
                    mobile=MOBILE,
                    source_system="GMAIL",
                    source_record_id="g-2",
                )
            )
        assert exc_info.value.message == "Contact with same name and mobile number already exists"

        with pytest.raises(ConflictError):
            await service.update_contact(no_phone_id, ContactUpdate(mobile=MOBILE))

    assert (await service.get_contact(no_phone_id)).mobile is None
    assert (await service.get_contact(original_id)).mobile == MOBILE
    page = await service.list_contacts(ContactFilters(q="John Doe"))
    assert page.total == 2



@pytest.mark.asyncio
async def test_update_own_identity_is_not_a_conflict(db_session, make_contact):
    service = ContactService(db_session)
    contact = await make_contact("Jane", mobile=MOBILE)

    updated = await service.update_contact(contact.id, ContactUpdate(name="Jane", mobile=MOBILE))

    assert updated.id == contact.id


@pytest.mark.asyncio
async def test_update_recomputes_score_from_full_record(db_session, make_contact):
    service = ContactService(db_session)
    contact = await make_contact("Alice", mobile=MOBILE, email="a@example.com", relationship_type="LEAD")
    assert contact.data_quality_score == 100

    updated = await service.update_contact(contact.id, ContactUpdate(email=None, company_name="Unknown"))

    assert updated.email is None
    assert updated.company_name == "Unknown"
    assert updated.data_quality_score == 40 + 15 + 10


@pytest.mark.asyncio
async def test_update_preserves_omitted_fields(db_session, make_contact):
    service = ContactService(db_session)
    contact = await make_contact("Alice", mobile=MOBILE, email="a@example.com", relationship_type="VENDOR")

    updated = await service.update_contact(contact.id, ContactUpdate(is_whatsapp_reachable=True))

    assert updated.is_whatsapp_reachable is True
    assert updated.email == "a@example.com"
    assert updated.mobile == MOBILE
    assert updated.relationship_type == "VENDOR"
    assert updated.data_quality_score == 100


@pytest.mark.asyncio
async def test_update_explicit_null_clears_relationship_type(db_session, make_contact):
    service = ContactService(db_session)
    contact = await make_contact("Alice", relationship_type="CLIENT")

    updated = await service.update_contact(contact.id, ContactUpdate(relationship_type=None))

    assert updated.relationship_type is None
    assert updated.data_quality_score == 15 + 10


@pytest.mark.asyncio
async def test_update_rejects_clearing_required_fields(db_session, make_contact):
    service = ContactService(db_session)
    contact = await make_contact("Alice")
    contact_id = contact.id

    with pytest.raises(InvalidInputError):
        await service.update_contact(contact_id, ContactUpdate(name=None))
    with pytest.raises(InvalidInputError):
        await service.update_contact(contact_id, ContactUpdate(company_name=""))
    with pytest.raises(InvalidInputError):
        await service.update_contact(contact_id, ContactUpdate(is_whatsapp_reachable=None))


@pytest.mark.asyncio
async def test_update_missing_contact_raises_not_found(db_session):
    service = ContactService(db_session)

    with pytest.raises(NotFoundError):
        await service.update_contact("missing", ContactUpdate(name="Nobody"))


@pytest.mark.asyncio
async def test_get_contact_resolves_owners(db_session, make_contact):
    service = ContactService(db_session)
    owners = OwnerService(db_session)
    contact = await make_contact("Alice")
    owner = await owners.create_owner(OwnerCreate(name="Sales Team"))
    await owners.add_owner(contact.id, owner.id)

    fetched = await service.get_contact(contact.id)

    assert [o.name for o in fetched.owners] == ["Sales Team"]


@pytest.mark.asyncio
async def test_delete_contact_removes_row_and_associations(db_session, make_contact):
    service = ContactService(db_session)
    owners = OwnerService(db_session)
    contact = await make_contact("Alice")
    contact_id = contact.id
    owner = await owners.create_owner(OwnerCreate(name="Sales Team"))
    await owners.add_owner(contact_id, owner.id)

    await service.delete_contact(contact_id)

    with pytest.raises(NotFoundError):
        await service.get_contact(contact_id)
    assert await owners.list_contacts_for_owner(owner.id) == []
    with pytest.raises(NotFoundError):
        await service.delete_contact(contact_id)


@pytest.mark.asyncio
async def test_get_missing_contact_raises_not_found(db_session):
    with pytest.raises(NotFoundError):
        await ContactService(db_session).get_contact("does-not-exist")


@pytest.mark.asyncio
async def test_list_contacts_newest_first_with_id_tiebreak(db_session, make_contact):
    service = ContactService(db_session)
    a = await make_contact("A")
    b = await make_contact("B")
    c = await make_contact("C")

    same_time = datetime(2024, 1, 1, 12, 0, 0)
    await service.contact_repo.update(a, created_at=datetime(2023, 1, 1))
    await service.contact_repo.update(b, created_at=same_time)
    await service.contact_repo.update(c, created_at=same_time)
    await db_session.commit()

    page = await service.list_contacts(ContactFilters())

    tied = sorted([b.id, c.id], reverse=True)
    assert [x.id for x in page.data] == tied + [a.id]
    assert page.total == 3
    assert page.page == 1
    assert page.limit == 20


@pytest.mark.asyncio
async def test_list_contacts_filters_combine(db_session, make_contact):
    service = ContactService(db_session)
    owners = OwnerService(db_session)
    alice = await make_contact(
        "Alice Smith", company_name="Acme Corp", email="alice@acme.io",
        mobile="+15550000001", relationship_type="CLIENT",
    )
    await make_contact("Bob", company_name="Globex", source_system="GMAIL", relationship_type="VENDOR")
    await make_contact("Carol", company_name="Acme Labs", source_system="MOBILE")
    owner = await owners.create_owner(OwnerCreate(name="Zoho CRM"))
    await owners.add_owner(alice.id, owner.id)
    await service.update_contact(alice.id, ContactUpdate(is_whatsapp_reachable=True))

    async def names(**filters):
        page = await service.list_contacts(ContactFilters(**filters))
        return sorted(c.name for c in page.data)

    assert await names(q="ACME") == ["Alice Smith", "Carol"]
    assert await names(q="alice@") == ["Alice Smith"]
    assert await names(company="acme", source_system="MOBILE") == ["Carol"]
    assert await names(relationship_type="VENDOR") == ["Bob"]
    assert await names(whatsapp_reachable=True) == ["Alice Smith"]
    assert await names(owner_name="zoho") == ["Alice Smith"]
    assert await names(min_score=100) == ["Alice Smith"]
    assert await names(q="acme", owner_name="nobody") == []


@pytest.mark.asyncio
async def test_list_contacts_paginates_with_full_total(db_session, make_contact):
    service = ContactService(db_session)
    for i in range(5):
        await make_contact(f"Contact {i}")

    page = await service.list_contacts(ContactFilters(page=2, limit=2))

    assert len(page.data) == 2
    assert page.total == 5
    assert page.page == 2
    assert page.limit == 2


@pytest.mark.asyncio
async def test_list_contacts_rejects_zero_limit(db_session):
    service = ContactService(db_session)

    with pytest.raises(InvalidInputError):
        await service.list_contacts(ContactFilters(limit=0))


@pytest.mark.asyncio
async def test_list_contacts_rejects_out_of_range_pagination(db_session):
    service = ContactService(db_session, max_page_limit=50)

    with pytest.raises(InvalidInputError):
        await service.list_contacts(ContactFilters(limit=51))
    with pytest.raises(InvalidInputError):
        await service.list_contacts(ContactFilters(page=0))


@pytest.mark.asyncio
async def test_custom_scoring_policy_is_used(db_session):
    service = ContactService(db_session, scoring_policy=ScoringPolicy.from_names(["GMAIL"]))

    contact = await service.create_contact(
        ContactCreate(name="Alice", company_name="Unknown", source_system="GMAIL", source_record_id="g-1")
    )

    assert contact.data_quality_score == 10


@pytest.mark.asyncio
async def test_storage_failure_propagates(db_session):
    service = ContactService(db_session)
    failure = OperationalError("INSERT INTO contacts", {}, Exception("database is locked"))

    with patch.object(db_session, "commit", AsyncMock(side_effect=failure)):
        with pytest.raises(StorageFailureError):
            await service.create_contact(
                ContactCreate(name="Alice", company_name="Acme", source_system="GMAIL", source_record_id="g-1")
            )

    page = await service.list_contacts(ContactFilters())
    assert page.total == 0
