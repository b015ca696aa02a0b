"""Contact service: the identity store for the shared contact ledger.

Owns all writes to the ``contacts`` table. Every create or update enforces
the (name, mobile) identity key and persists a freshly computed data-quality
score in the same transaction.
"""

import logging
from collections.abc import Iterable
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from contact_ledger.core.enums import parse_relationship_type, parse_source_system
from contact_ledger.core.errors import ConflictError, InvalidInputError, NotFoundError
from contact_ledger.core.scoring import ScoringPolicy
from contact_ledger.domain.models.contact import ContactCreate, ContactFilters, ContactUpdate
from contact_ledger.domain.models.pagination import Page, resolve_page
from contact_ledger.persistence.models.contact import Contact
from contact_ledger.persistence.repositories.contact_repository import (
    ContactRepository,
    ContactSearchCriteria,
)
from contact_ledger.persistence.transactions import unit_of_work
from contact_ledger.settings import settings

logger = logging.getLogger(__name__)

DUPLICATE_CONTACT_MESSAGE = "Contact with same name and mobile number already exists"

# Changing any of these triggers a score recomputation
SCORING_FIELDS = frozenset({"mobile", "email", "company_name", "relationship_type"})


def default_scoring_policy() -> ScoringPolicy:
    """Scoring policy built from the configured trusted sources."""
    return ScoringPolicy.from_names(
        settings.trusted_source_systems,
        unknown_company=settings.unknown_company_sentinel,
    )


def _blank_to_none(value: str | None) -> str | None:
    if value is None or value.strip() == "":
        return None
    return value


def _require_text(field: str, value: Any) -> str:
    if value is None or not str(value).strip():
        raise InvalidInputError(f"{field} is required")
    return value


class ContactService:
    """Service for contact identity management."""

    def __init__(
        self,
        session: AsyncSession,
        scoring_policy: ScoringPolicy | None = None,
        default_page_limit: int | None = None,
        max_page_limit: int | None = None,
    ) -> None:
        """Initialize contact service."""
        self.session = session
        self.contact_repo = ContactRepository(session)
        self.scoring_policy = scoring_policy or default_scoring_policy()
        self.default_page_limit = default_page_limit or settings.default_page_limit
        self.max_page_limit = max_page_limit or settings.max_page_limit

    async def _ensure_identity_free(
        self, name: str, mobile: str | None, exclude_ids: Iterable[str] = ()
    ) -> None:
        """Raise ConflictError if another contact holds (name, mobile).

        Contacts without a mobile are never checked.
        """
        if mobile is None:
            return
        existing = await self.contact_repo.find_by_identity(name, mobile, exclude_ids=exclude_ids)
        if existing is not None:
            raise ConflictError(DUPLICATE_CONTACT_MESSAGE)


    async def create_contact(self, data: ContactCreate) -> Contact:
        """Create a new contact.

        Args:
            data: Contact fields; ``mobile`` must already be canonical

        Returns:
            Created contact, including its data-quality score

        Raises:
            InvalidInputError: If a required field is missing or an enum is invalid
            ConflictError: If a contact with the same name and mobile exists
        """
        name = _require_text("name", data.name)
        company_name = _require_text("company_name", data.company_name)
        source_record_id = _require_text("source_record_id", data.source_record_id)
        source_system = parse_source_system(data.source_system)
        relationship_type = parse_relationship_type(data.relationship_type)
        email = _blank_to_none(data.email)
        mobile = _blank_to_none(data.mobile)

        await self._ensure_identity_free(name, mobile)

        score = self.scoring_policy.calculate(
            mobile=mobile,
            email=email,
            company_name=company_name,
            relationship_type=relationship_type,
            source_system=source_system,
        )

        async with unit_of_work(self.session, DUPLICATE_CONTACT_MESSAGE):
            contact = await self.contact_repo.create(
                name=name,
                company_name=company_name,
                email=email,
                mobile=mobile,
                relationship_type=relationship_type.value if relationship_type else None,
                source_system=source_system.value,
                source_record_id=source_record_id,
                data_quality_score=score,
            )

        logger.info(f"Contact created: id={contact.id}, source={source_system.value}, score={score}")
        return await self.contact_repo.get_with_owners(contact.id)

    async def plan_update(
        self, contact: Contact, data: ContactUpdate, exclude_ids: Iterable[str] = ()
    ) -> dict[str, Any]:
        """Validate a partial update and work out the column changes it implies.

        Nothing is written. The returned mapping includes a recomputed
        ``data_quality_score`` when a scoring field changes.

        Args:
            contact: Contact being updated
            data: Fields to change
            exclude_ids: Further contacts whose identity may be taken over,
                e.g. contacts deleted in the same transaction

        Raises:
            ConflictError: If the resulting (name, mobile) belongs to another contact
            InvalidInputError: If a value is invalid
        """
        changes: dict[str, Any] = {}
        for field, value in data.model_dump(exclude_unset=True).items():
            if field in ("name", "company_name"):
                changes[field] = _require_text(field, value)
            elif field in ("email", "mobile"):
                changes[field] = _blank_to_none(value)
            elif field == "relationship_type":
                parsed = parse_relationship_type(value)
                changes[field] = parsed.value if parsed else None
            elif field == "is_whatsapp_reachable":
                if value is None:
                    raise InvalidInputError("is_whatsapp_reachable cannot be null")
                changes[field] = value

        if not changes:
            return changes

        new_name = changes.get("name", contact.name)
        new_mobile = changes.get("mobile", contact.mobile)
        if new_name != contact.name or new_mobile != contact.mobile:
            await self._ensure_identity_free(
                new_name, new_mobile, exclude_ids=[contact.id, *exclude_ids]
            )

        if SCORING_FIELDS & changes.keys():
            changes["data_quality_score"] = self.scoring_policy.calculate(
                mobile=new_mobile,
                email=changes.get("email", contact.email),
                company_name=changes.get("company_name", contact.company_name),
                relationship_type=changes.get("relationship_type", contact.relationship_type),
                source_system=contact.source_system,
            )
        return changes

    async def update_contact(self, contact_id: str, data: ContactUpdate) -> Contact:
        """Apply a partial update to a contact.

        Only fields explicitly set on ``data`` are applied. Setting ``email``,
        ``mobile`` or ``relationship_type`` to None (or an empty string) clears
        it; ``name`` and ``company_name`` cannot be cleared.

        Args:
            contact_id: Contact ID
            data: Fields to change

        Returns:
            Updated contact

        Raises:
            NotFoundError: If the contact does not exist
            ConflictError: If the resulting (name, mobile) belongs to another contact
            InvalidInputError: If a value is invalid
        """
        contact = await self.contact_repo.get_by_id(contact_id)
        if contact is None:
            raise NotFoundError("Contact not found")

        changes = await self.plan_update(contact, data)
        if not changes:
            return await self.contact_repo.get_with_owners(contact_id)

        async with unit_of_work(self.session, DUPLICATE_CONTACT_MESSAGE):
            await self.contact_repo.update(contact, **changes)

        logger.info(f"Contact updated: id={contact_id}, fields={sorted(changes)}")
        return await self.contact_repo.get_with_owners(contact_id)

    async def get_contact(self, contact_id: str) -> Contact:
        """Get a contact with its owners resolved.

        Raises:
            NotFoundError: If the contact does not exist
        """
        contact = await self.contact_repo.get_with_owners(contact_id)
        if contact is None:
            raise NotFoundError("Contact not found")
        return contact

    async def get_contacts(self, contact_ids: list[str]) -> list[Contact]:
        """Get several contacts, in the order requested.

        Raises:
            NotFoundError: Naming every ID that does not exist
        """
        contacts = {c.id: c for c in await self.contact_repo.get_multiple_by_ids(contact_ids)}
        missing = [cid for cid in contact_ids if cid not in contacts]
        if missing:
            raise NotFoundError(f"Contacts not found: {', '.join(missing)}")
        return [contacts[cid] for cid in contact_ids]

    async def delete_contact(self, contact_id: str) -> None:
        """Permanently delete a contact.

        Owner and tag associations are removed by the store's cascading
        foreign keys. No merge history is written.

        Raises:
            NotFoundError: If the contact does not exist
        """
        contact = await self.contact_repo.get_by_id(contact_id)
        if contact is None:
            raise NotFoundError("Contact not found")

        async with unit_of_work(self.session):
            await self.contact_repo.delete(contact)

        logger.info(f"Contact deleted: id={contact_id}")

    async def list_contacts(self, filters: ContactFilters) -> Page[Contact]:
        """List contacts matching ``filters``, newest first.

        Raises:
            InvalidInputError: If pagination is out of range or an enum is invalid
        """
        limit, skip = resolve_page(
            filters.page, filters.limit, self.default_page_limit, self.max_page_limit
        )
        relationship_type = parse_relationship_type(filters.relationship_type)
        source_system = (
            parse_source_system(filters.source_system) if filters.source_system is not None else None
        )
        if filters.min_score is not None and not 0 <= filters.min_score <= 100:
            raise InvalidInputError("min_score must be between 0 and 100")

        criteria = ContactSearchCriteria(
            q=filters.q,
            owner_name=filters.owner_name,
            relationship_type=relationship_type.value if relationship_type else None,
            whatsapp_reachable=filters.whatsapp_reachable,
            min_score=filters.min_score,
            source_system=source_system.value if source_system else None,
            company=filters.company,
        )
        contacts, total = await self.contact_repo.search(criteria, skip=skip, limit=limit)
        return Page(data=contacts, total=total, page=filters.page, limit=limit)
