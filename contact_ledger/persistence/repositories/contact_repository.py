"""Contact repository."""

from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from contact_ledger.persistence.models.contact import Contact
from contact_ledger.persistence.models.owner import ContactOwner, Owner
from contact_ledger.persistence.repositories.base import BaseRepository


@dataclass
class ContactSearchCriteria:
    """Combinable filters for listing contacts. ``None`` means "not filtered"."""

    q: str | None = None
    owner_name: str | None = None
    relationship_type: str | None = None
    whatsapp_reachable: bool | None = None
    min_score: int | None = None
    source_system: str | None = None
    company: str | None = None


def _contains(column, value: str):
    """Case-insensitive substring match."""
    return func.lower(column).contains(value.lower(), autoescape=True)


class ContactRepository(BaseRepository[Contact]):
    """Repository for Contact entities."""

    def __init__(self, session: AsyncSession):
        """Initialize contact repository."""
        super().__init__(Contact, session)

    async def get_with_owners(self, id: str) -> Contact | None:
        """Get contact by ID with its owners loaded.

        Args:
            id: Contact ID

        Returns:
            Contact or None if not found
        """
        stmt = (
            select(Contact)
            .options(selectinload(Contact.owners))
            .where(Contact.id == id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def find_by_identity(
        self, name: str, mobile: str, exclude_ids: Iterable[str] = ()
    ) -> Contact | None:
        """Find a contact holding the (name, mobile) identity key.

        Matching is exact string equality on both parts.

        Args:
            name: Display name
            mobile: Canonical mobile number
            exclude_ids: Contact IDs to ignore (the contacts being written)

        Returns:
            Matching contact or None
        """
        stmt = select(Contact).where(Contact.name == name, Contact.mobile == mobile)
        exclude_ids = list(exclude_ids)
        if exclude_ids:
            stmt = stmt.where(Contact.id.notin_(exclude_ids))
        result = await self.session.execute(stmt.limit(1))
        return result.scalar_one_or_none()


    async def existing_ids(self, ids: list[str]) -> set[str]:
        """Return the subset of ``ids`` that exist."""
        if not ids:
            return set()
        result = await self.session.execute(select(Contact.id).where(Contact.id.in_(ids)))
        return set(result.scalars().all())

    async def search(
        self,
        criteria: ContactSearchCriteria,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[list[Contact], int]:
        """List contacts matching ``criteria``, newest first.

        Args:
            criteria: Filters to apply
            skip: Number of records to skip
            limit: Maximum number of records to return

        Returns:
            Tuple of (page of contacts with owners loaded, total matching count)
        """
        conditions = []

        if criteria.q:
            conditions.append(
                or_(
                    _contains(Contact.name, criteria.q),
                    _contains(Contact.email, criteria.q),
                    _contains(Contact.company_name, criteria.q),
                )
            )
        if criteria.relationship_type is not None:
            conditions.append(Contact.relationship_type == criteria.relationship_type)
        if criteria.whatsapp_reachable is not None:
            conditions.append(Contact.is_whatsapp_reachable == criteria.whatsapp_reachable)
        if criteria.min_score is not None:
            conditions.append(Contact.data_quality_score >= criteria.min_score)
        if criteria.source_system is not None:
            conditions.append(Contact.source_system == criteria.source_system)
        if criteria.company:
            conditions.append(_contains(Contact.company_name, criteria.company))
        if criteria.owner_name:
            owned = (
                select(ContactOwner.contact_id)
                .join(Owner, Owner.id == ContactOwner.owner_id)
                .where(_contains(Owner.name, criteria.owner_name))
            )
            conditions.append(Contact.id.in_(owned))

        count_stmt = select(func.count()).select_from(Contact).where(*conditions)
        total = (await self.session.execute(count_stmt)).scalar_one()

        stmt = (
            select(Contact)
            .options(selectinload(Contact.owners))
            .where(*conditions)
            .order_by(Contact.created_at.desc(), Contact.id.desc())
            .offset(skip)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total
