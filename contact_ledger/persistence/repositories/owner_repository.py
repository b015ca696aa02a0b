"""Owner repository."""

from sqlalchemy import delete, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from contact_ledger.persistence.models.contact import Contact
from contact_ledger.persistence.models.owner import ContactOwner, Owner
from contact_ledger.persistence.repositories.base import BaseRepository


class OwnerRepository(BaseRepository[Owner]):
    """Repository for Owner entities and their contact associations."""

    def __init__(self, session: AsyncSession):
        """Initialize owner repository."""
        super().__init__(Owner, session)

    async def get_by_name(self, name: str) -> Owner | None:
        """Get owner by its unique name."""
        result = await self.session.execute(select(Owner).where(Owner.name == name))
        return result.scalar_one_or_none()

    async def list_all(self) -> list[Owner]:
        """List all owners ordered by name."""
        result = await self.session.execute(select(Owner).order_by(Owner.name.asc()))
        return list(result.scalars().all())

    async def existing_ids(self, ids: list[str]) -> set[str]:
        """Return the subset of ``ids`` that exist."""
        if not ids:
            return set()
        result = await self.session.execute(select(Owner.id).where(Owner.id.in_(ids)))
        return set(result.scalars().all())

    # Association management

    async def get_link(self, contact_id: str, owner_id: str) -> ContactOwner | None:
        """Get the association row for a (contact, owner) pair."""
        stmt = select(ContactOwner).where(
            ContactOwner.contact_id == contact_id,
            ContactOwner.owner_id == owner_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def add_link(self, contact_id: str, owner_id: str) -> None:
        """Insert an association row.

        Raises:
            IntegrityError: If the pair already exists or either side is gone
        """
        await self.session.execute(insert(ContactOwner).values(contact_id=contact_id, owner_id=owner_id))

    async def remove_link(self, contact_id: str, owner_id: str) -> int:
        """Delete the association row for a pair.

        Returns:
            Number of rows deleted (0 or 1)
        """
        stmt = delete(ContactOwner).where(
            ContactOwner.contact_id == contact_id,
            ContactOwner.owner_id == owner_id,
        )
        result = await self.session.execute(stmt)
        return result.rowcount

    async def owner_ids_for_contact(self, contact_id: str) -> set[str]:
        """IDs of all owners associated with a contact."""
        stmt = select(ContactOwner.owner_id).where(ContactOwner.contact_id == contact_id)
        result = await self.session.execute(stmt)
        return set(result.scalars().all())

    async def contact_ids_for_owner(self, owner_id: str) -> set[str]:
        """IDs of all contacts associated with an owner."""
        stmt = select(ContactOwner.contact_id).where(ContactOwner.owner_id == owner_id)
        result = await self.session.execute(stmt)
        return set(result.scalars().all())

    async def list_contacts_for_owner(self, owner_id: str) -> list[Contact]:
        """Contacts associated with an owner, ordered by name."""
        stmt = (
            select(Contact)
            .join(ContactOwner, ContactOwner.contact_id == Contact.id)
            .where(ContactOwner.owner_id == owner_id)
            .order_by(Contact.name.asc(), Contact.id.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
