"""Tag repository."""

from sqlalchemy import and_, delete, func, insert, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from contact_ledger.persistence.models.contact import Contact
from contact_ledger.persistence.models.tag import ContactTag, Tag
from contact_ledger.persistence.repositories.base import BaseRepository


class TagRepository(BaseRepository[Tag]):
    """Repository for Tag entities and their contact associations."""

    def __init__(self, session: AsyncSession):
        """Initialize tag repository."""
        super().__init__(Tag, session)

    def _with_counts(self):
        """Select tags together with the number of contacts carrying them."""
        contact_count = func.count(ContactTag.contact_id).label("contact_count")
        stmt = (
            select(Tag, contact_count)
            .outerjoin(ContactTag, ContactTag.tag_id == Tag.id)
            .group_by(Tag.id)
        )
        return stmt, contact_count

    async def get_by_name(self, name: str) -> Tag | None:
        """Get tag by its unique name."""
        result = await self.session.execute(select(Tag).where(Tag.name == name))
        return result.scalar_one_or_none()

    async def existing_ids(self, ids: list[str]) -> set[str]:
        """Return the subset of ``ids`` that exist."""
        if not ids:
            return set()
        result = await self.session.execute(select(Tag.id).where(Tag.id.in_(ids)))
        return set(result.scalars().all())

    async def get_with_count(self, id: str) -> tuple[Tag, int] | None:
        """Get a tag and its contact count."""
        stmt, _ = self._with_counts()
        result = await self.session.execute(stmt.where(Tag.id == id))
        row = result.first()
        if row is None:
            return None
        return row[0], row[1]

    async def list_active_with_counts(self) -> list[tuple[Tag, int]]:
        """Active tags with contact counts, ordered by name."""
        stmt, _ = self._with_counts()
        stmt = stmt.where(Tag.is_active.is_(True)).order_by(Tag.name.asc())
        result = await self.session.execute(stmt)
        return [(tag, count) for tag, count in result.all()]

    async def search_active(self, query: str, limit: int) -> list[tuple[Tag, int]]:
        """Active tags whose name or description contains ``query`` (case-insensitive)."""
        needle = query.lower()
        stmt, _ = self._with_counts()
        stmt = (
            stmt.where(
                Tag.is_active.is_(True),
                or_(
                    func.lower(Tag.name).contains(needle, autoescape=True),
                    func.lower(Tag.description).contains(needle, autoescape=True),
                ),
            )
            .order_by(Tag.name.asc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [(tag, count) for tag, count in result.all()]

    async def popular_active(self, limit: int) -> list[tuple[Tag, int]]:
        """Active tags ordered by contact count (desc), then name (asc)."""
        stmt, contact_count = self._with_counts()
        stmt = (
            stmt.where(Tag.is_active.is_(True))
            .order_by(contact_count.desc(), Tag.name.asc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [(tag, count) for tag, count in result.all()]

    async def count_references(self, tag_id: str) -> int:
        """Number of contacts carrying a tag."""
        stmt = select(func.count()).select_from(ContactTag).where(ContactTag.tag_id == tag_id)
        result = await self.session.execute(stmt)
        return result.scalar_one()

    # Association management

    async def get_link(self, contact_id: str, tag_id: str) -> ContactTag | None:
        """Get the association row for a (contact, tag) pair."""
        stmt = select(ContactTag).where(
            ContactTag.contact_id == contact_id,
            ContactTag.tag_id == tag_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def add_link(self, contact_id: str, tag_id: str) -> None:
        """Insert an association row.

        Raises:
            IntegrityError: If the pair already exists or either side is gone
        """
        await self.session.execute(insert(ContactTag).values(contact_id=contact_id, tag_id=tag_id))

    async def remove_link(self, contact_id: str, tag_id: str) -> int:
        """Delete the association row for a pair.

        Returns:
            Number of rows deleted (0 or 1)
        """
        stmt = delete(ContactTag).where(
            ContactTag.contact_id == contact_id,
            ContactTag.tag_id == tag_id,
        )
        result = await self.session.execute(stmt)
        return result.rowcount

    async def tag_ids_for_contact(self, contact_id: str) -> set[str]:
        """IDs of all tags on a contact."""
        stmt = select(ContactTag.tag_id).where(ContactTag.contact_id == contact_id)
        result = await self.session.execute(stmt)
        return set(result.scalars().all())

    async def contact_ids_for_tag(self, tag_id: str) -> set[str]:
        """IDs of all contacts carrying a tag."""
        stmt = select(ContactTag.contact_id).where(ContactTag.tag_id == tag_id)
        result = await self.session.execute(stmt)
        return set(result.scalars().all())

    async def tags_for_contact(self, contact_id: str) -> list[Tag]:
        """Tags on a contact, ordered by name."""
        stmt = (
            select(Tag)
            .join(ContactTag, ContactTag.tag_id == Tag.id)
            .where(ContactTag.contact_id == contact_id)
            .order_by(Tag.name.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def contacts_for_tag(self, tag_id: str, with_email_only: bool = False) -> list[Contact]:
        """Contacts carrying a tag, ordered by name.

        Args:
            tag_id: Tag ID
            with_email_only: Restrict to contacts with a non-empty email

        Returns:
            List of contacts
        """
        stmt = (
            select(Contact)
            .join(ContactTag, ContactTag.contact_id == Contact.id)
            .where(ContactTag.tag_id == tag_id)
        )
        if with_email_only:
            stmt = stmt.where(and_(Contact.email.is_not(None), Contact.email != ""))
        stmt = stmt.order_by(Contact.name.asc(), Contact.id.asc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
