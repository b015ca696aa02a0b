"""Tag service for tag lifecycle, contact-tag associations and tag views."""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from contact_ledger.core.errors import ConflictError, InvalidInputError, NotFoundError
from contact_ledger.domain.models.relationships import (
    ALREADY_ASSOCIATED,
    CONTACT_NOT_FOUND,
    NOT_ASSOCIATED,
    TAG_NOT_FOUND,
    BatchResult,
    TagCreate,
    TagUpdate,
    TagWithCount,
)
from contact_ledger.domain.services.batching import plan_batch
from contact_ledger.persistence.models.contact import Contact
from contact_ledger.persistence.models.tag import Tag
from contact_ledger.persistence.repositories.contact_repository import ContactRepository
from contact_ledger.persistence.repositories.tag_repository import TagRepository
from contact_ledger.persistence.transactions import unit_of_work
from contact_ledger.settings import settings

logger = logging.getLogger(__name__)

TAG_SEARCH_LIMIT = 20
DEFAULT_POPULAR_LIMIT = 10


def _strip(value: str | None) -> str | None:
    return value.strip() if value is not None else None


class TagService:
    """Service for tags and their contact associations."""

    def __init__(self, session: AsyncSession, default_color: str | None = None) -> None:
        """Initialize tag service.

        Args:
            session: Database session
            default_color: Color for tags created without one
        """
        self.session = session
        self.tag_repo = TagRepository(session)
        self.contact_repo = ContactRepository(session)
        self.default_color = default_color or settings.default_tag_color

    # Tag lifecycle

    async def create_tag(self, data: TagCreate) -> TagWithCount:
        """Create a tag. Name and description are trimmed.

        Raises:
            InvalidInputError: If the name is blank
            ConflictError: If a tag with the same name exists
        """
        name = _strip(data.name)
        if not name:
            raise InvalidInputError("name is required")
        message = f"Tag with name '{name}' already exists"
        if await self.tag_repo.get_by_name(name):
            raise ConflictError(message)

        async with unit_of_work(self.session, message):
            tag = await self.tag_repo.create(
                name=name,
                color=data.color or self.default_color,
                description=_strip(data.description),
            )

        logger.info(f"Tag created: {tag.name}")
        return TagWithCount.from_row(tag, 0)

    async def list_tags(self) -> list[TagWithCount]:
        """Active tags with their contact counts, ordered by name."""
        rows = await self.tag_repo.list_active_with_counts()
        return [TagWithCount.from_row(tag, count) for tag, count in rows]

    async def get_tag(self, tag_id: str) -> TagWithCount:
        row = await self.tag_repo.get_with_count(tag_id)
        if row is None:
            raise NotFoundError(f"Tag with ID {tag_id} not found")
        return TagWithCount.from_row(*row)

    async def _get_tag_row(self, tag_id: str) -> Tag:
        tag = await self.tag_repo.get_by_id(tag_id)
        if tag is None:
            raise NotFoundError(f"Tag with ID {tag_id} not found")
        return tag

    async def update_tag(self, tag_id: str, data: TagUpdate) -> TagWithCount:
        """Apply a partial update to a tag.

        Setting ``is_active`` to False hides the tag from listings without
        touching its associations.

        Raises:
            NotFoundError: If the tag does not exist
            ConflictError: If renaming onto another tag's name
        """
        tag = await self._get_tag_row(tag_id)
        fields = data.model_dump(exclude_unset=True)

        changes = {}
        if fields.get("name") is not None:
            name = fields["name"].strip()
            if not name:
                raise InvalidInputError("name cannot be blank")
            if name != tag.name and await self.tag_repo.get_by_name(name):
                raise ConflictError(f"Tag with name '{name}' already exists")
            changes["name"] = name
        if fields.get("color"):
            changes["color"] = fields["color"]
        if "description" in fields:
            changes["description"] = _strip(fields["description"])
        if fields.get("is_active") is not None:
            changes["is_active"] = fields["is_active"]

        if changes:
            async with unit_of_work(self.session, f"Tag with name '{changes.get('name')}' already exists"):
                await self.tag_repo.update(tag, **changes)
            logger.info(f"Tag updated: {tag.name}")
        return await self.get_tag(tag_id)

    async def delete_tag(self, tag_id: str) -> None:
        """Hard-delete a tag that no contact carries.

        Raises:
            NotFoundError: If the tag does not exist
            ConflictError: If contacts still carry the tag; ``blocking_references``
                holds their number
        """
        tag = await self._get_tag_row(tag_id)
        references = await self.tag_repo.count_references(tag_id)
        if references > 0:
            raise ConflictError(
                f"Tag '{tag.name}' is still assigned to {references} contacts",
                blocking_references=references,
            )

        name = tag.name
        async with unit_of_work(self.session):
            await self.tag_repo.delete(tag)
        logger.info(f"Tag hard deleted: {name}")

    # Views

    async def search_tags(self, query: str) -> list[TagWithCount]:
        """Active tags whose name or description contains ``query``, at most 20."""
        rows = await self.tag_repo.search_active(query, TAG_SEARCH_LIMIT)
        return [TagWithCount.from_row(tag, count) for tag, count in rows]

    async def popular_tags(self, limit: int = DEFAULT_POPULAR_LIMIT) -> list[TagWithCount]:
        """Active tags with the most contacts first, ties broken by name."""
        if limit < 1:
            raise InvalidInputError(f"limit must be >= 1, got {limit}")
        rows = await self.tag_repo.popular_active(limit)
        return [TagWithCount.from_row(tag, count) for tag, count in rows]

    async def tags_for_contact(self, contact_id: str) -> list[Tag]:
        if not await self.contact_repo.exists(contact_id):
            raise NotFoundError(f"Contact with ID {contact_id} not found")
        return await self.tag_repo.tags_for_contact(contact_id)

    async def contacts_with_tag(self, tag_id: str) -> list[Contact]:
        await self._get_tag_row(tag_id)
        return await self.tag_repo.contacts_for_tag(tag_id)

    async def contacts_with_email_for_tag(self, tag_id: str) -> list[Contact]:
        """Contacts carrying the tag that have a non-empty email."""
        await self._get_tag_row(tag_id)
        return await self.tag_repo.contacts_for_tag(tag_id, with_email_only=True)

    # Single-pair associations (strict)

    async def add_tag(self, contact_id: str, tag_id: str) -> None:
        """Tag a contact.

        Raises:
            NotFoundError: If the contact or tag does not exist
            ConflictError: If the contact already carries the tag
        """
        if not await self.contact_repo.exists(contact_id):
            raise NotFoundError(f"Contact with ID {contact_id} not found")
        await self._get_tag_row(tag_id)

        message = f"Contact {contact_id} already has tag {tag_id}"
        if await self.tag_repo.get_link(contact_id, tag_id):
            raise ConflictError(message)

        async with unit_of_work(self.session, message):
            await self.tag_repo.add_link(contact_id, tag_id)
        logger.info(f"Tag {tag_id} added to contact {contact_id}")

    async def remove_tag(self, contact_id: str, tag_id: str) -> None:
        """Untag a contact.

        Raises:
            NotFoundError: If the contact, the tag, or the pair does not exist
        """
        if not await self.contact_repo.exists(contact_id):
            raise NotFoundError(f"Contact with ID {contact_id} not found")
        await self._get_tag_row(tag_id)
        if not await self.tag_repo.get_link(contact_id, tag_id):
            raise NotFoundError(f"Tag {tag_id} not found on contact {contact_id}")

        async with unit_of_work(self.session):
            await self.tag_repo.remove_link(contact_id, tag_id)
        logger.info(f"Tag {tag_id} removed from contact {contact_id}")

    # Bulk associations (tolerant)

    async def _apply(
        self,
        pairs: list[tuple[str, str, str]],
        result: BatchResult,
        adding: bool,
        missing_reason: str,
    ) -> BatchResult:
        """Insert or delete planned (target_id, contact_id, tag_id) pairs in one transaction.

        Each insert runs in its own savepoint, so a pair that turned up between
        planning and writing is skipped without discarding the rest of the batch.
        """
        if not pairs:
            return result
        async with unit_of_work(self.session, "Contact-tag association already exists"):
            for target_id, contact_id, tag_id in pairs:
                if adding:
                    try:
                        async with self.session.begin_nested():
                            await self.tag_repo.add_link(contact_id, tag_id)
                    except IntegrityError:
                        linked = await self.tag_repo.get_link(contact_id, tag_id)
                        result.skip(target_id, ALREADY_ASSOCIATED if linked else missing_reason)
                        continue
                    result.succeeded += 1
                elif await self.tag_repo.remove_link(contact_id, tag_id):
                    result.succeeded += 1
                else:
                    result.skip(target_id, NOT_ASSOCIATED)
        return result

    async def _bulk_for_contact(self, contact_id: str, tag_ids: list[str], adding: bool) -> BatchResult:
        if not await self.contact_repo.exists(contact_id):
            raise NotFoundError(f"Contact with ID {contact_id} not found")
        actionable, result = plan_batch(
            tag_ids,
            known_ids=await self.tag_repo.existing_ids(tag_ids),
            linked_ids=await self.tag_repo.tag_ids_for_contact(contact_id),
            missing_reason=TAG_NOT_FOUND,
            adding=adding,
        )
        return await self._apply(
            [(tid, contact_id, tid) for tid in actionable], result, adding, TAG_NOT_FOUND
        )

    async def _bulk_for_tag(self, tag_id: str, contact_ids: list[str], adding: bool) -> BatchResult:
        await self._get_tag_row(tag_id)
        actionable, result = plan_batch(
            contact_ids,
            known_ids=await self.contact_repo.existing_ids(contact_ids),
            linked_ids=await self.tag_repo.contact_ids_for_tag(tag_id),
            missing_reason=CONTACT_NOT_FOUND,
            adding=adding,
        )
        return await self._apply(
            [(cid, cid, tag_id) for cid in actionable], result, adding, CONTACT_NOT_FOUND
        )

    async def add_tags_to_contact(self, contact_id: str, tag_ids: list[str]) -> BatchResult:
        """Add several tags to one contact; pairs that already exist are skipped."""
        result = await self._bulk_for_contact(contact_id, tag_ids, adding=True)
        logger.info(f"Bulk add tags to contact {contact_id}: {result.succeeded} added, {len(result.skipped)} skipped")
        return result

    async def remove_tags_from_contact(self, contact_id: str, tag_ids: list[str]) -> BatchResult:
        """Remove several tags from one contact; missing pairs are skipped."""
        result = await self._bulk_for_contact(contact_id, tag_ids, adding=False)
        logger.info(f"Bulk remove tags from contact {contact_id}: {result.succeeded} removed, {len(result.skipped)} skipped")
        return result

    async def add_tag_to_contacts(self, tag_id: str, contact_ids: list[str]) -> BatchResult:
        result = await self._bulk_for_tag(tag_id, contact_ids, adding=True)
        logger.info(f"Bulk add tag {tag_id} to contacts: {result.succeeded} added, {len(result.skipped)} skipped")
        return result

    async def remove_tag_from_contacts(self, tag_id: str, contact_ids: list[str]) -> BatchResult:
        result = await self._bulk_for_tag(tag_id, contact_ids, adding=False)
        logger.info(f"Bulk remove tag {tag_id} from contacts: {result.succeeded} removed, {len(result.skipped)} skipped")
        return result
