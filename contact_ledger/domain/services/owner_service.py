"""Owner service for owner lifecycle and contact-owner associations."""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from contact_ledger.core.errors import ConflictError, InvalidInputError, NotFoundError
from contact_ledger.domain.models.relationships import (
    ALREADY_ASSOCIATED,
    CONTACT_NOT_FOUND,
    NOT_ASSOCIATED,
    OWNER_NOT_FOUND,
    BatchResult,
    OwnerCreate,
    OwnerUpdate,
)
from contact_ledger.domain.services.batching import plan_batch
from contact_ledger.persistence.models.contact import Contact
from contact_ledger.persistence.models.owner import Owner
from contact_ledger.persistence.repositories.contact_repository import ContactRepository
from contact_ledger.persistence.repositories.owner_repository import OwnerRepository
from contact_ledger.persistence.transactions import unit_of_work

logger = logging.getLogger(__name__)

DUPLICATE_OWNER_MESSAGE = "Owner with this name already exists"
DUPLICATE_LINK_MESSAGE = "Contact is already associated with this owner"


class OwnerService:
    """Service for owners and their contact associations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize owner service."""
        self.session = session
        self.owner_repo = OwnerRepository(session)
        self.contact_repo = ContactRepository(session)

    async def create_owner(self, data: OwnerCreate) -> Owner:
        """Create an owner.

        Raises:
            InvalidInputError: If the name is blank
            ConflictError: If an owner with the same name exists
        """
        if not data.name or not data.name.strip():
            raise InvalidInputError("name is required")
        if await self.owner_repo.get_by_name(data.name):
            raise ConflictError(DUPLICATE_OWNER_MESSAGE)

        async with unit_of_work(self.session, DUPLICATE_OWNER_MESSAGE):
            owner = await self.owner_repo.create(name=data.name, is_active=data.is_active)

        logger.info(f"Owner created: {owner.name}")
        return owner

    async def list_owners(self) -> list[Owner]:
        return await self.owner_repo.list_all()

    async def get_owner(self, owner_id: str) -> Owner:
        owner = await self.owner_repo.get_by_id(owner_id)
        if owner is None:
            raise NotFoundError(f"Owner {owner_id} not found")
        return owner

    async def update_owner(self, owner_id: str, data: OwnerUpdate) -> Owner:
        """Apply a partial update to an owner.

        Raises:
            NotFoundError: If the owner does not exist
            ConflictError: If renaming onto another owner's name
        """
        owner = await self.get_owner(owner_id)
        changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}

        new_name = changes.get("name")
        if new_name is not None:
            if not new_name.strip():
                raise InvalidInputError("name cannot be blank")
            if new_name != owner.name and await self.owner_repo.get_by_name(new_name):
                raise ConflictError(DUPLICATE_OWNER_MESSAGE)

        if changes:
            async with unit_of_work(self.session, DUPLICATE_OWNER_MESSAGE):
                await self.owner_repo.update(owner, **changes)
            logger.info(f"Owner updated: {owner_id}")
        return owner

    async def delete_owner(self, owner_id: str) -> None:
        """Delete an owner; its contact associations cascade."""
        owner = await self.get_owner(owner_id)
        async with unit_of_work(self.session):
            await self.owner_repo.delete(owner)
        logger.info(f"Owner deleted: {owner_id}")

    async def list_contacts_for_owner(self, owner_id: str) -> list[Contact]:
        await self.get_owner(owner_id)
        return await self.owner_repo.list_contacts_for_owner(owner_id)

    # Single-pair associations (strict)

    async def _ensure_pair_exists(self, contact_id: str, owner_id: str) -> None:
        if not await self.contact_repo.exists(contact_id):
            raise NotFoundError(f"Contact {contact_id} not found")
        if not await self.owner_repo.exists(owner_id):
            raise NotFoundError(f"Owner {owner_id} not found")

    async def add_owner(self, contact_id: str, owner_id: str) -> None:
        """Associate an owner with a contact.

        Raises:
            NotFoundError: If the contact or owner does not exist
            ConflictError: If the pair is already associated
        """
        await self._ensure_pair_exists(contact_id, owner_id)
        if await self.owner_repo.get_link(contact_id, owner_id):
            raise ConflictError(DUPLICATE_LINK_MESSAGE)

        async with unit_of_work(self.session, DUPLICATE_LINK_MESSAGE):
            await self.owner_repo.add_link(contact_id, owner_id)

        logger.info(f"Owner {owner_id} added to contact {contact_id}")

    async def remove_owner(self, contact_id: str, owner_id: str) -> None:
        """Remove an owner from a contact.

        Raises:
            NotFoundError: If the pair is not associated
        """
        if not await self.owner_repo.get_link(contact_id, owner_id):
            raise NotFoundError("Contact-owner association not found")

        async with unit_of_work(self.session):
            await self.owner_repo.remove_link(contact_id, owner_id)

        logger.info(f"Owner {owner_id} removed from contact {contact_id}")

    # Bulk associations (tolerant)

    async def _apply(
        self,
        pairs: list[tuple[str, str, str]],
        result: BatchResult,
        adding: bool,
        missing_reason: str,
    ) -> BatchResult:
        """Insert or delete planned (target_id, contact_id, owner_id) pairs in one transaction.

        Each insert runs in its own savepoint, so a pair that turned up between
        planning and writing is skipped without discarding the rest of the batch.
        """
        if not pairs:
            return result
        async with unit_of_work(self.session, DUPLICATE_LINK_MESSAGE):
            for target_id, contact_id, owner_id in pairs:
                if adding:
                    try:
                        async with self.session.begin_nested():
                            await self.owner_repo.add_link(contact_id, owner_id)
                    except IntegrityError:
                        linked = await self.owner_repo.get_link(contact_id, owner_id)
                        result.skip(target_id, ALREADY_ASSOCIATED if linked else missing_reason)
                        continue
                    result.succeeded += 1
                elif await self.owner_repo.remove_link(contact_id, owner_id):
                    result.succeeded += 1
                else:
                    result.skip(target_id, NOT_ASSOCIATED)
        return result

    async def _bulk_for_contact(self, contact_id: str, owner_ids: list[str], adding: bool) -> BatchResult:
        if not await self.contact_repo.exists(contact_id):
            raise NotFoundError(f"Contact {contact_id} not found")
        actionable, result = plan_batch(
            owner_ids,
            known_ids=await self.owner_repo.existing_ids(owner_ids),
            linked_ids=await self.owner_repo.owner_ids_for_contact(contact_id),
            missing_reason=OWNER_NOT_FOUND,
            adding=adding,
        )
        return await self._apply(
            [(oid, contact_id, oid) for oid in actionable], result, adding, OWNER_NOT_FOUND
        )

    async def _bulk_for_owner(self, owner_id: str, contact_ids: list[str], adding: bool) -> BatchResult:
        if not await self.owner_repo.exists(owner_id):
            raise NotFoundError(f"Owner {owner_id} not found")
        actionable, result = plan_batch(
            contact_ids,
            known_ids=await self.contact_repo.existing_ids(contact_ids),
            linked_ids=await self.owner_repo.contact_ids_for_owner(owner_id),
            missing_reason=CONTACT_NOT_FOUND,
            adding=adding,
        )
        return await self._apply(
            [(cid, cid, owner_id) for cid in actionable], result, adding, CONTACT_NOT_FOUND
        )

    async def add_owners_to_contact(self, contact_id: str, owner_ids: list[str]) -> BatchResult:
        """Associate several owners with one contact, skipping existing pairs."""
        result = await self._bulk_for_contact(contact_id, owner_ids, adding=True)
        logger.info(f"Bulk add owners to contact {contact_id}: {result.succeeded} added, {len(result.skipped)} skipped")
        return result

    async def remove_owners_from_contact(self, contact_id: str, owner_ids: list[str]) -> BatchResult:
        result = await self._bulk_for_contact(contact_id, owner_ids, adding=False)
        logger.info(f"Bulk remove owners from contact {contact_id}: {result.succeeded} removed, {len(result.skipped)} skipped")
        return result

    async def add_owner_to_contacts(self, owner_id: str, contact_ids: list[str]) -> BatchResult:
        """Associate one owner with several contacts, skipping existing pairs."""
        result = await self._bulk_for_owner(owner_id, contact_ids, adding=True)
        logger.info(f"Bulk add owner {owner_id} to contacts: {result.succeeded} added, {len(result.skipped)} skipped")
        return result

    async def remove_owner_from_contacts(self, owner_id: str, contact_ids: list[str]) -> BatchResult:
        result = await self._bulk_for_owner(owner_id, contact_ids, adding=False)
        logger.info(f"Bulk remove owner {owner_id} from contacts: {result.succeeded} removed, {len(result.skipped)} skipped")
        return result
