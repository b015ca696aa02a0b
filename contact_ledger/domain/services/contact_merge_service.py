"""Contact merge service for manually consolidating duplicate contacts."""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from contact_ledger.core.enums import MergeReason, MergeType, parse_merge_reason
from contact_ledger.core.errors import InvalidInputError
from contact_ledger.domain.models.contact import ContactUpdate
from contact_ledger.domain.models.merge import MergeConflict, MergeEvent, MergePreview
from contact_ledger.domain.services.contact_service import DUPLICATE_CONTACT_MESSAGE, ContactService
from contact_ledger.domain.services.merge_history_service import MergeHistoryService
from contact_ledger.domain.services.owner_service import OwnerService
from contact_ledger.domain.services.tag_service import TagService
from contact_ledger.persistence.models.contact import Contact
from contact_ledger.persistence.transactions import unit_of_work

logger = logging.getLogger(__name__)

MERGEABLE_FIELDS = ("name", "email", "mobile", "company_name", "relationship_type")
KEEP_PRIMARY = "primary"


def contact_snapshot(contact: Contact) -> dict[str, Any]:
    """Plain-data copy of a contact for the ledger."""
    return {
        "id": contact.id,
        "name": contact.name,
        "company_name": contact.company_name,
        "email": contact.email,
        "mobile": contact.mobile,
        "relationship_type": contact.relationship_type,
        "source_system": contact.source_system,
        "source_record_id": contact.source_record_id,
        "is_whatsapp_reachable": contact.is_whatsapp_reachable,
        "data_quality_score": contact.data_quality_score,
        "created_at": contact.created_at.isoformat() if contact.created_at else None,
    }


class ContactMergeService:
    """Service for merging contacts.

    The surviving contact keeps its ID and absorbs the owners and tags of the
    contacts merged into it, all in one transaction. One MANUAL_MERGE entry per
    absorbed contact is then written to the merge ledger.
    """

    def __init__(
        self,
        session: AsyncSession,
        contact_service: ContactService | None = None,
        ledger: MergeHistoryService | None = None,
    ) -> None:
        """Initialize merge service."""
        self.session = session
        self.contacts = contact_service or ContactService(session)
        self.owners = OwnerService(session)
        self.tags = TagService(session)
        self.ledger = ledger or MergeHistoryService(session)

    async def preview(self, contact_ids: list[str]) -> MergePreview:
        """Get a preview of merging contacts, showing conflicts.

        Args:
            contact_ids: IDs of the contacts to merge

        Returns:
            MergePreview with contacts, conflicting fields, and the oldest
            contact suggested as primary

        Raises:
            InvalidInputError: If fewer than 2 distinct contacts are given
            NotFoundError: If any contact does not exist
        """
        if len(set(contact_ids)) != len(contact_ids) or len(contact_ids) < 2:
            raise InvalidInputError("At least 2 distinct contacts required for merge")

        contacts = await self.contacts.get_contacts(contact_ids)

        conflicts = []
        for field in MERGEABLE_FIELDS:
            values = {c.id: getattr(c, field) for c in contacts if getattr(c, field)}
            if len(set(values.values())) > 1:
                conflicts.append(MergeConflict(field=field, values=values))

        suggested = min(contacts, key=lambda c: (c.created_at, c.id))
        return MergePreview(contacts=contacts, conflicts=conflicts, suggested_primary_id=suggested.id)

    def _resolve_fields(
        self,
        primary: Contact,
        by_id: dict[str, Contact],
        field_resolutions: dict[str, str] | None,
    ) -> dict[str, Any]:
        """Turn ``{field: "primary" | contact_id}`` into the primary's field changes."""
        changes: dict[str, Any] = {}
        for field, resolution in (field_resolutions or {}).items():
            if field not in MERGEABLE_FIELDS:
                raise InvalidInputError(f"Field {field!r} cannot be resolved by a merge")
            if resolution == KEEP_PRIMARY or resolution == primary.id:
                continue
            source = by_id.get(resolution)
            if source is None:
                raise InvalidInputError(f"Resolution for {field!r} names a contact outside the merge: {resolution}")
            value = getattr(source, field)
            if value and value != getattr(primary, field):
                changes[field] = value
        return changes

    async def merge(
        self,
        primary_id: str,
        secondary_ids: list[str],
        field_resolutions: dict[str, str] | None = None,
        merged_by: str | None = None,
        merge_reason: MergeReason | str = MergeReason.DUPLICATE_ENTRY,
    ) -> Contact:
        """Merge contacts into one primary contact.

        Args:
            primary_id: ID of the contact that survives
            secondary_ids: IDs of the contacts merged into it
            field_resolutions: Maps a field to ``"primary"`` or to the ID of the
                contact whose value the primary should take
            merged_by: Actor recorded in the ledger (system actor if None)
            merge_reason: Reason recorded in the ledger

        Returns:
            The merged primary contact

        Raises:
            InvalidInputError: If the merge set or resolutions are malformed
            NotFoundError: If any contact does not exist
            ConflictError: If the resolved (name, mobile) belongs to a contact
                outside the merge
            StorageFailureError: If the write fails; no contact is changed
        """
        reason = parse_merge_reason(merge_reason)
        if not secondary_ids:
            raise InvalidInputError("At least one contact to merge is required")
        if primary_id in secondary_ids:
            raise InvalidInputError("Primary contact cannot be in secondary list")
        if len(set(secondary_ids)) != len(secondary_ids):
            raise InvalidInputError("Secondary contacts must be distinct")

        all_ids = [primary_id] + list(secondary_ids)
        contacts = await self.contacts.get_contacts(all_ids)
        by_id = {c.id: c for c in contacts}
        primary = by_id[primary_id]
        secondaries = [by_id[sid] for sid in secondary_ids]

        # Merged contacts are deleted in the same transaction, so their
        # identity may pass to the primary
        changes = await self.contacts.plan_update(
            primary,
            ContactUpdate(**self._resolve_fields(primary, by_id, field_resolutions)),
            exclude_ids=secondary_ids,
        )

        before = contact_snapshot(primary)
        secondary_snapshots = [contact_snapshot(s) for s in secondaries]

        owner_ids: set[str] = set()
        tag_ids: set[str] = set()
        for secondary in secondaries:
            owner_ids |= await self.owners.owner_repo.owner_ids_for_contact(secondary.id)
            tag_ids |= await self.tags.tag_repo.tag_ids_for_contact(secondary.id)
        new_owner_ids = owner_ids - await self.owners.owner_repo.owner_ids_for_contact(primary_id)
        new_tag_ids = tag_ids - await self.tags.tag_repo.tag_ids_for_contact(primary_id)

        async with unit_of_work(self.session, DUPLICATE_CONTACT_MESSAGE):
            for owner_id in sorted(new_owner_ids):
                await self.owners.owner_repo.add_link(primary_id, owner_id)
            for tag_id in sorted(new_tag_ids):
                await self.tags.tag_repo.add_link(primary_id, tag_id)
            for secondary in secondaries:
                await self.contacts.contact_repo.delete(secondary)
            if changes:
                await self.contacts.contact_repo.update(primary, **changes)

        logger.info(
            f"Merged {len(secondary_ids)} contacts into {primary_id}: "
            f"{len(new_owner_ids)} owners and {len(new_tag_ids)} tags moved, fields={sorted(changes)}"
        )
        merged = await self.contacts.get_contact(primary_id)
        after = contact_snapshot(merged)

        for snapshot in secondary_snapshots:
            involved = [before["source_system"]]
            if snapshot["source_system"] not in involved:
                involved.append(snapshot["source_system"])
            await self.ledger.record(
                MergeEvent(
                    merge_type=MergeType.MANUAL_MERGE,
                    primary_contact_id=primary_id,
                    primary_contact_name=after["name"],
                    merged_contact_id=snapshot["id"],
                    merged_contact_name=snapshot["name"],
                    source_system=snapshot["source_system"],
                    source_record_id=snapshot["source_record_id"],
                    merge_reason=reason,
                    merge_details={
                        "field_resolutions": field_resolutions or {},
                        "merged_contact": snapshot,
                        "owner_ids": sorted(owner_ids),
                        "tag_ids": sorted(tag_ids),
                    },
                    merged_by=merged_by,
                    before_merge_data=before,
                    after_merge_data=after,
                    before_quality_score=before["data_quality_score"],
                    after_quality_score=after["data_quality_score"],
                    involved_source_systems=involved,
                )
            )

        return merged
