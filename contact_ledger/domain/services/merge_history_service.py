"""Merge ledger service: best-effort audit trail of contact consolidations."""

import logging
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from contact_ledger.core.enums import parse_merge_reason, parse_merge_type
from contact_ledger.core.errors import InvalidInputError
from contact_ledger.domain.models.merge import MergeEvent, MergeHistoryFilters, MergeStatistics
from contact_ledger.domain.models.pagination import Page, resolve_page
from contact_ledger.persistence.models.merge_history import MergeHistory
from contact_ledger.persistence.repositories.merge_history_repository import (
    MergeHistoryCriteria,
    MergeHistoryRepository,
)
from contact_ledger.settings import settings

logger = logging.getLogger(__name__)


class MergeHistoryService:
    """Records and reports merge events.

    Writes are best-effort: ``record`` never raises, so a ledger failure can
    not undo the consolidation that triggered it. Entries are written on a
    session of their own and never commit or roll back the caller's work.

    Usage:
        ledger = MergeHistoryService(db)
        await ledger.record(MergeEvent(...))
        page = await ledger.query(MergeHistoryFilters(contact_id=contact.id))
    """

    def __init__(
        self,
        session: AsyncSession,
        system_actor: str | None = None,
        email_sources: list[str] | None = None,
        recent_window_days: int | None = None,
        default_page_limit: int | None = None,
        max_page_limit: int | None = None,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
    ) -> None:
        """Initialize merge history service.

        Args:
            session: Database session
            system_actor: Recorded as ``merged_by`` when an event names no actor
            email_sources: Source systems treated as email origins
            recent_window_days: Window for the ``recent_merges`` statistic
            default_page_limit: Page size when a query names none
            max_page_limit: Largest page size accepted
            session_factory: Opens the sessions ledger writes use; defaults to
                one bound to the same engine as ``session``
        """
        self.session = session
        self.repo = MergeHistoryRepository(session)
        self.session_factory = session_factory or async_sessionmaker(
            session.bind, class_=AsyncSession, expire_on_commit=False
        )
        self.system_actor = system_actor or settings.system_actor
        self._email_sources = [s.upper() for s in (email_sources or settings.email_source_systems)]
        self.recent_window_days = recent_window_days or settings.recent_merge_window_days
        self.default_page_limit = default_page_limit or settings.default_page_limit
        self.max_page_limit = max_page_limit or settings.max_page_limit

    def email_sources(self) -> list[str]:
        """Copy of the email-origin allow-list."""
        return list(self._email_sources)

    def is_email_source(self, source_system: str) -> bool:
        return source_system.upper() in self._email_sources

    async def record(self, event: MergeEvent) -> MergeHistory | None:
        """Append a merge event to the ledger.

        Any failure is logged and swallowed.

        Args:
            event: The consolidation to record

        Returns:
            The stored entry, or None if the write failed
        """
        try:
            data = {
                "merge_type": parse_merge_type(event.merge_type).value,
                "primary_contact_id": event.primary_contact_id,
                "primary_contact_name": event.primary_contact_name,
                "merged_contact_id": event.merged_contact_id,
                "merged_contact_name": event.merged_contact_name,
                "source_system": event.source_system,
                "source_record_id": event.source_record_id,
                "merge_reason": parse_merge_reason(event.merge_reason).value,
                "merge_details": event.merge_details,
                "merged_by": event.merged_by or self.system_actor,
                "before_merge_data": event.before_merge_data,
                "after_merge_data": event.after_merge_data,
                "before_quality_score": event.before_quality_score,
                "after_quality_score": event.after_quality_score,
                "involved_source_systems": list(event.involved_source_systems),
            }
            if event.merged_at is not None:
                data["merged_at"] = event.merged_at

            async with self.session_factory() as ledger_session:
                entry = await MergeHistoryRepository(ledger_session).create(**data)
            logger.info(
                f"Merge history recorded: {data['merge_type']} for {event.primary_contact_name}",
                extra={"merge_history_id": entry.id, "primary_contact_id": event.primary_contact_id},
            )
            return entry
        except Exception as e:
            logger.error(
                f"Failed to record merge history for contact {event.primary_contact_id}: {e}",
                exc_info=True,
            )
            return None

    def _resolve_sources(self, filters: MergeHistoryFilters) -> list[str] | None:
        if filters.email_only:
            return self.email_sources()
        if filters.source_system is None:
            return None
        if isinstance(filters.source_system, str):
            return [filters.source_system]
        return list(filters.source_system)

    async def query(self, filters: MergeHistoryFilters) -> Page[MergeHistory]:
        """Query the ledger, newest first.

        ``email_only`` replaces any ``source_system`` filter with the email
        allow-list. The effective filters are echoed on the result.

        Raises:
            InvalidInputError: If pagination is out of range or the date range is inverted
        """
        limit, skip = resolve_page(
            filters.page, filters.limit, self.default_page_limit, self.max_page_limit
        )
        if filters.start_date and filters.end_date and filters.start_date > filters.end_date:
            raise InvalidInputError("start_date must not be after end_date")

        merge_type = parse_merge_type(filters.merge_type).value if filters.merge_type else None
        source_systems = self._resolve_sources(filters)
        criteria = MergeHistoryCriteria(
            contact_id=filters.contact_id,
            merge_type=merge_type,
            source_systems=source_systems,
            start_date=filters.start_date,
            end_date=filters.end_date,
        )
        rows, total = await self.repo.query(criteria, skip=skip, limit=limit)

        echoed = filters.model_dump(mode="json", exclude={"page", "limit"}, exclude_none=True)
        echoed["email_only"] = filters.email_only
        if filters.email_only:
            echoed["source_system"] = source_systems
        return Page(data=rows, total=total, page=filters.page, limit=limit, filters=echoed)

    async def for_contact(self, contact_id: str) -> list[MergeHistory]:
        """Every entry where the contact was primary or merged, newest first."""
        return await self.repo.list_for_contact(contact_id)

    async def statistics(self) -> MergeStatistics:
        """Aggregate counts over the whole ledger."""
        since = datetime.utcnow() - timedelta(days=self.recent_window_days)
        return MergeStatistics(
            total_merges=await self.repo.count(),
            merges_by_type=await self.repo.count_by("merge_type"),
            merges_by_reason=await self.repo.count_by("merge_reason"),
            merges_by_source=await self.repo.count_by("source_system"),
            recent_merges=await self.repo.count(since=since),
            email_source_stats=await self.repo.count_by("source_system", self._email_sources),
        )
