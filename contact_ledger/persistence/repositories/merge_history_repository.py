"""Merge history repository."""

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from contact_ledger.persistence.models.merge_history import MergeHistory


@dataclass
class MergeHistoryCriteria:
    """Filters for querying the ledger. ``None`` means "not filtered"."""

    contact_id: str | None = None
    merge_type: str | None = None
    source_systems: list[str] | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None


class MergeHistoryRepository:
    """Repository for MergeHistory rows.

    Note: This repository intentionally does NOT extend BaseRepository and
    exposes no update or delete: ledger rows are append-only.
    """

    def __init__(self, session: AsyncSession):
        """Initialize merge history repository."""
        self.session = session

    async def create(self, **data) -> MergeHistory:
        """Insert and commit a ledger row.

        Returns:
            The created MergeHistory entry
        """
        entry = MergeHistory(**data)
        self.session.add(entry)
        await self.session.commit()
        return entry

    def _conditions(self, criteria: MergeHistoryCriteria) -> list:
        conditions = []
        if criteria.contact_id:
            conditions.append(
                or_(
                    MergeHistory.primary_contact_id == criteria.contact_id,
                    MergeHistory.merged_contact_id == criteria.contact_id,
                )
            )
        if criteria.merge_type:
            conditions.append(MergeHistory.merge_type == criteria.merge_type)
        if criteria.source_systems is not None:
            conditions.append(MergeHistory.source_system.in_(criteria.source_systems))
        if criteria.start_date:
            conditions.append(MergeHistory.merged_at >= criteria.start_date)
        if criteria.end_date:
            conditions.append(MergeHistory.merged_at <= criteria.end_date)
        return conditions

    async def query(
        self,
        criteria: MergeHistoryCriteria,
        skip: int = 0,
        limit: int | None = 20,
    ) -> tuple[list[MergeHistory], int]:
        """List ledger rows matching ``criteria``, newest first.

        Returns:
            Tuple of (page of rows, total matching count)
        """
        conditions = self._conditions(criteria)

        count_stmt = select(func.count()).select_from(MergeHistory).where(*conditions)
        total = (await self.session.execute(count_stmt)).scalar_one()

        stmt = (
            select(MergeHistory)
            .where(*conditions)
            .order_by(MergeHistory.merged_at.desc(), MergeHistory.id.desc())
            .offset(skip)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def list_for_contact(self, contact_id: str) -> list[MergeHistory]:
        """All rows where the contact was primary or merged, newest first."""
        rows, _ = await self.query(MergeHistoryCriteria(contact_id=contact_id), skip=0, limit=None)
        return rows

    async def count(self, since: datetime | None = None) -> int:
        """Count rows, optionally only those merged at or after ``since``."""
        stmt = select(func.count()).select_from(MergeHistory)
        if since is not None:
            stmt = stmt.where(MergeHistory.merged_at >= since)
        return (await self.session.execute(stmt)).scalar_one()

    async def count_by(self, column_name: str, source_systems: list[str] | None = None) -> dict[str, int]:
        """Count rows grouped by one column.

        Args:
            column_name: MergeHistory attribute to group by
            source_systems: Restrict to these source systems

        Returns:
            Mapping of column value to row count
        """
        column = getattr(MergeHistory, column_name)
        stmt = select(column, func.count()).group_by(column)
        if source_systems is not None:
            stmt = stmt.where(MergeHistory.source_system.in_(source_systems))
        result = await self.session.execute(stmt)
        return {key: count for key, count in result.all()}
