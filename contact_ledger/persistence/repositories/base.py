"""Base repository with common queries."""

from typing import Generic, Type, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from contact_ledger.persistence.database import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository with common query methods.

    Repositories stage changes on the session; committing is left to the
    service that owns the unit of work.
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        """Initialize repository with model and session."""
        self.model = model
        self.session = session

    async def get_by_id(self, id: str) -> ModelType | None:
        """Get entity by ID."""
        stmt = select(self.model).where(self.model.id == id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_multiple_by_ids(self, ids: list[str]) -> list[ModelType]:
        """Get all entities whose ID is in ``ids`` (missing ones are skipped)."""
        if not ids:
            return []
        stmt = select(self.model).where(self.model.id.in_(ids))
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def exists(self, id: str) -> bool:
        """Check whether an entity with this ID exists."""
        stmt = select(func.count()).select_from(self.model).where(self.model.id == id)
        result = await self.session.execute(stmt)
        return result.scalar_one() > 0

    async def create(self, **data) -> ModelType:
        """Stage a new entity and flush it so defaults are populated."""
        instance = self.model(**data)
        self.session.add(instance)
        await self.session.flush()
        return instance

    async def update(self, instance: ModelType, **data) -> ModelType:
        """Apply field changes to an entity."""
        for key, value in data.items():
            setattr(instance, key, value)
        await self.session.flush()
        return instance

    async def delete(self, instance: ModelType) -> None:
        """Stage deletion of an entity."""
        await self.session.delete(instance)
        await self.session.flush()
