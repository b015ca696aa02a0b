"""Commit boundaries that map storage errors onto the ledger error taxonomy."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from contact_ledger.core.errors import ConflictError, StorageFailureError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def unit_of_work(
    session: AsyncSession,
    conflict_message: str = "Uniqueness constraint violated",
) -> AsyncIterator[AsyncSession]:
    """Run a block of writes as one transaction and commit it.

    Any exception rolls the session back. Unique-constraint violations surface
    as ``ConflictError``, other database errors as ``StorageFailureError``.

    Args:
        session: Session the writes are staged on
        conflict_message: Message used when a unique constraint fires
    """
    try:
        yield session
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        logger.info(f"Write rejected by unique constraint: {e.orig}")
        raise ConflictError(conflict_message) from e
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"Storage failure during write: {e}", exc_info=True)
        raise StorageFailureError(f"Storage failure: {e.__class__.__name__}") from e
    except Exception:
        await session.rollback()
        raise
