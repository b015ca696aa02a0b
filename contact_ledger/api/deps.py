"""FastAPI dependencies shared by the routers."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from contact_ledger.domain.services.contact_merge_service import ContactMergeService
from contact_ledger.domain.services.contact_service import ContactService
from contact_ledger.domain.services.merge_history_service import MergeHistoryService
from contact_ledger.domain.services.owner_service import OwnerService
from contact_ledger.domain.services.tag_service import TagService
from contact_ledger.persistence.database import get_db

DbSession = Annotated[AsyncSession, Depends(get_db)]


def get_contact_service(db: DbSession) -> ContactService:
    return ContactService(db)


def get_owner_service(db: DbSession) -> OwnerService:
    return OwnerService(db)


def get_tag_service(db: DbSession) -> TagService:
    return TagService(db)


def get_merge_history_service(db: DbSession) -> MergeHistoryService:
    return MergeHistoryService(db)


def get_contact_merge_service(db: DbSession) -> ContactMergeService:
    return ContactMergeService(db)
