"""API routes."""

from fastapi import APIRouter

from contact_ledger.api.routes import contacts, merge_history, owners, tags

api_router = APIRouter()

api_router.include_router(contacts.router, prefix="/contacts", tags=["contacts"])
api_router.include_router(owners.router, prefix="/owners", tags=["owners"])
api_router.include_router(tags.router, prefix="/tags", tags=["tags"])
api_router.include_router(merge_history.router, prefix="/merge-history", tags=["merge-history"])
