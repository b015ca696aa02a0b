"""Pytest configuration and fixtures."""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from contact_ledger.domain.models.contact import ContactCreate
from contact_ledger.domain.services.contact_service import ContactService
from contact_ledger.persistence.database import Base, enable_sqlite_foreign_keys, get_db
from contact_ledger.persistence.models import *  # noqa: F401, F403


@pytest.fixture
async def db_session():
    """Create a test database session."""
    # Use in-memory SQLite for testing; StaticPool keeps a single shared connection
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )

    async with async_session() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def client(db_session):
    """Create a test FastAPI client."""
    from contact_ledger.main import app

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def make_contact(db_session):
    """Factory creating contacts through the identity store."""
    service = ContactService(db_session)

    async def _make(name: str = "Test Contact", **fields):
        fields.setdefault("company_name", "Test Corp")
        fields.setdefault("source_system", "ZOHO")
        fields.setdefault("source_record_id", f"rec-{name}")
        return await service.create_contact(ContactCreate(name=name, **fields))

    return _make
