"""Shared pytest fixtures for all test suites."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import NullPool

from backend.app.config import Settings
from backend.app.db.models import Base, Tenant
from backend.app.db.store import InMemoryStore
from backend.app.tenancy.context import RequestScope
from backend.app.tenancy.scoped import TenantScopedDataAccess

TENANT_A = "et-addis"
TENANT_B = "ke-nairobi"


@pytest.fixture
def settings() -> Settings:
    """Settings with the strict tenant guard on."""
    return Settings(database_url="sqlite+aiosqlite:///:memory:", environment="test")


@pytest.fixture
def memory_store() -> InMemoryStore:
    """Fresh in-memory store."""
    return InMemoryStore()


@pytest.fixture
def make_access(settings: Settings):
    """Factory building a scoped accessor over a store for one tenant."""

    def _make(store, tenant_id: str, *, cross_tenant: bool = False, role: str | None = None) -> TenantScopedDataAccess:
        scope = RequestScope(
            tenant_id=tenant_id,
            user_id="user-1",
            role=role,
            cross_tenant=cross_tenant,
            home_tenant_id=tenant_id,
        )
        return TenantScopedDataAccess(store, scope, settings)

    return _make


@pytest_asyncio.fixture
async def sqlite_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """File-backed SQLite engine seeded with two tenants.

    A file database gives every session its own connection, like a real pool.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSession(engine) as session:
        session.add(Tenant(id=TENANT_A, name="Addis Ababa Brokerage", slug=TENANT_A))
        session.add(Tenant(id=TENANT_B, name="Nairobi Brokerage", slug=TENANT_B))
        await session.commit()

    yield engine

    await engine.dispose()
