"""Integration tests for dev seeding helper."""

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from backend.app.api.auth import parse_bearer_claims
from backend.app.db.models import Tenant, User
from backend.app.db.seed_dev import DEV_ADMIN_ID, DEV_TENANTS, seed_dev_tenants


def test_dev_admin_matches_stub_claims() -> None:
    """Test the seeded admin id parses as a super-admin principal."""
    principal = parse_bearer_claims(f"{DEV_TENANTS[0][0]}:{DEV_ADMIN_ID}:SUPER_ADMIN")

    assert principal.user_id == DEV_ADMIN_ID
    assert principal.role == "SUPER_ADMIN"


@pytest.mark.asyncio
async def test_seed_is_idempotent(sqlite_engine: AsyncEngine) -> None:
    """Test seeding twice leaves one row per tenant and one admin."""
    async with AsyncSession(sqlite_engine) as session:
        await seed_dev_tenants(session)
    async with AsyncSession(sqlite_engine) as session:
        await seed_dev_tenants(session)

    async with AsyncSession(sqlite_engine) as session:
        tenants = await session.scalar(select(func.count()).select_from(Tenant))
        admin = await session.get(User, DEV_ADMIN_ID)

    assert tenants == len(DEV_TENANTS)
    assert admin is not None
    assert admin.role == "SUPER_ADMIN"
    assert admin.tenant_id == DEV_TENANTS[0][0]
