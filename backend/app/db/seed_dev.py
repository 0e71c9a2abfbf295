"""Dev seeding helper for local tenants."""

import asyncio

from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.engine import get_async_engine
from backend.app.db.models import Tenant, User

DEV_TENANTS = [
    ("et-addis", "Addis Ababa Brokerage", "et-addis"),
    ("ke-nairobi", "Nairobi Brokerage", "ke-nairobi"),
]

# Matches the stub bearer claims "et-addis:<DEV_ADMIN_ID>:SUPER_ADMIN".
DEV_ADMIN_ID = "00000000-0000-0000-0000-000000000002"


async def seed_dev_tenants(session: AsyncSession) -> None:
    """Seed dev tenants and a super-admin user.

    This function is idempotent - safe to run multiple times.
    """
    for tenant_id, name, slug in DEV_TENANTS:
        if await session.get(Tenant, tenant_id) is None:
            print(f"Creating dev tenant {tenant_id}...")
            session.add(Tenant(id=tenant_id, name=name, slug=slug))
        else:
            print(f"Dev tenant already exists: {tenant_id}")

    if await session.get(User, DEV_ADMIN_ID) is None:
        print(f"Creating dev super admin {DEV_ADMIN_ID}...")
        session.add(
            User(
                id=DEV_ADMIN_ID,
                tenant_id=DEV_TENANTS[0][0],
                email="admin@example.com",
                role="SUPER_ADMIN",
            )
        )

    await session.commit()
    print("Dev seeding complete")


async def main() -> None:
    async with AsyncSession(get_async_engine()) as session:
        await seed_dev_tenants(session)


if __name__ == "__main__":
    asyncio.run(main())
