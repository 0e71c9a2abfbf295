"""Super-admin endpoints - explicit cross-tenant reads."""

from typing import Annotated

from fastapi import APIRouter, Depends

from backend.app.api.deps import require_cross_tenant
from backend.app.api.routes.listings import ListingResponse
from backend.app.tenancy.scoped import TenantScopedDataAccess

router = APIRouter(prefix="/super", tags=["superadmin"])


@router.get("/tenants/{tenant_id}/listings", response_model=list[ListingResponse])
async def list_tenant_listings(
    tenant_id: str,
    access: Annotated[TenantScopedDataAccess, Depends(require_cross_tenant)],
) -> list[ListingResponse]:
    """List another tenant's listings under an audited override."""
    records = await access.with_cross_tenant_override(
        tenant_id, lambda: access.listing.find(order_by="-created_at")
    )
    return [ListingResponse.model_validate(r) for r in records]


@router.get("/tenants/{tenant_id}/stats")
async def tenant_stats(
    tenant_id: str,
    access: Annotated[TenantScopedDataAccess, Depends(require_cross_tenant)],
) -> dict[str, int]:
    """Row counts per collection for one tenant."""

    async def _count() -> dict[str, int]:
        return {
            "listings": await access.listing.count(),
            "licenses": await access.license.count(),
            "qr_codes": await access.qr_code.count(),
            "inspection_events": await access.inspection_event.count(),
        }

    return await access.with_cross_tenant_override(tenant_id, _count)
