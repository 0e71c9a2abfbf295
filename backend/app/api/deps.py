"""FastAPI dependencies wiring the request scope into data access."""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.api.auth import get_current_principal
from backend.app.config import Settings, get_settings
from backend.app.db.engine import get_session
from backend.app.db.store import SqlStore
from backend.app.logging_config import log_tenant_id
from backend.app.tenancy.context import Principal, RequestScope
from backend.app.tenancy.resolver import TenantContextResolver
from backend.app.tenancy.scoped import TenantScopedDataAccess


def _tenant_header(request: Request, settings: Settings) -> str | None:
    return request.headers.get(settings.tenant_header) or request.headers.get(
        settings.tenant_header_fallback
    )


async def get_request_scope(
    request: Request,
    principal: Annotated[Principal, Depends(get_current_principal)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> RequestScope:
    """Resolve the tenant scope for an authenticated request.

    Resolution errors propagate to the exception handlers before any data
    access dependency is built.
    """
    scope = TenantContextResolver(settings).resolve(principal, _tenant_header(request, settings))
    # Each request runs in its own task, so this never leaks across requests.
    log_tenant_id.set(scope.tenant_id)
    return scope


async def get_public_scope(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
) -> RequestScope:
    """Resolve the tenant scope for an unauthenticated public request."""
    return TenantContextResolver(settings).resolve_public(_tenant_header(request, settings))


async def get_data_access(
    scope: Annotated[RequestScope, Depends(get_request_scope)],
    session: Annotated[AsyncSession, Depends(get_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> TenantScopedDataAccess:
    """Build the per-request tenant-scoped accessor."""
    return TenantScopedDataAccess(SqlStore(session), scope, settings)


async def get_public_data_access(
    scope: Annotated[RequestScope, Depends(get_public_scope)],
    session: Annotated[AsyncSession, Depends(get_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> TenantScopedDataAccess:
    """Build a read accessor for public marketplace routes."""
    return TenantScopedDataAccess(SqlStore(session), scope, settings)


async def require_cross_tenant(
    request: Request,
    access: Annotated[TenantScopedDataAccess, Depends(get_data_access)],
) -> TenantScopedDataAccess:
    """Require the cross-tenant (super-admin) capability.

    Denials are audited like a refused override.
    """
    access.require_cross_tenant(request.path_params.get("tenant_id", "*"))
    return access
