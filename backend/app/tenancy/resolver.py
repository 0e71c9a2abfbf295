"""Tenant resolution for inbound requests."""

import logging

from backend.app.config import Settings, get_settings
from backend.app.logging_config import SECURITY_LOGGER
from backend.app.tenancy.context import Principal, RequestScope
from backend.app.tenancy.errors import TenantMismatch, TenantUnresolved
from backend.app.utils.metrics import metrics

logger = logging.getLogger(__name__)
security_logger = logging.getLogger(SECURITY_LOGGER)


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


class TenantContextResolver:
    """Produces one trusted tenant identifier per request.

    Resolution reads only the principal's claims and the optional tenant
    header; it performs no I/O and keeps no state between calls.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()

    def has_cross_tenant_capability(self, principal: Principal) -> bool:
        """Check whether the principal may act on tenants other than its own."""
        return principal.role is not None and principal.role in self._settings.cross_tenant_roles

    def resolve(self, principal: Principal, header_tenant: str | None = None) -> RequestScope:
        """Resolve the request scope for an authenticated principal.

        Args:
            principal: Authenticated principal claims
            header_tenant: Client-supplied tenant header value, if any

        Returns:
            RequestScope bound to the resolved tenant

        Raises:
            TenantUnresolved: If the principal has no tenant claim
            TenantMismatch: If the header names another tenant and the
                principal lacks the cross-tenant capability
        """
        claimed = _clean(principal.tenant_id)
        requested = _clean(header_tenant)
        privileged = self.has_cross_tenant_capability(principal)

        if privileged and requested is not None and requested != claimed:
            # Explicit opt-in: a super-admin naming a target tenant.
            security_logger.warning(
                "Cross-tenant scope granted via header",
                extra={
                    "structured": {
                        "user_id": principal.user_id,
                        "role": principal.role,
                        "home_tenant_id": claimed,
                        "target_tenant_id": requested,
                    }
                },
            )
            metrics.inc_override("header")
            return RequestScope(
                tenant_id=requested,
                user_id=principal.user_id,
                role=principal.role,
                cross_tenant=True,
                home_tenant_id=claimed,
            )

        if claimed is None:
            logger.info(
                "Principal has no tenant claim",
                extra={"structured": {"user_id": principal.user_id}},
            )
            raise TenantUnresolved(principal.user_id)

        if requested is not None and requested != claimed:
            security_logger.error(
                "Tenant header does not match principal tenant",
                extra={
                    "structured": {
                        "user_id": principal.user_id,
                        "role": principal.role,
                        "claimed_tenant_id": claimed,
                        "requested_tenant_id": requested,
                    }
                },
            )
            metrics.inc_mismatch()
            raise TenantMismatch(claimed, requested)

        return RequestScope(
            tenant_id=claimed,
            user_id=principal.user_id,
            role=principal.role,
            cross_tenant=privileged,
            home_tenant_id=claimed,
        )

    def resolve_public(self, header_tenant: str | None = None) -> RequestScope:
        """Resolve the scope for an unauthenticated public request.

        Public marketplace routes read from the tenant named by the header, or
        from the configured default tenant. They never carry the cross-tenant
        capability.
        """
        tenant_id = _clean(header_tenant) or self._settings.public_default_tenant
        return RequestScope(tenant_id=tenant_id, home_tenant_id=tenant_id)
