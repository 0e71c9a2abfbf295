"""Request context for tenancy enforcement."""

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class Principal:
    """Authenticated caller identity as carried by already-validated claims."""

    user_id: str
    tenant_id: str | None
    role: str | None = None


@dataclass(frozen=True)
class RequestScope:
    """Resolved tenant scope for the lifetime of one request.

    Created once at request entry and passed explicitly to the data-access
    layer. Never persisted and never shared between requests.
    """

    tenant_id: str
    user_id: str | None = None
    role: str | None = None
    cross_tenant: bool = False
    home_tenant_id: str | None = None

    def rebind(self, tenant_id: str) -> "RequestScope":
        """Return a copy of this scope targeting another tenant."""
        return replace(self, tenant_id=tenant_id)
