"""Tenancy error taxonomy.

Scope-resolution errors (TenantUnresolved, TenantMismatch) are raised at the
request-entry boundary and never reach business logic. TenantScopeViolation and
UnknownCollection are programming errors. NotFound is the only recoverable
outcome and is identical whether the row is missing or owned by another tenant.
"""

from typing import Any


class TenancyError(Exception):
    """Base class for all tenancy errors."""

    code = "tenancy_error"


class TenantUnresolved(TenancyError):
    """Authenticated principal carries no tenant claim."""

    code = "tenant_unresolved"

    def __init__(self, user_id: str | None = None) -> None:
        self.user_id = user_id
        super().__init__("Request has no resolvable tenant")


class TenantMismatch(TenancyError):
    """Client-supplied tenant header conflicts with the principal's tenant."""

    code = "tenant_mismatch"

    def __init__(self, claimed: str, requested: str) -> None:
        self.claimed = claimed
        self.requested = requested
        super().__init__("Cannot access tenant different from your assigned tenant")


class CrossTenantDenied(TenancyError):
    """Cross-tenant override attempted without the capability."""

    code = "cross_tenant_denied"

    def __init__(self, tenant_id: str, target_tenant_id: str) -> None:
        self.tenant_id = tenant_id
        self.target_tenant_id = target_tenant_id
        super().__init__("Cross-tenant access requires a super-admin capability")


class TenantScopeViolation(TenancyError):
    """An internal call attempted to bypass tenant scoping."""

    code = "tenant_scope_violation"

    def __init__(self, message: str, *, collection: str | None = None, operation: str | None = None) -> None:
        self.collection = collection
        self.operation = operation
        super().__init__(message)


class UnknownCollection(TenancyError):
    """Collection name is not registered."""

    code = "unknown_collection"

    def __init__(self, collection: str) -> None:
        self.collection = collection
        super().__init__(f"Unknown collection: {collection!r}")


class NotFound(TenancyError):
    """Row does not exist under the resolved tenant scope."""

    code = "not_found"

    def __init__(self, collection: str, where: dict[str, Any] | None = None) -> None:
        self.collection = collection
        self.where = where or {}
        super().__init__(f"{collection} not found")
