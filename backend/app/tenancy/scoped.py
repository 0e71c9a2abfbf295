"""Tenant-scoped data access.

TenantScopedDataAccess is the single choke point for tenant-owned persistence.
One instance is built per request from the resolved RequestScope; every
operation rewrites its filter or payload so it can only touch rows owned by
the scope's tenant.
"""

import logging
from collections.abc import Awaitable, Callable, Mapping
from contextvars import ContextVar
from typing import Any, TypeVar

from backend.app.config import Settings, get_settings
from backend.app.db.models import TENANT_OWNED_MODELS
from backend.app.db.store import DataStore, Record
from backend.app.logging_config import SECURITY_LOGGER
from backend.app.tenancy.context import RequestScope
from backend.app.tenancy.errors import (
    CrossTenantDenied,
    NotFound,
    TenantScopeViolation,
    UnknownCollection,
)
from backend.app.utils.metrics import metrics

logger = logging.getLogger(__name__)
security_logger = logging.getLogger(SECURITY_LOGGER)

T = TypeVar("T")

TENANT_FIELD = "tenant_id"
PRIMARY_KEY = "id"

# Cross-tenant overrides active in the current task, keyed by accessor id.
_scope_overrides: ContextVar[dict[int, RequestScope] | None] = ContextVar(
    "tenant_scope_overrides", default=None
)


class ScopedCollection:
    """Per-entity view over TenantScopedDataAccess."""

    def __init__(self, access: "TenantScopedDataAccess", name: str) -> None:
        self._access = access
        self.name = name

    async def find(self, where: Mapping[str, Any] | None = None, **options: Any) -> list[Record]:
        return await self._access.find(self.name, where, **options)

    async def find_first(self, where: Mapping[str, Any] | None = None, **options: Any) -> Record | None:
        return await self._access.find_first(self.name, where, **options)

    async def find_one(self, key: str) -> Record | None:
        return await self._access.find_one(self.name, key)

    async def get(self, key: str) -> Record:
        return await self._access.get(self.name, key)

    async def create(self, data: Mapping[str, Any]) -> Record:
        return await self._access.create(self.name, data)

    async def update(self, where: Mapping[str, Any], data: Mapping[str, Any]) -> Record:
        return await self._access.update(self.name, where, data)

    async def delete(self, where: Mapping[str, Any]) -> Record:
        return await self._access.delete(self.name, where)

    async def count(self, where: Mapping[str, Any] | None = None) -> int:
        return await self._access.count(self.name, where)


class _CollectionProperty:
    """Descriptor exposing one registered collection as an attribute."""

    def __init__(self, name: str) -> None:
        self.name = name

    def __get__(self, access: "TenantScopedDataAccess | None", owner: type) -> Any:
        if access is None:
            return self
        return ScopedCollection(access, self.name)


class TenantScopedDataAccess:
    """Wraps a DataStore and constrains every operation to one tenant."""

    def __init__(
        self,
        store: DataStore,
        scope: RequestScope,
        settings: Settings | None = None,
    ) -> None:
        self._store = store
        self._base_scope = scope
        self._settings = settings or get_settings()

    @property
    def scope(self) -> RequestScope:
        """The active scope: an override bound in this task, else the request's."""
        overrides = _scope_overrides.get()
        if overrides and id(self) in overrides:
            return overrides[id(self)]
        return self._base_scope

    @property
    def tenant_id(self) -> str:
        return self.scope.tenant_id

    def collection(self, name: str) -> ScopedCollection:
        """Return the per-entity view for a registered collection."""
        self._check_collection(name)
        return ScopedCollection(self, name)

    # -- rewriting helpers -------------------------------------------------

    def _check_collection(self, collection: str) -> None:
        if collection in TENANT_OWNED_MODELS:
            return
        if collection == "tenant":
            raise TenantScopeViolation(
                "The tenant collection is not tenant-owned; use current_tenant()",
                collection=collection,
            )
        raise UnknownCollection(collection)

    def _violation(self, message: str, *, collection: str, operation: str, kind: str) -> TenantScopeViolation:
        security_logger.critical(
            message,
            extra={
                "structured": {
                    "collection": collection,
                    "operation": operation,
                    "tenant_id": self.scope.tenant_id,
                    "user_id": self.scope.user_id,
                    "kind": kind,
                }
            },
        )
        metrics.inc_violation(kind)
        return TenantScopeViolation(message, collection=collection, operation=operation)

    def _scoped_where(self, collection: str, where: Mapping[str, Any] | None, operation: str) -> dict[str, Any]:
        """Intersect a filter with the scope's tenant."""
        self._check_collection(collection)
        scoped = dict(where or {})
        supplied = scoped.get(TENANT_FIELD)

        if TENANT_FIELD in scoped and supplied != self.scope.tenant_id:
            if self._settings.strict_tenant_guard:
                raise self._violation(
                    f"Conflicting tenant_id in {collection}.{operation} filter",
                    collection=collection,
                    operation=operation,
                    kind="conflicting_filter",
                )
            security_logger.warning(
                "Conflicting tenant_id in filter overwritten by scope",
                extra={"structured": {"collection": collection, "operation": operation}},
            )

        scoped[TENANT_FIELD] = self.scope.tenant_id
        return scoped

    def _owned(self, collection: str, record: Record | None) -> Record | None:
        """Post-fetch ownership check for lookups that skip the tenant filter."""
        if record is None:
            return None
        if record.get(TENANT_FIELD) != self.scope.tenant_id:
            security_logger.error(
                "Discarded record owned by another tenant",
                extra={
                    "structured": {
                        "collection": collection,
                        "record_id": record.get("id"),
                        "tenant_id": self.scope.tenant_id,
                        "user_id": self.scope.user_id,
                    }
                },
            )
            metrics.inc_ownership_rejection(collection)
            return None
        return record

    # -- operations --------------------------------------------------------

    async def find(
        self,
        collection: str,
        where: Mapping[str, Any] | None = None,
        *,
        order_by: str | None = None,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[Record]:
        """Find all records of the scope's tenant matching where."""
        scoped = self._scoped_where(collection, where, "find")
        return await self._store.find_many(collection, scoped, order_by=order_by, offset=offset, limit=limit)

    async def find_first(
        self,
        collection: str,
        where: Mapping[str, Any] | None = None,
        *,
        order_by: str | None = None,
    ) -> Record | None:
        """Find the first record of the scope's tenant matching where."""
        scoped = self._scoped_where(collection, where, "find_first")
        return await self._store.find_first(collection, scoped, order_by=order_by)

    async def find_one(self, collection: str, key: str) -> Record | None:
        """Fetch by primary key.

        The lookup itself is not tenant-filtered, so the result always goes
        through the ownership check; a foreign record reads as missing.
        """
        self._check_collection(collection)
        record = await self._store.find_unique(collection, key)
        return self._owned(collection, record)

    async def get(self, collection: str, key: str) -> Record:
        """Fetch by primary key or raise NotFound."""
        record = await self.find_one(collection, key)
        if record is None:
            raise NotFound(collection, {"id": key})
        return record

    async def create(self, collection: str, data: Mapping[str, Any]) -> Record:
        """Create a record stamped with the scope's tenant.

        Any tenant_id supplied by the caller is overridden, not merged.
        """
        self._check_collection(collection)
        payload = dict(data)
        if payload.get(TENANT_FIELD, self.scope.tenant_id) != self.scope.tenant_id:
            logger.debug(
                "Caller-supplied tenant_id overridden on create",
                extra={"structured": {"collection": collection}},
            )
        payload[TENANT_FIELD] = self.scope.tenant_id
        return await self._store.create(collection, payload)

    def _update_payload(self, collection: str, data: Mapping[str, Any]) -> dict[str, Any]:
        payload = dict(data)
        if PRIMARY_KEY in payload:
            raise ValueError(f"{collection} primary key cannot be updated")
        if TENANT_FIELD not in payload:
            return payload
        if payload[TENANT_FIELD] != self.scope.tenant_id:
            raise self._violation(
                f"Attempt to move {collection} row to another tenant",
                collection=collection,
                operation="update",
                kind="tenant_reassignment",
            )
        del payload[TENANT_FIELD]
        return payload

    async def update(self, collection: str, where: Mapping[str, Any], data: Mapping[str, Any]) -> Record:
        """Update a record of the scope's tenant.

        Raises:
            NotFound: If no row matches under the tenant-scoped filter
        """
        scoped = self._scoped_where(collection, where, "update")
        payload = self._update_payload(collection, data)
        record = await self._store.update(collection, scoped, payload)
        if record is None:
            logger.debug("Scoped update matched no row", extra={"structured": {"collection": collection}})
            raise NotFound(collection, dict(where))
        return record

    async def delete(self, collection: str, where: Mapping[str, Any]) -> Record:
        """Delete a record of the scope's tenant.

        Raises:
            NotFound: If no row matches under the tenant-scoped filter
        """
        scoped = self._scoped_where(collection, where, "delete")
        record = await self._store.delete(collection, scoped)
        if record is None:
            logger.debug("Scoped delete matched no row", extra={"structured": {"collection": collection}})
            raise NotFound(collection, dict(where))
        return record

    async def count(self, collection: str, where: Mapping[str, Any] | None = None) -> int:
        """Count records of the scope's tenant matching where."""
        scoped = self._scoped_where(collection, where, "count")
        return await self._store.count(collection, scoped)

    async def current_tenant(self) -> Record:
        """Return the Tenant row the scope is bound to."""
        record = await self._store.find_unique("tenant", self.scope.tenant_id)
        if record is None:
            raise NotFound("tenant", {"id": self.scope.tenant_id})
        return record

    def require_cross_tenant(self, target_tenant_id: str = "*") -> None:
        """Audit and reject a cross-tenant request from a scope without the capability.

        Raises:
            CrossTenantDenied: If the scope lacks the capability
        """
        if self.scope.cross_tenant:
            return
        security_logger.error(
            "Cross-tenant override denied",
            extra={
                "structured": {
                    "tenant_id": self.scope.tenant_id,
                    "target_tenant_id": target_tenant_id,
                    "user_id": self.scope.user_id,
                    "role": self.scope.role,
                }
            },
        )
        metrics.inc_violation("override_denied")
        raise CrossTenantDenied(self.scope.tenant_id, target_tenant_id)

    async def with_cross_tenant_override(self, target_tenant_id: str, fn: Callable[[], Awaitable[T]]) -> T:
        """Run fn with this accessor rebound to another tenant.

        Only scopes holding the cross-tenant capability may call this. The
        rebound scope is visible only to fn and the tasks it starts; sibling
        coroutines sharing this accessor keep the original scope. It is
        dropped when fn returns or raises.

        Raises:
            CrossTenantDenied: If the scope lacks the capability
        """
        self.require_cross_tenant(target_tenant_id)

        security_logger.warning(
            "Cross-tenant override",
            extra={
                "structured": {
                    "tenant_id": self.scope.tenant_id,
                    "target_tenant_id": target_tenant_id,
                    "user_id": self.scope.user_id,
                    "role": self.scope.role,
                }
            },
        )
        metrics.inc_override("explicit")

        rebound = self.scope.rebind(target_tenant_id)
        token = _scope_overrides.set({**(_scope_overrides.get() or {}), id(self): rebound})
        try:
            return await fn()
        finally:
            _scope_overrides.reset(token)


# Per-entity facade: access.listing, access.license, ...
for _name in TENANT_OWNED_MODELS:
    setattr(TenantScopedDataAccess, _name, _CollectionProperty(_name))
