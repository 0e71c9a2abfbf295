"""Prometheus metrics for tenant isolation events."""

from prometheus_client import Counter

tenant_scope_violations_total = Counter(
    "tenant_scope_violations_total",
    "Calls that attempted to bypass tenant scoping",
    ["kind"],
)

tenant_mismatch_total = Counter(
    "tenant_mismatch_total",
    "Requests rejected because the tenant header conflicted with the principal",
)

cross_tenant_overrides_total = Counter(
    "cross_tenant_overrides_total",
    "Explicit cross-tenant opt-ins by privileged principals",
    ["source"],
)

tenant_ownership_rejections_total = Counter(
    "tenant_ownership_rejections_total",
    "Primary-key lookups discarded by the post-fetch ownership check",
    ["collection"],
)


class PrometheusTenancyMetrics:
    """Prometheus-based tenancy metrics implementation."""

    def inc_violation(self, kind: str) -> None:
        """Increment scope violation counter."""
        tenant_scope_violations_total.labels(kind=kind).inc()

    def inc_mismatch(self) -> None:
        """Increment tenant header mismatch counter."""
        tenant_mismatch_total.inc()

    def inc_override(self, source: str) -> None:
        """Increment cross-tenant override counter."""
        cross_tenant_overrides_total.labels(source=source).inc()

    def inc_ownership_rejection(self, collection: str) -> None:
        """Increment post-fetch ownership rejection counter."""
        tenant_ownership_rejections_total.labels(collection=collection).inc()


metrics = PrometheusTenancyMetrics()
