"""Integration tests for /healthz and /metrics endpoints."""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from backend.app.main import app


@pytest.fixture
def client() -> TestClient:
    """Create test client."""
    return TestClient(app)


class TestHealthEndpoint:
    """Test /health and /healthz endpoints."""

    def test_health_always_ok(self, client: TestClient) -> None:
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_healthz_returns_200_when_db_ok(self, client: TestClient) -> None:
        """Test /healthz returns 200 when the database is reachable."""
        with patch(
            "backend.app.api.routes.health.check_db", new=AsyncMock(return_value=(True, "ok"))
        ):
            response = client.get("/healthz")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["components"]["db"] == "ok"

    def test_healthz_returns_503_when_db_fails(self, client: TestClient) -> None:
        """Test /healthz returns 503 when DB check fails."""
        with patch(
            "backend.app.api.routes.health.check_db",
            new=AsyncMock(return_value=(False, "error: OperationalError")),
        ):
            response = client.get("/healthz")

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "degraded"
        assert data["components"]["db"] == "error: OperationalError"


class TestMetricsEndpoint:
    """Test /metrics endpoint."""

    def test_metrics_returns_prometheus_format(self, client: TestClient) -> None:
        """Test /metrics returns Prometheus text format."""
        response = client.get("/metrics")

        assert response.status_code == 200
        assert "text/plain" in response.headers["content-type"]

    def test_metrics_includes_tenancy_counters(self, client: TestClient) -> None:
        """Test /metrics includes the tenant isolation counters."""
        from backend.app.utils.metrics import metrics

        metrics.inc_violation("test_kind")
        metrics.inc_mismatch()
        metrics.inc_override("test_source")
        metrics.inc_ownership_rejection("listing")

        response = client.get("/metrics")

        assert response.status_code == 200
        text = response.text
        assert 'tenant_scope_violations_total{kind="test_kind"}' in text
        assert "tenant_mismatch_total" in text
        assert 'cross_tenant_overrides_total{source="test_source"}' in text
        assert 'tenant_ownership_rejections_total{collection="listing"}' in text


class TestRootEndpoint:
    """Test root endpoint."""

    def test_root_returns_api_info(self, client: TestClient) -> None:
        """Test root endpoint returns API information."""
        response = client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Brokerage Core API"
        assert data["version"] == "0.1.0"
