"""
Tests for health and monitoring endpoints.
"""

import pytest
from fastapi.testclient import TestClient

from clipdash.services.logging_service import app_metrics


@pytest.mark.api
class TestHealthEndpoints:
    """Test health probes."""

    def test_root(self, client: TestClient):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["documentation"] == "/docs"
        assert response.json()["status"] == "operational"

    def test_health(self, client: TestClient):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["environment"] == "test"

    def test_ready_without_redis_or_scheduler(self, client: TestClient):
        response = client.get("/health/ready")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ready"
        assert data["checks"] == {"database": True, "redis": False, "scheduler": False}

    def test_live(self, client: TestClient):
        response = client.get("/health/live")

        assert response.status_code == 200
        assert response.json()["status"] == "alive"

    def test_detailed(self, client: TestClient):
        response = client.get("/health/detailed")

        assert response.status_code == 200
        components = response.json()["components"]
        assert components["database"]["status"] == "healthy"
        assert components["redis"]["status"] == "unavailable"
        assert components["scheduler"]["status"] == "disabled"
        assert set(components["providers"]) == {"scrapecreators", "apify"}


@pytest.mark.api
class TestMetricsEndpoints:
    """Test application counters."""

    def test_metrics(self, client: TestClient):
        app_metrics.increment_cache(hit=True)
        app_metrics.increment_cache(hit=False)
        app_metrics.increment_provider_error(402)

        response = client.get("/metrics")

        assert response.status_code == 200
        data = response.json()
        assert data["cache"]["hit_rate_percent"] == 50.0
        assert data["provider_errors"] == {"402": 1}
        assert "error_rate_percent" in data["requests"]

    def test_requests_are_counted(self, client: TestClient):
        client.get("/health")
        client.get("/health")

        assert app_metrics.get_metrics()["requests"]["total"] >= 2

    def test_prometheus(self, client: TestClient):
        app_metrics.increment_sync("tiktok", success=False)
        app_metrics.increment_provider_error(429)

        response = client.get("/metrics/prometheus")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        body = response.text
        assert 'account_syncs_total{platform="tiktok",outcome="failed"} 1' in body
        assert 'provider_errors_total{status="429"} 1' in body
        assert "uptime_seconds" in body
