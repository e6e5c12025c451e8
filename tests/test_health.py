"""Tests for health check API endpoints."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from alphascan.api import create_api_app


@pytest.fixture
def client():
    with TestClient(create_api_app()) as test_client:
        yield test_client


class TestHealthEndpoint:
    """Tests for GET /health."""

    def test_health_returns_200(self, client: TestClient):
        """GET /health returns 200 OK."""
        response = client.get("/health")
        assert response.status_code == status.HTTP_200_OK

    def test_health_without_shared_cache(self, client: TestClient):
        """Only the in-process cache is checked when Valkey is not configured."""
        with patch("alphascan.api.routes.health.valkey_enabled", return_value=False):
            data = client.get("/health").json()
        assert data["status"] == "healthy"
        assert data["checks"] == {"memory_cache": True}
        assert "version" in data

    def test_health_degraded_when_valkey_down(self, client: TestClient):
        """A failing shared cache tier degrades the service."""
        with patch("alphascan.api.routes.health.valkey_enabled", return_value=True), patch(
            "alphascan.api.routes.health.valkey_healthcheck",
            new=AsyncMock(return_value=False),
        ):
            data = client.get("/health").json()
        assert data["status"] == "degraded"
        assert data["checks"]["valkey"] is False

    def test_request_id_echoed(self, client: TestClient):
        """Responses carry the caller's request ID."""
        response = client.get("/health", headers={"X-Request-ID": "abc-123"})
        assert response.headers["X-Request-ID"] == "abc-123"


class TestLivenessEndpoint:
    """Tests for GET /health/live."""

    def test_live_returns_alive_status(self, client: TestClient):
        """GET /health/live returns alive status."""
        response = client.get("/health/live")
        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"status": "alive"}


class TestCacheStatsEndpoint:
    """Tests for GET /health/cache."""

    def test_cache_stats_fields(self, client: TestClient):
        data = client.get("/health/cache").json()
        for field in ("entries", "fresh", "hits", "misses", "stale_hits"):
            assert field in data
