"""Tests for scanner, indicator and compliance endpoints."""

from __future__ import annotations

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from alphascan.api import create_api_app
from alphascan.api.dependencies import get_market_scanner
from alphascan.domain import Quote
from alphascan.scanner import ScanType
from alphascan.scanner.service import MarketScanner

from conftest import FakeProvider, make_bars


QUOTES = {
    "AAA": Quote(
        symbol="AAA",
        current_price=40.0,
        country="US",
        sector="Technology",
        industry="Software",
        market_cap=3_000_000_000,
        pe_ratio=9.0,
        pb_ratio=0.9,
    ),
    "BBB": Quote(
        symbol="BBB",
        current_price=60.0,
        country="US",
        sector="Technology",
        industry="Software",
        market_cap=3_000_000_000,
        pe_ratio=25.0,
    ),
}


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider(QUOTES)


@pytest.fixture
def client(provider, cache, scanner_config):
    app = create_api_app()
    config = scanner_config.with_overrides(technical_top_n=0)
    app.dependency_overrides[get_market_scanner] = lambda: MarketScanner(provider, cache, config)
    with TestClient(app) as test_client:
        yield test_client


def _bars_json(closes):
    return [bar.model_dump(mode="json") for bar in make_bars(closes)]


# =============================================================================
# Scan
# =============================================================================


class TestScanEndpoint:
    """Tests for POST /scanner/scan."""

    def test_scan_returns_ranked_report(self, client: TestClient):
        response = client.post("/scanner/scan", json={"scan_type": "value"})

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["scan_type"] == "value"
        assert [r["stock"]["symbol"] for r in data["results"]] == ["AAA"]
        assert data["universe_size"] == 2
        assert data["results"][0]["is_shariah_compliant"] is True

    def test_scan_without_body_uses_defaults(self, client: TestClient):
        response = client.post("/scanner/scan")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["scan_type"] == "undervalued"

    def test_invalid_filters_rejected(self, client: TestClient, provider: FakeProvider):
        response = client.post("/scanner/scan", json={"markets": []})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_CONTENT
        data = response.json()
        assert data["error"] == "INVALID_FILTER"
        assert data["details"]["errors"]
        assert provider.list_calls == 0

    def test_empty_universe_is_unavailable(self, client: TestClient, provider: FakeProvider):
        provider.directory_down = True
        response = client.post("/scanner/scan", json={})
        assert response.status_code == status.HTTP_503_SERVICE_UNAVAILABLE
        assert response.json()["error"] == "UNIVERSE_UNAVAILABLE"


# =============================================================================
# Indicators
# =============================================================================


class TestIndicatorsEndpoint:
    """Tests for POST /scanner/indicators."""

    def test_full_bundle(self, client: TestClient):
        response = client.post(
            "/scanner/indicators", json={"bars": _bars_json([float(10 + i) for i in range(30)])}
        )
        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["bar_count"] == 30
        assert data["current_price"] == 39.0
        assert data["sma200"] is None

    def test_single_indicator(self, client: TestClient):
        response = client.post(
            "/scanner/indicators",
            json={
                "bars": _bars_json([float(10 + i) for i in range(30)]),
                "params": {"kind": "sma", "period": 5},
            },
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"kind": "sma", "value": pytest.approx(37.0)}

    def test_empty_bars_rejected(self, client: TestClient):
        response = client.post("/scanner/indicators", json={"bars": []})
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_CONTENT
        assert response.json()["error"] == "INSUFFICIENT_DATA"

    def test_invalid_params_rejected(self, client: TestClient):
        response = client.post(
            "/scanner/indicators",
            json={"bars": _bars_json([1.0, 2.0]), "params": {"kind": "macd", "fast": 30, "slow": 10}},
        )
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_CONTENT


# =============================================================================
# Compliance and strategies
# =============================================================================


class TestComplianceEndpoint:
    """Tests for POST /scanner/compliance."""

    def test_compliant_company(self, client: TestClient):
        response = client.post(
            "/scanner/compliance",
            json={
                "profile": {"sector": "Technology", "industry": "Software"},
                "financials": {"total_debt": 100, "market_cap": 1000},
            },
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["overall_status"] == "compliant"

    def test_haram_industry(self, client: TestClient):
        response = client.post(
            "/scanner/compliance",
            json={"profile": {"sector": "Consumer Cyclical", "industry": "Resorts & Casinos"}},
        )
        data = response.json()
        assert data["overall_status"] == "non-compliant"
        assert data["business_screening"]["passed"] is False

    def test_missing_financials_is_unknown(self, client: TestClient):
        response = client.post(
            "/scanner/compliance",
            json={"profile": {"sector": "Technology", "industry": "Software"}},
        )
        assert response.json()["overall_status"] == "unknown"


class TestStrategiesEndpoint:
    """Tests for GET /scanner/strategies."""

    def test_lists_every_scan_type(self, client: TestClient):
        response = client.get("/scanner/strategies")
        assert response.status_code == status.HTTP_200_OK
        assert {s["scan_type"] for s in response.json()} == {t.value for t in ScanType}
