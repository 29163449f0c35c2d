"""Integration tests for API endpoints using FastAPI TestClient."""

from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from conftest import ScriptedAdapter, make_recommendation
from reelpicks.adapters.inbound.rest.routers import provide_recommendation_service
from reelpicks.application.services import RecommendationService
from reelpicks.config import get_settings
from reelpicks.domain.enums import AttemptOutcome, ProviderFamily
from reelpicks.main import create_app
from reelpicks.shared.providers.gateway import DispatchOrchestrator
from reelpicks.shared.providers.types import AdapterResult

GOOD_BODY = json.dumps(
    {
        "searchTitle": "Ταινίες με ανατροπές",
        "recommendations": [make_recommendation(1), make_recommendation(2, type="series")],
    }
)


@pytest.fixture
def settings():
    return get_settings(gemini_api_key="test-gemini", openrouter_api_key="test-openrouter")


@pytest.fixture
def gemini():
    return ScriptedAdapter(ProviderFamily.GEMINI)


@pytest.fixture
def openrouter():
    return ScriptedAdapter(ProviderFamily.OPENROUTER)


@pytest.fixture
def service(catalog, ledger, gemini, openrouter):
    orchestrator = DispatchOrchestrator(
        catalog,
        ledger,
        {ProviderFamily.GEMINI: gemini, ProviderFamily.OPENROUTER: openrouter},
    )
    return RecommendationService(orchestrator)


@pytest.fixture
def app(settings, service):
    app = create_app(settings)
    app.dependency_overrides[provide_recommendation_service] = lambda: service
    return app


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


class TestHealthEndpoints:
    def test_health_check(self, client):
        resp = client.get("/api/v1/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert "version" in data
        assert data["backends"] == {"alpha": True, "beta": True, "gamma": True}

    def test_metrics_endpoint(self, client):
        client.get("/api/v1/health")
        resp = client.get("/api/v1/metrics")
        assert resp.status_code == 200
        assert b"http_requests_total" in resp.content

    def test_request_id_echoed(self, client):
        resp = client.get("/api/v1/health", headers={"X-Request-ID": "abc123"})
        assert resp.headers["X-Request-ID"] == "abc123"


class TestRecommendationEndpoint:
    def test_success(self, client, gemini):
        gemini.script("alpha", AdapterResult.success(GOOD_BODY))

        resp = client.post("/api/v1/recommendations", json={"prompt": "twists", "language": "el"})

        assert resp.status_code == 200
        data = resp.json()
        assert data["searchTitle"] == "Ταινίες με ανατροπές"
        assert [r["id"] for r in data["recommendations"]] == ["tt1000001", "tt1000002"]
        assert data["recommendations"][1]["type"] == "series"

    def test_missing_prompt(self, client):
        resp = client.post("/api/v1/recommendations", json={"language": "en"})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Missing prompt"}

    def test_all_models_exhausted(self, client):
        resp = client.post("/api/v1/recommendations", json={"prompt": "anything"})

        assert resp.status_code == 503
        data = resp.json()
        assert data["errorType"] == "ALL_MODELS_EXHAUSTED"
        assert data["retryAfter"] == 60
        assert resp.headers["Retry-After"] == "60"

    def test_network_error(self, client, gemini):
        gemini.script("alpha", AdapterResult(AttemptOutcome.TRANSPORT_ERROR, error="reset"))

        resp = client.post("/api/v1/recommendations", json={"prompt": "anything"})

        assert resp.status_code == 502
        assert resp.json()["errorType"] == "NETWORK_ERROR"

    def test_invalid_response(self, client, gemini):
        gemini.script("alpha", AdapterResult.success("no json here"))

        resp = client.post("/api/v1/recommendations", json={"prompt": "anything"})

        assert resp.status_code == 500
        assert resp.json() == {
            "error": "Failed to parse AI response",
            "errorType": "INVALID_RESPONSE",
        }

    def test_config_error(self, settings, catalog, ledger):
        orchestrator = DispatchOrchestrator(
            catalog,
            ledger,
            {ProviderFamily.GEMINI: ScriptedAdapter(ProviderFamily.GEMINI, configured=False)},
        )
        app = create_app(settings)
        app.dependency_overrides[provide_recommendation_service] = (
            lambda: RecommendationService(orchestrator)
        )
        with TestClient(app) as client:
            resp = client.post("/api/v1/recommendations", json={"prompt": "anything"})

        assert resp.status_code == 503
        assert resp.json()["errorType"] == "CONFIG_ERROR"


class TestBackendUsageEndpoints:
    def test_usage_after_request(self, client, gemini):
        gemini.script("alpha", AdapterResult(AttemptOutcome.RATE_LIMITED))
        gemini.script("gamma", AdapterResult.success(GOOD_BODY))
        client.post("/api/v1/recommendations", json={"prompt": "anything"})

        resp = client.get("/api/v1/providers/usage")

        assert resp.status_code == 200
        usage = {u["backend"]: u for u in resp.json()}
        assert list(usage) == ["alpha", "beta", "gamma"]
        assert usage["alpha"]["exhausted"] is True
        assert usage["beta"]["exhausted"] is True
        assert usage["gamma"]["daily_count"] == 1

    def test_usage_counters_cannot_be_reset_over_http(self, client, gemini, ledger, catalog):
        gemini.script("alpha", AdapterResult.success(GOOD_BODY))
        client.post("/api/v1/recommendations", json={"prompt": "anything"})

        resp = client.post("/api/v1/providers/alpha/reset")

        assert resp.status_code in (404, 405)
        assert ledger.snapshot(catalog[0]).daily_count == 1


class TestRequestMetrics:
    def test_endpoint_label_is_route_template(self, client, gemini):
        gemini.script("alpha", AdapterResult.success(GOOD_BODY))
        client.post("/api/v1/recommendations", json={"prompt": "anything"})

        body = client.get("/api/v1/metrics").text

        assert 'endpoint="/api/v1/recommendations"' in body

    def test_unmatched_paths_share_one_label(self, client):
        client.get("/api/v1/no-such-thing/12345")

        body = client.get("/api/v1/metrics").text

        assert 'endpoint="unmatched"' in body
        assert "no-such-thing" not in body
