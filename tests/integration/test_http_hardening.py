from __future__ import annotations

import httpx
from fastapi.testclient import TestClient
from openai import APIConnectionError

from gradtrack.api import app as app_module
from gradtrack.api.app import create_app
from gradtrack.api.deps import get_autofiller, get_repository
from gradtrack.config import Settings
from gradtrack.llm.autofill import ResearchAutofiller
from helpers import scripted_provider


class ExplodingRepository:
    def list_applications(self, **kwargs):
        raise RuntimeError("database is on fire")


def _unreachable_model_autofiller() -> ResearchAutofiller:
    request = httpx.Request("POST", "http://localhost:9999/v1/chat/completions")
    provider, _ = scripted_provider(APIConnectionError(message="upstream refused key=sk-test", request=request))
    return ResearchAutofiller(provider=provider)


def test_health_reports_environment(client: TestClient) -> None:
    body = client.get("/health").json()

    assert body["status"] == "ok"
    assert body["environment"] == "test"
    assert body["uptime"] >= 0


def test_unknown_route_returns_json_404(client: TestClient) -> None:
    response = client.get("/api/does-not-exist")

    assert response.status_code == 404
    assert response.json() == {"error": "Not found"}


def test_unexpected_error_includes_stack_outside_production() -> None:
    app = create_app()
    app.dependency_overrides[get_repository] = lambda: ExplodingRepository()
    client = TestClient(app, raise_server_exceptions=False)

    response = client.get("/api/applications")

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "database is on fire"
    assert "RuntimeError" in body["stack"]


def test_unexpected_error_is_generic_in_production(monkeypatch) -> None:
    monkeypatch.setattr(app_module, "get_settings", lambda: Settings(app_env="production"))
    app = create_app()
    app.dependency_overrides[get_repository] = lambda: ExplodingRepository()
    client = TestClient(app, raise_server_exceptions=False)

    response = client.get("/api/applications")

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}


def test_model_failure_hides_upstream_detail_in_production(monkeypatch) -> None:
    monkeypatch.setattr(app_module, "get_settings", lambda: Settings(app_env="production"))
    app = create_app()
    app.dependency_overrides[get_autofiller] = _unreachable_model_autofiller
    client = TestClient(app)

    response = client.post("/api/research/autofill", json={"university_name": "X", "program_name": "Y"})

    assert response.status_code == 500
    assert response.json() == {"error": "Service error"}


def test_model_failure_reports_upstream_detail_outside_production(client: TestClient) -> None:
    client.app.dependency_overrides[get_autofiller] = _unreachable_model_autofiller

    response = client.post("/api/research/autofill", json={"university_name": "X", "program_name": "Y"})

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "Model request failed"
    assert "upstream refused" in body["details"]


def test_unexpected_error_keeps_cors_and_security_headers() -> None:
    app = create_app()
    app.dependency_overrides[get_repository] = lambda: ExplodingRepository()
    client = TestClient(app, raise_server_exceptions=False)

    response = client.get("/api/applications", headers={"Origin": "http://localhost:5173"})

    assert response.status_code == 500
    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.json()["error"] == "database is on fire"


def test_security_and_rate_limit_headers(client: TestClient) -> None:
    response = client.get("/api/applications")

    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["RateLimit-Limit"] == "100"
    assert response.headers["RateLimit-Remaining"] == "99"


def test_rate_limit_applies_to_api_routes_only(monkeypatch) -> None:
    monkeypatch.setattr(app_module, "get_settings", lambda: Settings(app_env="test", rate_limit_max_requests=2))
    client = TestClient(create_app())

    assert client.get("/api/applications").status_code == 200
    assert client.get("/api/applications").status_code == 200
    blocked = client.get("/api/applications")
    assert blocked.status_code == 429
    assert blocked.json() == {"error": "Too many requests, please try again later."}

    assert client.get("/health").status_code == 200
