"""
Test for Phase 9: Application factory, lifespan, root and health routes
"""

import sys

# CRITICAL: Set Windows event loop policy FIRST, before other imports
if sys.platform == "win32":
    import asyncio

    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

import pytest
from fastapi.testclient import TestClient

from finserv.config.settings import SERVICE_NAME
from finserv.exceptions.errors import ConfigurationError
from finserv.main import create_app
from finserv.models.responses import HealthResponse
from tests.helpers import TEST_JWT_SECRET, make_services, print_test_status

EXPECTED_ROUTES = {
    ("GET", "/"),
    ("GET", "/health"),
    ("POST", "/api/auth/register"),
    ("POST", "/api/auth/login"),
    ("GET", "/api/auth/me"),
    ("POST", "/api/chat"),
}


def test_module_level_app_exists():
    from finserv.main import app

    assert app.title == "FinServ API"


def test_all_routes_registered(app):
    registered = {
        (method.upper(), path)
        for path, operations in app.openapi()["paths"].items()
        for method in operations
    }
    missing = EXPECTED_ROUTES - registered
    print_test_status(f"Registered routes checked, missing: {missing or 'none'}")
    assert not missing


def test_root_liveness(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": SERVICE_NAME}


def test_health_reports_store(client):
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["store"] == "memory"
    assert body["store_ok"] is True
    assert set(body) == set(HealthResponse.model_fields)


def test_error_bodies_are_documented(app):
    paths = app.openapi()["paths"]
    login_400 = paths["/api/auth/login"]["post"]["responses"]["400"]
    health_503 = paths["/health"]["get"]["responses"]["503"]
    assert login_400["content"]["application/json"]["schema"]["$ref"].endswith("/MessageResponse")
    assert health_503["content"]["application/json"]["schema"]["$ref"].endswith("/HealthResponse")


def test_health_degraded_when_store_stops_answering(client, services, monkeypatch):
    async def dead_ping():
        return False

    monkeypatch.setattr(services.store, "ping", dead_ping)
    response = client.get("/health")
    assert response.status_code == 503
    assert response.json()["status"] == "degraded"


def test_startup_fails_without_jwt_secret(monkeypatch):
    monkeypatch.delenv("JWT_SECRET", raising=False)
    monkeypatch.setenv("USERSTORE_BACKEND", "memory")

    with pytest.raises(ConfigurationError, match="JWT_SECRET"):
        with TestClient(create_app()):
            pass


def test_startup_fails_when_store_unreachable():
    services = make_services()

    async def dead_ping():
        return False

    services.store.ping = dead_ping
    with pytest.raises(RuntimeError, match="not reachable"):
        with TestClient(create_app(services)):
            pass


def test_startup_from_environment_with_memory_backend(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", TEST_JWT_SECRET)
    monkeypatch.setenv("USERSTORE_BACKEND", "memory")
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)

    app = create_app()
    with TestClient(app) as client:
        assert client.get("/health").json()["store"] == "memory"
        assert app.state.services.settings.jwt_ttl_days == 7


def test_shutdown_closes_outbound_client(services):
    with TestClient(create_app(services)) as client:
        client.get("/")
        assert services.http_client.is_closed is False
    assert services.http_client.is_closed is True
