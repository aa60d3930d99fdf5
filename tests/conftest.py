"""Shared fixtures: an isolated app per test, backed by the in-memory store
and a mocked Gemini transport."""

import pytest
from fastapi.testclient import TestClient

from finserv.main import create_app
from tests.helpers import make_services, make_settings


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def services(settings):
    return make_services(settings)


@pytest.fixture
def app(services):
    return create_app(services)


@pytest.fixture
def client(app):
    # raise_server_exceptions=False so 500 handlers are observable
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


@pytest.fixture(autouse=True)
def _quiet_debug_env(monkeypatch):
    monkeypatch.delenv("DEBUG_TRACEBACK", raising=False)
