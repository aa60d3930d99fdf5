"""Test helpers and builders shared by the test suite."""

import time
from datetime import datetime
from typing import Callable, Optional

import httpx
import jwt
from dotenv import load_dotenv

load_dotenv()

from finserv.config.settings import Settings
from finserv.services.container import AppServices
from finserv.utils.rate_limiting import RateLimiter
from userstore.memory_store import InMemoryCredentialStore

TEST_JWT_SECRET = "test-secret-do-not-use-in-production"
TEST_GEMINI_KEY = "test-gemini-key"
TEST_REPLY = "Keep three to six months of expenses in an emergency fund."


def print_test_status(message: str):
    """Print test status messages with timestamp."""
    timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
    print(f"[{timestamp}] {message}")


def make_settings(**overrides) -> Settings:
    """Settings for an isolated in-memory app with throttling out of the way."""
    values = {
        "jwt_secret": TEST_JWT_SECRET,
        "userstore_backend": "memory",
        "gemini_api_key": TEST_GEMINI_KEY,
        "chat_timeout_seconds": 1.0,
        "rate_limit_requests": 1000,
        "rate_limit_burst": 1000,
        "rate_limit_max_wait": 0,
        "cors_allowed_origins": ["http://localhost:5173"],
    }
    values.update(overrides)
    return Settings(**values)


def gemini_payload(text: str = TEST_REPLY) -> dict:
    return {
        "candidates": [
            {"content": {"role": "model", "parts": [{"text": text}]}, "finishReason": "STOP"}
        ]
    }


def gemini_ok_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json=gemini_payload())


def mock_http_client(handler: Callable[[httpx.Request], httpx.Response] = None) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler or gemini_ok_handler))


def make_services(
    settings: Settings = None,
    handler: Callable[[httpx.Request], httpx.Response] = None,
    store=None,
    rate_limiter: Optional[RateLimiter] = None,
) -> AppServices:
    """AppServices wired to an in-memory store and a mocked Gemini transport."""
    settings = settings or make_settings()
    return AppServices.from_settings(
        settings,
        store=store if store is not None else InMemoryCredentialStore(),
        http_client=mock_http_client(handler),
        rate_limiter=rate_limiter,
    )


def create_test_jwt_token(
    user_id: str = "user-123",
    name: str = "Test User",
    email: str = "test@example.com",
    exp_seconds: int = 3600,
    secret: str = TEST_JWT_SECRET,
    algorithm: str = "HS256",
) -> str:
    """Sign a session token directly, bypassing TokenService."""
    now = int(time.time())
    payload = {
        "id": user_id,
        "name": name,
        "email": email,
        "iat": now,
        "exp": now + exp_seconds,
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def register_user(client, name="Ada", email="ada@example.com", password="analytical-engine"):
    """POST /api/auth/register through a TestClient and return the response."""
    return client.post(
        "/api/auth/register",
        json={"name": name, "email": email, "password": password},
    )
