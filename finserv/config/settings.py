"""
MODULE_DESCRIPTION: FinServ API Configuration Settings

===================================================================================
PURPOSE AND OVERVIEW
===================================================================================

Central configuration for the FinServ backend. Two layers live here:

    1. Module-level constants read from the environment at import time.
       These are values that must exist before any app is built (the chat
       message size cap used by request validation, the fixed fallback
       reply, the startup timestamp).

    2. A ``Settings`` object built by ``load_settings()``. This is what the
       service container consumes. It is constructed inside the application
       lifespan, so a missing signing secret or database URL aborts startup
       with ``ConfigurationError`` instead of failing at import time or on
       the first request.

===================================================================================
ENVIRONMENT VARIABLES
===================================================================================

Required:
    JWT_SECRET              HS256 signing key
    DATABASE_URL            PostgreSQL connection string (postgres backend only)

Optional (defaults in brackets):
    JWT_ALGORITHM           [HS256]
    JWT_TTL_DAYS            [7]
    USERSTORE_BACKEND       [postgres]  "memory" for local development/tests
    GEMINI_API_KEY          [empty]     empty -> every chat relay falls back
    GEMINI_MODEL            [gemini-2.5-flash]
    GEMINI_API_BASE         [https://generativelanguage.googleapis.com/v1beta]
    CHAT_TIMEOUT_SECONDS    [8]
    CHAT_MAX_RETRIES        [1]
    CHAT_MAX_MESSAGE_LENGTH [4000]
    CHAT_REQUIRE_AUTH       [0]
    RATE_LIMIT_REQUESTS     [30]  per RATE_LIMIT_WINDOW seconds
    RATE_LIMIT_WINDOW       [60]
    RATE_LIMIT_BURST        [10]  per RATE_LIMIT_BURST_WINDOW seconds
    RATE_LIMIT_BURST_WINDOW [10]
    RATE_LIMIT_MAX_WAIT     [2]   seconds to wait for capacity before 429
    CORS_ALLOWED_ORIGINS    [http://localhost:5173,http://localhost:3000]
"""

import os
import time
from typing import List, Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from finserv.exceptions.errors import ConfigurationError
from userstore.config import SUPPORTED_BACKENDS

load_dotenv()

# ==============================================================================
# CONFIGURATION AND CONSTANTS
# ==============================================================================

# Application startup time for uptime tracking
start_time = time.time()

SERVICE_NAME = "finserv-server"

# Chat relay
FALLBACK_REPLY = "Sorry, I couldn't generate a response."
CHATBOT_ERROR_MESSAGE = "Chatbot failed to respond."
CHAT_MAX_MESSAGE_LENGTH = int(os.environ.get("CHAT_MAX_MESSAGE_LENGTH", "4000"))

# Routes covered by the throttling middleware (method, path)
RATE_LIMITED_ROUTES = (
    ("POST", "/api/auth/login"),
    ("POST", "/api/auth/register"),
    ("POST", "/api/chat"),
)

DEFAULT_CORS_ORIGINS = "http://localhost:5173,http://localhost:3000"
DEFAULT_GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"


# ==============================================================================
# SETTINGS OBJECT
# ==============================================================================


class Settings(BaseModel):
    """Validated runtime configuration consumed by the service container."""

    jwt_secret: str = Field(repr=False)
    jwt_algorithm: str = "HS256"
    jwt_ttl_days: int = 7

    userstore_backend: str = "postgres"
    database_url: Optional[str] = Field(default=None, repr=False)

    gemini_api_key: str = Field(default="", repr=False)
    gemini_model: str = "gemini-2.5-flash"
    gemini_api_base: str = DEFAULT_GEMINI_API_BASE
    chat_timeout_seconds: float = 8.0
    chat_max_retries: int = 1
    chat_require_auth: bool = False

    rate_limit_requests: int = 30
    rate_limit_window: int = 60
    rate_limit_burst: int = 10
    rate_limit_burst_window: int = 10
    rate_limit_max_wait: float = 2.0

    cors_allowed_origins: List[str] = Field(
        default_factory=lambda: DEFAULT_CORS_ORIGINS.split(",")
    )

    model_config = {"frozen": True}

    @property
    def jwt_ttl_seconds(self) -> int:
        return self.jwt_ttl_days * 24 * 60 * 60


def _flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _split_origins(value: str) -> List[str]:
    return [origin.strip() for origin in value.split(",") if origin.strip()]


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Build ``Settings`` from ``env`` (defaults to ``os.environ``).

    Raises:
        ConfigurationError: a required variable is missing or blank, or a
            value cannot be parsed.
    """
    env = os.environ if env is None else env

    def get(name: str, default: str = "") -> str:
        return (env.get(name) or default).strip()

    missing = []
    jwt_secret = get("JWT_SECRET")
    if not jwt_secret:
        missing.append("JWT_SECRET")

    backend = get("USERSTORE_BACKEND", "postgres").lower()
    if backend not in SUPPORTED_BACKENDS:
        raise ConfigurationError(
            f"USERSTORE_BACKEND must be one of {', '.join(SUPPORTED_BACKENDS)}, got {backend!r}"
        )
    database_url = get("DATABASE_URL") or None
    if backend == "postgres" and not database_url:
        missing.append("DATABASE_URL")

    if missing:
        raise ConfigurationError(
            f"Missing required environment variables: {', '.join(missing)}"
        )

    try:
        return Settings(
            jwt_secret=jwt_secret,
            jwt_algorithm=get("JWT_ALGORITHM", "HS256"),
            jwt_ttl_days=int(get("JWT_TTL_DAYS", "7")),
            userstore_backend=backend,
            database_url=database_url,
            gemini_api_key=get("GEMINI_API_KEY"),
            gemini_model=get("GEMINI_MODEL", "gemini-2.5-flash"),
            gemini_api_base=get("GEMINI_API_BASE", DEFAULT_GEMINI_API_BASE).rstrip("/"),
            chat_timeout_seconds=float(get("CHAT_TIMEOUT_SECONDS", "8")),
            chat_max_retries=int(get("CHAT_MAX_RETRIES", "1")),
            chat_require_auth=_flag(get("CHAT_REQUIRE_AUTH", "0")),
            rate_limit_requests=int(get("RATE_LIMIT_REQUESTS", "30")),
            rate_limit_window=int(get("RATE_LIMIT_WINDOW", "60")),
            rate_limit_burst=int(get("RATE_LIMIT_BURST", "10")),
            rate_limit_burst_window=int(get("RATE_LIMIT_BURST_WINDOW", "10")),
            rate_limit_max_wait=float(get("RATE_LIMIT_MAX_WAIT", "2")),
            cors_allowed_origins=_split_origins(
                get("CORS_ALLOWED_ORIGINS", DEFAULT_CORS_ORIGINS)
            ),
        )
    except ValueError as exc:
        raise ConfigurationError(f"Invalid configuration value: {exc}") from exc
