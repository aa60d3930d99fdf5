"""
MODULE_DESCRIPTION: FinServ API - Application Entry Point

===================================================================================
PURPOSE AND OVERVIEW
===================================================================================

Builds the FastAPI application for the personal-finance backend: account
registration and login with bcrypt-hashed credentials, stateless HS256
session tokens, a bearer-token session guard, and a relay to Google Gemini
for the in-app finance assistant.

``create_app(services=None)`` wires middleware, exception handlers and
routers around an ``AppServices`` container. With no container given, the
lifespan loads settings from the environment and builds the production
wiring; a missing JWT_SECRET or DATABASE_URL, or an unreachable store, aborts
startup. Tests pass their own container instead.

===================================================================================
ENDPOINTS
===================================================================================

    GET  /                    liveness: {"status": "ok", "service": "finserv-server"}
    GET  /health              store connectivity, 503 when degraded
    POST /api/auth/register   {name, email, password} -> {token, user}
    POST /api/auth/login      {email, password} -> {token, user}
    GET  /api/auth/me         bearer token -> {user: {name, email}}
    POST /api/chat            {message} -> {reply}

===================================================================================
MIDDLEWARE ORDER (outermost first)
===================================================================================

    1. CORS (CORS_ALLOWED_ORIGINS)
    2. Brotli compression (responses >= 1000 bytes)
    3. Throttling (login, register, chat only)
"""

import sys

if sys.platform == "win32":
    import asyncio

    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# ==============================================================================
# ENVIRONMENT VARIABLES LOADING
# ==============================================================================
from dotenv import load_dotenv

load_dotenv()

# ==============================================================================
# STANDARD LIBRARY AND THIRD-PARTY IMPORTS
# ==============================================================================
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI

from finserv import __version__
from finserv.config.settings import load_settings
from finserv.exceptions.handlers import register_exception_handlers
from finserv.middleware.cors import setup_brotli_middleware, setup_cors_middleware
from finserv.middleware.rate_limiting import setup_throttling_middleware
from finserv.routes import auth_router, chat_router, health_router, root_router
from finserv.services.container import AppServices
from finserv.utils.debug import print__startup_debug

# ==============================================================================
# APPLICATION LIFESPAN MANAGEMENT
# ==============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: load settings (if no container was injected), open the store.
    Shutdown: close the store and the outbound HTTP client."""
    started_at = datetime.now()
    print__startup_debug("🚀 FastAPI application starting up...")

    if app.state.services is None:
        settings = load_settings()
        app.state.services = AppServices.from_settings(settings)

    services = app.state.services
    await services.init()
    print__startup_debug("✅ FastAPI application ready to serve requests")

    try:
        yield
    finally:
        print__startup_debug(
            f"🛑 FastAPI application shutting down after {datetime.now() - started_at}"
        )
        await services.shutdown()


# ==============================================================================
# FASTAPI APPLICATION FACTORY
# ==============================================================================


def create_app(services: AppServices = None) -> FastAPI:
    app = FastAPI(
        title="FinServ API",
        description="""Personal-finance backend: accounts, sessions and the AI finance assistant.

## Authentication
`GET /api/auth/me` requires `Authorization: Bearer <token>` with a token from
register or login. Tokens are valid for 7 days.
        """,
        version=__version__,
        lifespan=lifespan,
        responses={
            400: {
                "description": "Bad Request - missing fields, email in use, or invalid credentials",
                "content": {"application/json": {"example": {"message": "Invalid credentials"}}},
            },
            429: {
                "description": "Rate Limit Exceeded - Too many requests",
                "content": {
                    "application/json": {
                        "example": {
                            "message": "Too many requests. Please wait 5.0s before retrying.",
                            "retry_after": 5,
                        }
                    }
                },
            },
            500: {
                "description": "Internal Server Error",
                "content": {"application/json": {"example": {"message": "Server error"}}},
            },
        },
    )
    app.state.services = services

    # ==========================================================================
    # MIDDLEWARE REGISTRATION
    # ==========================================================================
    # Last added runs first: CORS wraps everything, including 429s
    setup_throttling_middleware(app)
    setup_brotli_middleware(app)
    setup_cors_middleware(
        app, services.settings.cors_allowed_origins if services is not None else None
    )

    # ==========================================================================
    # EXCEPTION HANDLERS
    # ==========================================================================
    register_exception_handlers(app)

    # ==========================================================================
    # ROUTE REGISTRATION
    # ==========================================================================
    app.include_router(root_router, tags=["Root"])
    app.include_router(health_router, tags=["Health & Monitoring"])
    app.include_router(auth_router, tags=["Authentication"])
    app.include_router(chat_router, tags=["AI Chat"])

    print__startup_debug(f"📋 Registered {len(app.routes)} routes")
    return app


app = create_app()
