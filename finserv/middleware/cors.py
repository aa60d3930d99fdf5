# CRITICAL: Set Windows event loop policy FIRST, before other imports
import os
import sys

if sys.platform == "win32":
    import asyncio

    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

from dotenv import load_dotenv

load_dotenv()

from typing import List, Optional

from brotli_asgi import BrotliMiddleware
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from finserv.config.settings import DEFAULT_CORS_ORIGINS
from finserv.utils.debug import print__startup_debug


def setup_cors_middleware(app: FastAPI, allowed_origins: Optional[List[str]] = None):
    """Allow the browser client's origins to call the API with a bearer header."""
    print__startup_debug("📋 Registering CORS middleware...")
    if allowed_origins is None:
        allowed_origins_str = os.getenv("CORS_ALLOWED_ORIGINS", DEFAULT_CORS_ORIGINS)
        allowed_origins = [
            origin.strip() for origin in allowed_origins_str.split(",") if origin.strip()
        ]
    print__startup_debug(f"📋 CORS allowed origins: {allowed_origins}")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
        expose_headers=["Retry-After"],
    )


def setup_brotli_middleware(app: FastAPI):
    print__startup_debug("📋 Registering Brotli compression middleware...")
    app.add_middleware(BrotliMiddleware, minimum_size=1000)
