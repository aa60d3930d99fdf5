# CRITICAL: Set Windows event loop policy FIRST, before other imports
import sys

if sys.platform == "win32":
    import asyncio

    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from finserv.config.settings import RATE_LIMITED_ROUTES
from finserv.dependencies.auth import peek_identity
from finserv.utils.debug import log_comprehensive_error, print__startup_debug


def throttle_keys(request: Request, services) -> list:
    """Keys a request counts against: its client IP, plus its user when the
    bearer token is valid. Each throttled route has its own budget."""
    client_ip = request.client.host if request.client else "unknown"
    route = request.url.path
    keys = [f"ip:{client_ip}:{route}"]
    user_id = peek_identity(
        services.token_service, request.headers.get("authorization")
    )
    if user_id:
        keys.append(f"user:{user_id}:{route}")
    return keys


async def throttling_middleware(request: Request, call_next):
    """Throttle login, registration and chat; every other route passes through.

    Waits up to RATE_LIMIT_MAX_WAIT seconds for capacity before answering 429.
    """
    if (request.method, request.url.path) not in RATE_LIMITED_ROUTES:
        return await call_next(request)

    services = getattr(request.app.state, "services", None)
    if services is None or services.rate_limiter is None:
        return await call_next(request)

    keys = throttle_keys(request, services)
    rate_info = await services.rate_limiter.wait_for_capacity(keys)
    if rate_info["allowed"]:
        return await call_next(request)

    error_msg = (
        f"Rate limit exceeded for {keys} on {request.url.path}. "
        f"Burst: {rate_info['burst_count']}/{rate_info['burst_limit']}, "
        f"Window: {rate_info['window_count']}/{rate_info['window_limit']}"
    )
    log_comprehensive_error("rate_limit_exceeded_after_wait", Exception(error_msg), request)

    retry_after = max(int(rate_info["suggested_wait"] + 0.999), 1)
    return JSONResponse(
        status_code=429,
        content={
            "message": (
                f"Too many requests. Please wait {rate_info['suggested_wait']:.1f}s before retrying."
            ),
            "retry_after": retry_after,
            "burst_usage": f"{rate_info['burst_count']}/{rate_info['burst_limit']}",
            "window_usage": f"{rate_info['window_count']}/{rate_info['window_limit']}",
        },
        headers={"Retry-After": str(retry_after)},
    )


def setup_throttling_middleware(app: FastAPI):
    print__startup_debug("📋 Registering rate limiting middleware...")
    app.middleware("http")(throttling_middleware)
