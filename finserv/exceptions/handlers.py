# CRITICAL: Set Windows event loop policy FIRST, before other imports
import os
import sys

if sys.platform == "win32":
    import asyncio

    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

from dotenv import load_dotenv

load_dotenv()

import traceback

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from finserv.exceptions.errors import FinservError, ServerError, Unauthorized
from finserv.utils.debug import print__auth_debug, print__debug

# ==============================================================================
# EXCEPTION HANDLERS
# ==============================================================================
# Every error body has the shape {"message": "..."}; the chat route builds its
# own fallback body and never reaches these handlers for provider failures.


async def finserv_error_handler(request: Request, exc: FinservError):
    """Map a tagged FinservError to its status and public message.

    ``exc.detail`` (internal context) is logged, never returned.
    """
    if isinstance(exc, Unauthorized):
        client_ip = request.client.host if request.client else "unknown"
        print__auth_debug(
            f"🚨 HTTP 401 {type(exc).__name__}: {request.method} {request.url.path} from {client_ip}"
        )
    else:
        print__debug(
            f"🚨 HTTP {exc.status_code} {type(exc).__name__}: {exc.public_message}"
            + (f" ({exc.detail})" if exc.detail else "")
        )
    return JSONResponse(
        status_code=exc.status_code, content={"message": exc.public_message}
    )


async def validation_exception_handler(_request: Request, exc: RequestValidationError):
    """Handle request body validation errors as 400 Bad Request.

    Response Format:
        {
            "message": "Invalid request",
            "errors": [{"loc": [...], "msg": "...", "type": "..."}]
        }
    """
    print__debug(f"Validation error: {exc.errors()}")
    simple_errors = [
        {"loc": e.get("loc"), "msg": e.get("msg"), "type": e.get("type")}
        for e in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content=jsonable_encoder({"message": "Invalid request", "errors": simple_errors}),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle framework HTTP exceptions (404, 405, ...) with the common body."""
    if exc.status_code >= 400:
        print__debug(
            f"🚨 HTTP {exc.status_code} ERROR: {request.method} {request.url.path}: {exc.detail}"
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def general_exception_handler(_request: Request, exc: Exception):
    """Handle unexpected exceptions (500 Server error).

    Behavior:
    - Development (DEBUG_TRACEBACK=1): include the traceback in the response
    - Production (default): generic message, details logged internally
    """
    if os.getenv("DEBUG_TRACEBACK", "0") == "1":
        tb = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        print__debug(
            f"Unexpected error (with traceback): {type(exc).__name__}: {str(exc)}\n{tb}"
        )
        return JSONResponse(
            status_code=500,
            content={"message": ServerError.public_message, "traceback": tb},
        )
    print__debug(f"Unexpected error: {type(exc).__name__}: {str(exc)}")
    return JSONResponse(
        status_code=500, content={"message": ServerError.public_message}
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(FinservError, finserv_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
