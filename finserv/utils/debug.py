# Load environment variables early
import os
import sys

from dotenv import load_dotenv

load_dotenv()

# Standard imports
import json
from datetime import datetime

from fastapi import Request


# ==============================================================================
# DEBUG FUNCTIONS
# ==============================================================================
# Every function below is gated by its own environment variable ("1" = on) so
# that individual subsystems can be traced without flooding stdout.
# Never pass tokens, passwords, hashes or API keys to these functions.


def print__debug(msg: str) -> None:
    """Print DEBUG messages when debug mode is enabled.

    Args:
        msg: The message to print
    """
    debug_mode = os.environ.get("DEBUG", "0")
    if debug_mode == "1":
        print(f"[DEBUG] {msg}")
        sys.stdout.flush()


def print__startup_debug(msg: str) -> None:
    """Print startup and shutdown messages when debug mode is enabled."""
    debug_mode = os.environ.get("DEBUG", "0")
    if debug_mode == "1":
        print(f"[STARTUP-DEBUG] {msg}")
        sys.stdout.flush()


def print__token_debug(msg: str) -> None:
    """Print token issuance/verification messages when enabled.

    Args:
        msg: The message to print
    """
    debug_mode = os.environ.get("print__token_debug", "0")
    if debug_mode == "1":
        print(f"[print__token_debug] {msg}")
        sys.stdout.flush()


def print__auth_debug(msg: str) -> None:
    """Print register/login/me flow messages when enabled.

    Args:
        msg: The message to print
    """
    debug_mode = os.environ.get("print__auth_debug", "0")
    if debug_mode == "1":
        print(f"[print__auth_debug] {msg}")
        sys.stdout.flush()


def print__chat_debug(msg: str) -> None:
    """Print chat relay messages when enabled.

    Args:
        msg: The message to print
    """
    debug_mode = os.environ.get("print__chat_debug", "0")
    if debug_mode == "1":
        print(f"[print__chat_debug] {msg}")
        sys.stdout.flush()


def print__userstore_debug(msg: str) -> None:
    """Print credential store messages when enabled.

    Args:
        msg: The message to print
    """
    debug_mode = os.environ.get("print__userstore_debug", "0")
    if debug_mode == "1":
        print(f"[print__userstore_debug] {msg}")
        sys.stdout.flush()


def print__rate_limit_debug(msg: str) -> None:
    """Print throttling decisions when enabled."""
    debug_mode = os.environ.get("print__rate_limit_debug", "0")
    if debug_mode == "1":
        print(f"[print__rate_limit_debug] {msg}")
        sys.stdout.flush()


def print__upstream_error(msg: str) -> None:
    """Print upstream provider failures.

    On unless disabled with print__upstream_error=0.

    Args:
        msg: The message to print
    """
    debug_mode = os.environ.get("print__upstream_error", "1")
    if debug_mode == "1":
        print(f"[UPSTREAM-ERROR] {msg}", file=sys.stderr)
        sys.stderr.flush()


# ==============================================================================
# ERROR REPORTING
# ==============================================================================


def log_comprehensive_error(context: str, error: Exception, request: Request = None):
    """Log comprehensive error information with context.

    Creates a detailed error report including error type, message,
    timestamp, and optional request information.

    Args:
        context (str): Description of where/when the error occurred
        error (Exception): The exception that was raised
        request (Request, optional): FastAPI request object for additional context

    Note:
        - Does not raise exceptions
        - Request headers are not included (they may carry bearer tokens)
    """
    error_details = {
        "context": context,
        "error_type": type(error).__name__,
        "error_message": str(error),
        "timestamp": datetime.now().isoformat(),
    }

    if request:
        error_details.update(
            {
                "method": request.method,
                "url": str(request.url),
                "client_ip": request.client.host if request.client else "unknown",
            }
        )

    print__debug(f"🚨 ERROR: {json.dumps(error_details, indent=2)}")
