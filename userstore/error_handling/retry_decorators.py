"""Retry decorator for transient PostgreSQL connection failures.

Store operations are short single statements, so when a connection drops
mid-flight (SSL reset, server restart, broken pipe) the safe recovery is to
run the operation again on a fresh pooled connection. Anything that is not a
connection failure is re-raised immediately.

Backoff between attempts is ``min(2**attempt, 30)`` seconds scaled by
``base_delay`` (1.0 in production, 0 in tests).
"""

import asyncio
import functools
import traceback
from typing import Awaitable, Callable, TypeVar

from finserv.utils.debug import print__userstore_debug
from userstore.config import DEFAULT_MAX_RETRIES

T = TypeVar("T")

CONNECTION_ERROR_PATTERNS = (
    "ssl connection has been closed unexpectedly",
    "consuming input failed",
    "server closed the connection unexpectedly",
    "connection closed",
    "ssl syscall error",
    "connection reset",
    "broken pipe",
    "connection refused",
    "couldn't get a connection",
)


def is_connection_error(error: Exception) -> bool:
    """Check if an error means the connection itself failed.

    Args:
        error: Exception to check

    Returns:
        bool: True for connection-level failures, False otherwise
    """
    error_str = str(error).lower()
    error_type = type(error).__name__.lower()

    return (
        any(pattern in error_str for pattern in CONNECTION_ERROR_PATTERNS)
        or "ssl" in error_type
        or error_type in ("operationalerror", "pooltimeout", "interfaceerror")
    )


def retry_on_connection_error(
    max_retries: int = DEFAULT_MAX_RETRIES, base_delay: float = 1.0
):
    """Decorator factory: retry an async store call on connection failures.

    Args:
        max_retries (int): retry attempts after the first call
        base_delay (float): multiplier for the exponential backoff

    Returns:
        Callable: decorator wrapping an async function
    """

    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            for attempt in range(max_retries + 1):
                try:
                    return await func(*args, **kwargs)
                except Exception as exc:
                    print__userstore_debug(
                        f"DB_RETRY ERROR: {func.__name__} failed on attempt "
                        f"{attempt + 1}/{max_retries + 1}: {type(exc).__name__}: {exc}"
                    )
                    if not is_connection_error(exc) or attempt >= max_retries:
                        print__userstore_debug(
                            f"DB_RETRY EXHAUSTED: re-raising from {func.__name__}"
                        )
                        print__userstore_debug(
                            f"DB_RETRY TRACEBACK: {traceback.format_exc()}"
                        )
                        raise

                    delay = min(2**attempt, 30) * base_delay
                    print__userstore_debug(
                        f"DB_RETRY BACKOFF: retrying {func.__name__} in {delay}s"
                    )
                    await asyncio.sleep(delay)

        return wrapper

    return decorator
