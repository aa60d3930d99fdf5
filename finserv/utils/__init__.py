"""
Utility functions package for the FinServ API server.

Debug printing, request throttling, and client-disconnect handling.
"""

from .cancellation import ClientDisconnected, run_until_disconnected
from .debug import (
    log_comprehensive_error,
    print__auth_debug,
    print__chat_debug,
    print__debug,
    print__rate_limit_debug,
    print__startup_debug,
    print__token_debug,
    print__upstream_error,
    print__userstore_debug,
)
from .rate_limiting import RateLimiter

__all__ = [
    "ClientDisconnected",
    "RateLimiter",
    "log_comprehensive_error",
    "print__auth_debug",
    "print__chat_debug",
    "print__debug",
    "print__rate_limit_debug",
    "print__startup_debug",
    "print__token_debug",
    "print__upstream_error",
    "print__userstore_debug",
    "run_until_disconnected",
]
