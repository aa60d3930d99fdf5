"""
Configuration package for the FinServ API server.

This package contains settings, constants, and configuration loading
for the personal-finance backend.
"""

from .settings import (
    CHAT_MAX_MESSAGE_LENGTH,
    CHATBOT_ERROR_MESSAGE,
    FALLBACK_REPLY,
    RATE_LIMITED_ROUTES,
    SERVICE_NAME,
    Settings,
    load_settings,
    start_time,
)

__all__ = [
    "CHAT_MAX_MESSAGE_LENGTH",
    "CHATBOT_ERROR_MESSAGE",
    "FALLBACK_REPLY",
    "RATE_LIMITED_ROUTES",
    "SERVICE_NAME",
    "Settings",
    "load_settings",
    "start_time",
]
