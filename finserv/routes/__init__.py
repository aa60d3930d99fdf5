"""
Routes package for the FinServ API server.

Root and health probes, the auth endpoints (register, login, me) and the AI
chat relay.
"""

from .auth import router as auth_router
from .chat import router as chat_router
from .health import router as health_router
from .root import router as root_router

__all__ = ["auth_router", "chat_router", "health_router", "root_router"]
