"""
Dependencies package for the FinServ API server.

FastAPI dependencies for the session guard and service container access.
"""

from .auth import get_chat_session, get_current_user, get_services

__all__ = ["get_chat_session", "get_current_user", "get_services"]
