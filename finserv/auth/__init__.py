"""
Authentication package for the FinServ API server.

Issues and verifies the HS256 session tokens handed out at register/login.
"""

from .jwt_auth import (
    SessionClaims,
    TokenError,
    TokenExpired,
    TokenService,
    TokenSignatureInvalid,
)

__all__ = [
    "SessionClaims",
    "TokenError",
    "TokenExpired",
    "TokenService",
    "TokenSignatureInvalid",
]
