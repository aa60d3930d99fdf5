"""Request and response bodies of the FinServ API."""

from .requests import ChatRequest, LoginRequest, RegisterRequest
from .responses import (
    AuthResponse,
    ChatFailureResponse,
    ChatResponse,
    HealthResponse,
    MeResponse,
    MessageResponse,
    PublicUser,
    UserProfile,
)

__all__ = [
    "AuthResponse",
    "ChatFailureResponse",
    "ChatRequest",
    "ChatResponse",
    "HealthResponse",
    "LoginRequest",
    "MeResponse",
    "MessageResponse",
    "PublicUser",
    "RegisterRequest",
    "UserProfile",
]
