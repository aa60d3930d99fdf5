from pydantic import BaseModel


class PublicUser(BaseModel):
    id: str
    name: str
    email: str


class UserProfile(BaseModel):
    name: str
    email: str


class AuthResponse(BaseModel):
    """Returned by both register and login."""

    token: str
    user: PublicUser


class MeResponse(BaseModel):
    user: UserProfile


class ChatResponse(BaseModel):
    reply: str


class ChatFailureResponse(BaseModel):
    reply: str
    error: str


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    status: str
    store: str
    store_ok: bool
    store_latency_ms: float
    uptime_seconds: float
    timestamp: str
