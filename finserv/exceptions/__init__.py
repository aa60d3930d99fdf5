"""Error taxonomy and FastAPI exception handlers."""

from .errors import (
    ConfigurationError,
    EmailInUse,
    FinservError,
    InvalidCredentials,
    InvalidToken,
    MissingToken,
    ServerError,
    Unauthorized,
    UpstreamFailure,
    ValidationError,
)

__all__ = [
    "ConfigurationError",
    "EmailInUse",
    "FinservError",
    "InvalidCredentials",
    "InvalidToken",
    "MissingToken",
    "ServerError",
    "Unauthorized",
    "UpstreamFailure",
    "ValidationError",
]
