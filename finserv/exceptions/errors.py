"""Error types of the FinServ API.

Every client-visible failure is a ``FinservError`` subclass carrying the HTTP
status and the exact public message; the handlers in
``finserv.exceptions.handlers`` turn them into ``{"message": ...}`` bodies.
Internal detail goes into the exception's ``detail`` and is logged, never
returned.
"""


class FinservError(Exception):
    status_code = 500
    public_message = "Server error"

    def __init__(self, public_message: str = None, detail: str = None):
        self.public_message = public_message or self.public_message
        self.detail = detail
        super().__init__(detail or self.public_message)


class ValidationError(FinservError):
    status_code = 400
    public_message = "All fields are required"


class EmailInUse(FinservError):
    status_code = 400
    public_message = "Email already in use"


class InvalidCredentials(FinservError):
    """Unknown email and wrong password share this one error."""

    status_code = 400
    public_message = "Invalid credentials"


class Unauthorized(FinservError):
    status_code = 401
    public_message = "Unauthorized"


class MissingToken(Unauthorized):
    public_message = "Missing token"


class InvalidToken(Unauthorized):
    public_message = "Invalid token"


class ServerError(FinservError):
    status_code = 500
    public_message = "Server error"


class UpstreamFailure(Exception):
    """The AI provider failed. Recovered with the fallback reply, never raised
    to the client."""

    def __init__(self, reason: str, detail: str = None):
        self.reason = reason
        self.detail = detail
        super().__init__(f"{reason}: {detail}" if detail else reason)


class ConfigurationError(RuntimeError):
    """Required configuration is missing or invalid. Fatal at startup."""
