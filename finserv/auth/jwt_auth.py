# CRITICAL: Set Windows event loop policy FIRST, before other imports
import sys

if sys.platform == "win32":
    import asyncio

    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

from dotenv import load_dotenv

load_dotenv()

import time
from typing import Optional

import jwt
from pydantic import BaseModel

from finserv.utils.debug import print__token_debug

# ==============================================================================
# TOKEN ERRORS
# ==============================================================================


class TokenError(Exception):
    """Token could not be verified."""


class TokenExpired(TokenError):
    pass


class TokenSignatureInvalid(TokenError):
    """Bad signature, wrong algorithm, or a token that is not a JWT at all."""


# ==============================================================================
# CLAIMS
# ==============================================================================


class SessionClaims(BaseModel):
    """Decoded session token payload."""

    id: str
    name: str
    email: str
    iat: Optional[int] = None
    exp: int

    def identity(self) -> dict:
        return {"id": self.id, "name": self.name, "email": self.email}


# ==============================================================================
# TOKEN SERVICE
# ==============================================================================


class TokenService:
    """Issues and verifies HS256 session tokens.

    Tokens are self-contained: verification needs only the signing secret,
    never a store lookup. There is no revocation; a token stays valid until
    ``exp``.
    """

    def __init__(self, secret: str, algorithm: str = "HS256", ttl_seconds: int = 7 * 24 * 3600):
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self.algorithm = algorithm
        self.ttl_seconds = ttl_seconds

    def __repr__(self) -> str:
        return f"TokenService(algorithm={self.algorithm!r}, ttl_seconds={self.ttl_seconds})"

    def issue(self, identity: dict, ttl_seconds: int = None, now: float = None) -> str:
        """Sign ``{id, name, email}`` with an expiry ``ttl_seconds`` from now."""
        issued_at = int(now if now is not None else time.time())
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        payload = {
            "id": str(identity["id"]),
            "name": identity["name"],
            "email": identity["email"],
            "iat": issued_at,
            "exp": issued_at + ttl,
        }
        token = jwt.encode(payload, self._secret, algorithm=self.algorithm)
        print__token_debug(f"🔑 TOKEN ISSUED: user_id={payload['id']}, exp={payload['exp']}")
        return token

    def verify(self, token: str) -> SessionClaims:
        """Check signature and expiry and return the decoded claims.

        Raises:
            TokenExpired: ``exp`` is in the past.
            TokenSignatureInvalid: any other verification failure.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "id", "email"]},
            )
        except jwt.ExpiredSignatureError as exc:
            print__token_debug("❌ TOKEN VERIFY: expired")
            raise TokenExpired("Token has expired") from exc
        except jwt.InvalidTokenError as exc:
            print__token_debug(f"❌ TOKEN VERIFY: {type(exc).__name__}")
            raise TokenSignatureInvalid("Token verification failed") from exc

        try:
            claims = SessionClaims(**payload)
        except ValueError as exc:
            print__token_debug("❌ TOKEN VERIFY: claims have an unexpected shape")
            raise TokenSignatureInvalid("Token claims are malformed") from exc

        print__token_debug(f"✅ TOKEN VERIFY: user_id={claims.id}")
        return claims
