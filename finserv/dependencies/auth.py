# CRITICAL: Set Windows event loop policy FIRST, before other imports
import sys

if sys.platform == "win32":
    import asyncio

    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

from dotenv import load_dotenv

load_dotenv()

from typing import Optional

from fastapi import Depends, Header, Request

from finserv.auth.jwt_auth import SessionClaims, TokenError, TokenService
from finserv.exceptions.errors import InvalidToken, MissingToken
from finserv.utils.debug import print__token_debug

BEARER_PREFIX = "Bearer "


def get_services(request: Request):
    """Return the AppServices container attached to the running app."""
    return request.app.state.services


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from ``Bearer <token>``, or None if there is none.

    A header with any other scheme counts as no token at all.
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


def authenticate(token_service: TokenService, authorization: Optional[str]) -> SessionClaims:
    """Session guard: header -> verified claims.

    Raises:
        MissingToken: no bearer token in the header.
        InvalidToken: the token failed verification (malformed, tampered,
            expired alike).
    """
    print__token_debug("🔑 AUTHENTICATION START: checking Authorization header")

    token = extract_bearer_token(authorization)
    if token is None:
        print__token_debug("❌ AUTH ERROR: no bearer token provided")
        raise MissingToken()

    print__token_debug(f"🔍 AUTH TOKEN: token extracted (length: {len(token)})")
    try:
        claims = token_service.verify(token)
    except TokenError as exc:
        print__token_debug(f"❌ AUTH ERROR: {type(exc).__name__}")
        raise InvalidToken(detail=type(exc).__name__) from exc

    print__token_debug(f"✅ AUTH SUCCESS: user_id={claims.id}")
    return claims


def get_current_user(
    request: Request,
    authorization: str = Header(None),
    services=Depends(get_services),
) -> SessionClaims:
    """FastAPI dependency guarding protected routes.

    On success the user id is attached to ``request.state.user_id``.

    Example:
        @router.get("/api/auth/me")
        async def me(claims: SessionClaims = Depends(get_current_user)):
            ...
    """
    claims = authenticate(services.token_service, authorization)
    request.state.user_id = claims.id
    return claims


def get_chat_session(
    request: Request,
    authorization: str = Header(None),
    services=Depends(get_services),
) -> Optional[SessionClaims]:
    """Guard for the chat relay; only enforced when CHAT_REQUIRE_AUTH=1."""
    if not services.settings.chat_require_auth:
        return None
    return get_current_user(request, authorization, services)


def peek_identity(token_service: TokenService, authorization: Optional[str]) -> Optional[str]:
    """User id from a valid bearer token, or None. Never raises.

    Used for throttling keys, where an invalid token simply means "no
    identity" and the request still reaches the route's own guard.
    """
    token = extract_bearer_token(authorization)
    if token is None:
        return None
    try:
        return token_service.verify(token).id
    except TokenError:
        return None
