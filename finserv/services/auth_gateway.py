"""Registration, login and current-user lookup.

The gateway is the only place where store and token errors are translated
into the client-facing taxonomy:

    DuplicateEmailError       -> EmailInUse           (400)
    unknown email / bad pass  -> InvalidCredentials   (400, identical for both)
    StoreUnavailableError     -> ServerError          (500, no detail)
    user id no longer exists  -> InvalidToken         (401)
"""

from typing import Optional

from finserv.auth.jwt_auth import SessionClaims, TokenService
from finserv.exceptions.errors import (
    EmailInUse,
    InvalidCredentials,
    InvalidToken,
    ServerError,
    ValidationError,
)
from finserv.utils.debug import log_comprehensive_error, print__auth_debug
from userstore.base import CredentialStore
from userstore.errors import DuplicateEmailError, StoreUnavailableError
from userstore.hashing import (
    MAX_PASSWORD_BYTES,
    burn_password_check,
    check_password,
)
from userstore.models import UserRecord, normalize_email


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class AuthGateway:
    def __init__(self, store: CredentialStore, token_service: TokenService):
        self.store = store
        self.token_service = token_service

    def _session(self, user: UserRecord) -> dict:
        identity = user.public()
        return {"token": self.token_service.issue(identity), "user": identity}

    async def register(self, name: Optional[str], email: Optional[str], password: Optional[str]) -> dict:
        """Create an account and open a session for it.

        Returns:
            dict: ``{"token": ..., "user": {"id", "name", "email"}}``

        Raises:
            ValidationError: a field is missing or blank, or the password is
                longer than bcrypt accepts.
            EmailInUse: the email is already registered.
            ServerError: the store failed.
        """
        if _blank(name) or _blank(email) or not password:
            print__auth_debug("REGISTER REJECTED: missing field")
            raise ValidationError()
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(
                f"Password must be at most {MAX_PASSWORD_BYTES} bytes"
            )

        try:
            user = await self.store.create(name, email, password)
        except DuplicateEmailError as exc:
            print__auth_debug("REGISTER REJECTED: email already in use")
            raise EmailInUse() from exc
        except StoreUnavailableError as exc:
            log_comprehensive_error("register_store_failure", exc)
            raise ServerError(detail=str(exc)) from exc

        print__auth_debug(f"REGISTER OK: user_id={user.id}")
        return self._session(user)

    async def login(self, email: Optional[str], password: Optional[str]) -> dict:
        """Check credentials and open a session.

        An unknown email and a wrong password raise the same
        ``InvalidCredentials``, and both pay for one bcrypt comparison.
        """
        email = normalize_email(email)
        password = password or ""

        try:
            user = await self.store.find_by_email(email) if email else None
        except StoreUnavailableError as exc:
            log_comprehensive_error("login_store_failure", exc)
            raise ServerError(detail=str(exc)) from exc

        if user is None:
            await burn_password_check(password)
            print__auth_debug("LOGIN REJECTED: invalid credentials")
            raise InvalidCredentials()

        if not await check_password(password, user.password_hash):
            print__auth_debug("LOGIN REJECTED: invalid credentials")
            raise InvalidCredentials()

        print__auth_debug(f"LOGIN OK: user_id={user.id}")
        return self._session(user)

    async def me(self, claims: SessionClaims) -> dict:
        """Profile of the session's user: ``{"user": {"name", "email"}}``."""
        try:
            user = await self.store.find_by_id(claims.id)
        except StoreUnavailableError as exc:
            log_comprehensive_error("me_store_failure", exc)
            raise ServerError(detail=str(exc)) from exc

        if user is None:
            # Valid signature, but the account it names is gone.
            print__auth_debug(f"ME REJECTED: user {claims.id} not found")
            raise InvalidToken(detail="user not found")

        return {"user": user.profile()}
