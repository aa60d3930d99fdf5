"""
Test for Phase 5: Authentication (token service and session guard)
"""

import sys

# CRITICAL: Set Windows event loop policy FIRST, before other imports
if sys.platform == "win32":
    import asyncio

    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

import time

import jwt
import pytest

from finserv.auth.jwt_auth import (
    TokenExpired,
    TokenService,
    TokenSignatureInvalid,
)
from finserv.dependencies.auth import (
    authenticate,
    extract_bearer_token,
    peek_identity,
)
from finserv.exceptions.errors import InvalidToken, MissingToken
from tests.helpers import TEST_JWT_SECRET, create_test_jwt_token

IDENTITY = {"id": "u-1", "name": "Ada", "email": "ada@example.com"}


@pytest.fixture
def token_service():
    return TokenService(TEST_JWT_SECRET)


# ==============================================================================
# TOKEN SERVICE
# ==============================================================================


def test_issue_then_verify_yields_exact_identity(token_service):
    claims = token_service.verify(token_service.issue(IDENTITY))
    assert claims.identity() == IDENTITY


def test_default_expiry_is_seven_days(token_service):
    now = time.time()
    token = token_service.issue(IDENTITY, now=now)
    payload = jwt.decode(token, TEST_JWT_SECRET, algorithms=["HS256"])
    assert payload["exp"] - payload["iat"] == 7 * 24 * 3600
    assert payload["iat"] == int(now)


def test_token_never_carries_password_material(token_service):
    payload = jwt.decode(token_service.issue(IDENTITY), TEST_JWT_SECRET, algorithms=["HS256"])
    assert set(payload) == {"id", "name", "email", "iat", "exp"}


def test_expired_token(token_service):
    token = token_service.issue(IDENTITY, now=time.time() - 8 * 24 * 3600)
    with pytest.raises(TokenExpired):
        token_service.verify(token)


def test_tampered_token(token_service):
    token = token_service.issue(IDENTITY)
    forged = create_test_jwt_token(user_id="u-2", secret="attacker")
    # genuine signature, someone else's claims
    header, payload, _ = forged.split(".")
    tampered = ".".join([header, payload, token.split(".")[2]])
    with pytest.raises(TokenSignatureInvalid):
        token_service.verify(tampered)


def test_token_signed_with_other_secret(token_service):
    token = create_test_jwt_token(secret="someone-elses-secret")
    with pytest.raises(TokenSignatureInvalid):
        token_service.verify(token)


def test_unsigned_token_is_rejected(token_service):
    token = jwt.encode(
        {**IDENTITY, "exp": int(time.time()) + 60}, key="", algorithm="none"
    )
    with pytest.raises(TokenSignatureInvalid):
        token_service.verify(token)


def test_garbage_is_rejected(token_service):
    with pytest.raises(TokenSignatureInvalid):
        token_service.verify("not-a-jwt")


def test_token_without_expiry_is_rejected(token_service):
    token = jwt.encode(IDENTITY, TEST_JWT_SECRET, algorithm="HS256")
    with pytest.raises(TokenSignatureInvalid):
        token_service.verify(token)


def test_token_missing_name_is_rejected(token_service):
    token = jwt.encode(
        {"id": "u-1", "email": "a@b.c", "exp": int(time.time()) + 60},
        TEST_JWT_SECRET,
        algorithm="HS256",
    )
    with pytest.raises(TokenSignatureInvalid):
        token_service.verify(token)


def test_empty_secret_is_refused():
    with pytest.raises(ValueError):
        TokenService("")


def test_secret_not_in_repr(token_service):
    assert TEST_JWT_SECRET not in repr(token_service)


# ==============================================================================
# SESSION GUARD
# ==============================================================================


@pytest.mark.parametrize(
    "header",
    [None, "", "Bearer", "Bearer ", "Bearer    ", "Basic dXNlcjpwYXNz", "bearer abc"],
)
def test_no_bearer_token_means_missing_token(token_service, header):
    with pytest.raises(MissingToken):
        authenticate(token_service, header)


def test_bad_token_means_invalid_token(token_service):
    with pytest.raises(InvalidToken):
        authenticate(token_service, "Bearer not-a-jwt")


def test_expired_token_means_invalid_token(token_service):
    token = create_test_jwt_token(exp_seconds=-10)
    with pytest.raises(InvalidToken):
        authenticate(token_service, f"Bearer {token}")


def test_rejection_is_stable_across_retries(token_service):
    header = f"Bearer {create_test_jwt_token(secret='wrong')}"
    for _ in range(3):
        with pytest.raises(InvalidToken):
            authenticate(token_service, header)


def test_valid_token_yields_claims(token_service):
    header = f"Bearer {token_service.issue(IDENTITY)}"
    assert authenticate(token_service, header).id == "u-1"


def test_extract_bearer_token():
    assert extract_bearer_token("Bearer abc.def.ghi") == "abc.def.ghi"
    assert extract_bearer_token("Bearer  abc ") == "abc"
    assert extract_bearer_token("Token abc") is None


def test_peek_identity_never_raises(token_service):
    assert peek_identity(token_service, None) is None
    assert peek_identity(token_service, "Bearer junk") is None
    assert peek_identity(token_service, f"Bearer {token_service.issue(IDENTITY)}") == "u-1"
