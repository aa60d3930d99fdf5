"""Salted password hashing with bcrypt.

bcrypt embeds a random per-hash salt and the cost factor in its output, so the
stored string is self-describing. Both hashing and checking are CPU-bound and
run in a worker thread to keep the event loop responsive.
"""

import asyncio
from functools import lru_cache

import bcrypt

from userstore.config import BCRYPT_ROUNDS

# bcrypt only looks at the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72


def _encode(password: str) -> bytes:
    raw = password.encode("utf-8")
    if len(raw) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
    return raw


def hash_password_sync(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    return bcrypt.hashpw(_encode(password), bcrypt.gensalt(rounds)).decode("ascii")


def check_password_sync(password: str, password_hash: str) -> bool:
    """Constant-time comparison of ``password`` against a stored hash."""
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode("ascii"))
    except ValueError:
        # Over-long password or a corrupt stored hash: never a match.
        return False


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    return hash_password_sync("finserv-timing-equalizer")


async def hash_password(password: str) -> str:
    return await asyncio.to_thread(hash_password_sync, password)


async def check_password(password: str, password_hash: str) -> bool:
    return await asyncio.to_thread(check_password_sync, password, password_hash)


async def burn_password_check(password: str) -> None:
    """Spend the same time as a real check when there is no account to check.

    Used on the unknown-email login path so that response timing does not
    reveal whether an email is registered.
    """
    await asyncio.to_thread(check_password_sync, password, _dummy_hash())
