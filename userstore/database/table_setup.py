"""Schema setup for the users table.

Idempotent: safe to run on every startup. The unique constraint on ``email``
is what makes registration atomic; ``PostgresCredentialStore`` relies on it
through ``INSERT ... ON CONFLICT (email) DO NOTHING``.

Table Schema:
    CREATE TABLE finserv_users (
        id            TEXT PRIMARY KEY,          -- uuid4 string
        name          TEXT NOT NULL,
        email         TEXT NOT NULL UNIQUE,      -- normalised (trimmed, lower-case)
        password_hash TEXT NOT NULL,             -- bcrypt, salt embedded
        created_at    TIMESTAMPTZ NOT NULL DEFAULT NOW()
    );
"""

from finserv.utils.debug import print__userstore_debug
from userstore.config import USERS_TABLE


async def setup_users_table(pool) -> None:
    """Create the users table if it does not exist yet."""
    print__userstore_debug(f"TABLE SETUP: Ensuring {USERS_TABLE} exists")
    async with pool.connection() as conn:
        await conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {USERS_TABLE} (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                email TEXT NOT NULL UNIQUE,
                password_hash TEXT NOT NULL,
                created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
            );
            """
        )
        await conn.commit()
    print__userstore_debug(f"TABLE SETUP: {USERS_TABLE} ready")

