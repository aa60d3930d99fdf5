"""PostgreSQL credential store.

One row per user in ``finserv_users``. Registration is a single
``INSERT ... ON CONFLICT (email) DO NOTHING RETURNING id`` so that two
concurrent registrations for the same email resolve inside the database: one
gets the row back, the other gets nothing and is reported as a duplicate.
When the insert finds the email taken, the row is looked up by the record's
own id: a retry after a dropped connection can find its own earlier commit,
and that still counts as inserted.

Connection failures are retried by ``retry_on_connection_error``; once
retries are exhausted, any ``psycopg.Error`` surfaces as
``StoreUnavailableError``.
"""

import functools
from typing import Optional

import psycopg
from psycopg.rows import dict_row

from finserv.utils.debug import print__userstore_debug
from userstore.base import CredentialStore
from userstore.config import USERS_TABLE
from userstore.database.connection import check_connection_health
from userstore.database.pool_manager import close_pool, create_pool, open_pool
from userstore.database.table_setup import setup_users_table
from userstore.error_handling.retry_decorators import retry_on_connection_error
from userstore.errors import StoreUnavailableError
from userstore.models import UserRecord, normalize_email

_SELECT_COLUMNS = "id, name, email, password_hash, created_at"


def _store_errors(func):
    """Translate driver errors into StoreUnavailableError."""

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except psycopg.Error as exc:
            print__userstore_debug(
                f"POSTGRES STORE ERROR in {func.__name__}: {type(exc).__name__}: {exc}"
            )
            raise StoreUnavailableError(str(exc)) from exc

    return wrapper


class PostgresCredentialStore(CredentialStore):
    backend_name = "postgres"

    def __init__(self, database_url: str, pool=None):
        self.database_url = database_url
        self.pool = pool

    async def init(self) -> None:
        if self.pool is None:
            self.pool = create_pool(self.database_url)
        if self.pool.closed:
            await open_pool(self.pool)
        await setup_users_table(self.pool)

    async def shutdown(self) -> None:
        await close_pool(self.pool)

    async def ping(self) -> bool:
        if self.pool is None or self.pool.closed:
            return False
        try:
            async with self.pool.connection() as conn:
                return await check_connection_health(conn)
        except Exception as exc:  # pylint: disable=broad-except
            print__userstore_debug(f"POSTGRES PING FAILED: {exc}")
            return False

    @_store_errors
    @retry_on_connection_error()
    async def insert_if_absent(self, record: UserRecord) -> bool:
        async with self.pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(
                    f"""
                    INSERT INTO {USERS_TABLE} (id, name, email, password_hash, created_at)
                    VALUES (%s, %s, %s, %s, %s)
                    ON CONFLICT (email) DO NOTHING
                    RETURNING id
                    """,
                    (
                        record.id,
                        record.name,
                        record.email,
                        record.password_hash,
                        record.created_at,
                    ),
                )
                row = await cur.fetchone()
                if row is None:
                    # A retry may conflict with its own earlier commit.
                    await cur.execute(
                        f"SELECT id FROM {USERS_TABLE} WHERE id = %s", (record.id,)
                    )
                    row = await cur.fetchone()
            await conn.commit()

        inserted = row is not None
        print__userstore_debug(
            f"POSTGRES INSERT: {'stored user ' + record.id if inserted else 'email already present'}"
        )
        return inserted

    @_store_errors
    @retry_on_connection_error()
    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        return await self._fetch_one(
            f"SELECT {_SELECT_COLUMNS} FROM {USERS_TABLE} WHERE email = %s",
            (normalize_email(email),),
        )

    @_store_errors
    @retry_on_connection_error()
    async def find_by_id(self, user_id: str) -> Optional[UserRecord]:
        return await self._fetch_one(
            f"SELECT {_SELECT_COLUMNS} FROM {USERS_TABLE} WHERE id = %s",
            (user_id,),
        )

    async def _fetch_one(self, query: str, params: tuple) -> Optional[UserRecord]:
        async with self.pool.connection() as conn:
            async with conn.cursor(row_factory=dict_row) as cur:
                await cur.execute(query, params)
                row = await cur.fetchone()
        return UserRecord(**row) if row else None
