"""PostgreSQL Connection Pool Lifecycle for the Credential Store

Creates, opens and closes the ``psycopg_pool.AsyncConnectionPool`` used by
``PostgresCredentialStore``. The pool is created with ``open=False`` and opened
explicitly so that construction never touches the network; opening waits for
``min_size`` connections so a bad ``DATABASE_URL`` fails at startup rather
than on the first request.

Pool Configuration:
- min_size / max_size: USERSTORE_POOL_MIN_SIZE / USERSTORE_POOL_MAX_SIZE
- timeout: DEFAULT_POOL_TIMEOUT seconds to check out a connection
- max_idle / max_lifetime: connection recycling
- check: check_connection_health runs before a connection is lent out
"""

from psycopg_pool import AsyncConnectionPool

from finserv.utils.debug import print__userstore_debug
from userstore.config import (
    DEFAULT_MAX_IDLE,
    DEFAULT_MAX_LIFETIME,
    DEFAULT_POOL_MAX_SIZE,
    DEFAULT_POOL_MIN_SIZE,
    DEFAULT_POOL_TIMEOUT,
)
from userstore.database.connection import (
    check_connection_health,
    get_connection_kwargs,
)


def create_pool(database_url: str) -> AsyncConnectionPool:
    """Build a closed pool for ``database_url``."""
    print__userstore_debug(
        f"POOL CREATE: min_size={DEFAULT_POOL_MIN_SIZE}, max_size={DEFAULT_POOL_MAX_SIZE}"
    )
    return AsyncConnectionPool(
        conninfo=database_url,
        min_size=DEFAULT_POOL_MIN_SIZE,
        max_size=DEFAULT_POOL_MAX_SIZE,
        timeout=DEFAULT_POOL_TIMEOUT,
        max_idle=DEFAULT_MAX_IDLE,
        max_lifetime=DEFAULT_MAX_LIFETIME,
        kwargs=get_connection_kwargs(),
        check=check_connection_health,
        open=False,
    )


async def open_pool(pool: AsyncConnectionPool) -> None:
    print__userstore_debug("POOL OPEN: Opening connection pool")
    await pool.open(wait=True, timeout=DEFAULT_POOL_TIMEOUT)
    print__userstore_debug("POOL OPEN: Pool ready")


async def close_pool(pool: AsyncConnectionPool) -> None:
    """Close ``pool`` if it is open. Errors are logged, not raised."""
    if pool is None or pool.closed:
        return
    try:
        print__userstore_debug("POOL CLOSE: Closing connection pool")
        await pool.close()
    except Exception as exc:  # pylint: disable=broad-except
        print__userstore_debug(f"POOL CLOSE ERROR: {type(exc).__name__}: {exc}")

