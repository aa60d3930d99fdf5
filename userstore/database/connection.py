"""PostgreSQL Connection Parameters and Health Checks for the Credential Store

This module turns the configured ``DATABASE_URL`` into the connection
parameters used by the pool, and provides the health-check callback the pool
runs before lending a connection out.

Connection Parameters:
---------------------
1. application_name:
   - Format: finserv_users_{pid}_{random}
   - Lets the connections of one process be identified in pg_stat_activity

2. Timeouts and keepalives:
   - connect_timeout, tcp_user_timeout, keepalives_idle, keepalives_interval,
     keepalives_count (values from userstore.config)

3. autocommit=False:
   - Every store operation commits explicitly, so a failed insert never leaves
     a half-written row behind

4. prepare_threshold=None:
   - Disables server-side prepared statements (pooler compatible)

Health Check:
------------
check_connection_health() runs ``SELECT 1`` and returns True/False; it never
raises so it is safe as a pool ``check`` callback.
"""

import os
import uuid

from finserv.utils.debug import print__userstore_debug
from userstore.config import (
    CONNECT_TIMEOUT,
    KEEPALIVES_COUNT,
    KEEPALIVES_IDLE,
    KEEPALIVES_INTERVAL,
    TCP_USER_TIMEOUT,
)

# ==============================================================================
# MODULE FUNCTIONS
# ==============================================================================


def get_application_name() -> str:
    """Unique application name for this process's connections."""
    return f"finserv_users_{os.getpid()}_{uuid.uuid4().hex[:8]}"


def get_connection_kwargs(application_name: str = None) -> dict:
    """Connection parameters merged into the DATABASE_URL conninfo.

    Returns:
        dict: keyword arguments accepted by ``psycopg.AsyncConnection.connect``
    """
    return {
        "autocommit": False,
        "prepare_threshold": None,
        "application_name": application_name or get_application_name(),
        "connect_timeout": CONNECT_TIMEOUT,
        "keepalives_idle": KEEPALIVES_IDLE,
        "keepalives_interval": KEEPALIVES_INTERVAL,
        "keepalives_count": KEEPALIVES_COUNT,
        "tcp_user_timeout": TCP_USER_TIMEOUT,
    }


async def check_connection_health(connection) -> bool:
    """Check if a database connection is healthy and working.

    Args:
        connection: psycopg async connection object to check

    Returns:
        bool: True if ``SELECT 1`` round-trips, False on any error
    """
    try:
        async with connection.cursor() as cur:
            await cur.execute("SELECT 1")
            result = await cur.fetchone()
            return result is not None and result[0] == 1
    except Exception as exc:  # pylint: disable=broad-except
        print__userstore_debug(f"Connection health check failed: {exc}")
        return False

