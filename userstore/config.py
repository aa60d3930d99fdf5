"""Credential Store Configuration

Central place for the persistence-layer settings of the user credential store:
which backend to use, how to reach PostgreSQL, and how the connection pool and
retry logic behave.

Configuration Constants:
-----------------------
Retry Settings:
- DEFAULT_MAX_RETRIES: 2 - Retry attempts for transient connection errors

Connection Timeouts:
- CONNECT_TIMEOUT: 10 seconds - Initial connection establishment
- TCP_USER_TIMEOUT: 30000 ms - TCP-level timeout

Connection Keepalive:
- KEEPALIVES_IDLE / KEEPALIVES_INTERVAL / KEEPALIVES_COUNT

Connection Pool:
- DEFAULT_POOL_MIN_SIZE: 1
- DEFAULT_POOL_MAX_SIZE: 10
- DEFAULT_POOL_TIMEOUT: 30 seconds to acquire a connection
- DEFAULT_MAX_IDLE: 300 seconds
- DEFAULT_MAX_LIFETIME: 3600 seconds

Users Table:
- USERS_TABLE: finserv_users
- BCRYPT_ROUNDS: 10 (cost factor for password hashing)

Environment Variables:
---------------------
- USERSTORE_BACKEND: "postgres" (default) or "memory"
- DATABASE_URL: PostgreSQL connection string, required for "postgres"
- USERSTORE_POOL_MIN_SIZE / USERSTORE_POOL_MAX_SIZE: pool size overrides
"""

import os

# ==============================================================================
# RETRY CONFIGURATION CONSTANTS
# ==============================================================================

DEFAULT_MAX_RETRIES = 2  # Retry attempts for transient connection errors

# ==============================================================================
# CONNECTION TIMEOUT CONFIGURATION
# ==============================================================================

CONNECT_TIMEOUT = 10  # Seconds to establish a connection
TCP_USER_TIMEOUT = 30000  # Milliseconds

KEEPALIVES_IDLE = 300  # Seconds before first keepalive probe
KEEPALIVES_INTERVAL = 30  # Seconds between keepalive probes
KEEPALIVES_COUNT = 3  # Failed probes before the connection is dead

# ==============================================================================
# CONNECTION POOL CONFIGURATION
# ==============================================================================

DEFAULT_POOL_MIN_SIZE = int(os.environ.get("USERSTORE_POOL_MIN_SIZE", "1"))
DEFAULT_POOL_MAX_SIZE = int(os.environ.get("USERSTORE_POOL_MAX_SIZE", "10"))
DEFAULT_POOL_TIMEOUT = 30  # Seconds to wait for a pooled connection
DEFAULT_MAX_IDLE = 300  # Idle connection timeout
DEFAULT_MAX_LIFETIME = 3600  # Connection lifetime before renewal

# ==============================================================================
# USERS TABLE AND HASHING
# ==============================================================================

USERS_TABLE = "finserv_users"
BCRYPT_ROUNDS = 10

SUPPORTED_BACKENDS = ("postgres", "memory")

