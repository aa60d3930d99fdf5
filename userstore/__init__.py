"""Credential store for the finserv backend.

Persists registered users (id, name, normalised email, bcrypt password hash)
and answers lookups by email and by id.

This package is organized into the following modules:
- config: Configuration constants and environment handling
- models: The UserRecord type and email normalisation
- hashing: bcrypt hashing run off the event loop
- base: The CredentialStore interface
- memory_store / postgres_store: Backends
- database: Connection parameters, pool lifecycle, table setup
- error_handling: Retry logic for transient connection failures
- factory: Backend selection from settings
"""

from userstore.base import CredentialStore
from userstore.errors import (
    DuplicateEmailError,
    StoreUnavailableError,
    UserStoreError,
)
from userstore.factory import create_credential_store
from userstore.memory_store import InMemoryCredentialStore
from userstore.models import UserRecord, normalize_email
from userstore.postgres_store import PostgresCredentialStore

__all__ = [
    "CredentialStore",
    "DuplicateEmailError",
    "InMemoryCredentialStore",
    "PostgresCredentialStore",
    "StoreUnavailableError",
    "UserRecord",
    "UserStoreError",
    "create_credential_store",
    "normalize_email",
]
