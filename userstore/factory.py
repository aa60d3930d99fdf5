"""Credential store construction from settings."""

from finserv.utils.debug import print__userstore_debug
from userstore.base import CredentialStore
from userstore.memory_store import InMemoryCredentialStore
from userstore.postgres_store import PostgresCredentialStore


def create_credential_store(settings) -> CredentialStore:
    """Return an un-initialised store for ``settings.userstore_backend``.

    Callers must ``await store.init()`` before use.
    """
    backend = settings.userstore_backend
    print__userstore_debug(f"USERSTORE FACTORY: backend={backend}")
    if backend == "memory":
        return InMemoryCredentialStore()
    if backend == "postgres":
        return PostgresCredentialStore(settings.database_url)
    raise ValueError(f"Unsupported USERSTORE_BACKEND: {backend!r}")
