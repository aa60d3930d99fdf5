"""
PostgresCredentialStore registration under a dropped connection.

Runs against an in-process stand-in for the pool, so no database is needed.
The stand-in applies each INSERT immediately, which is what the server has
done by the time a commit acknowledgement is lost.
"""

import sys

# Windows event loop fix for PostgreSQL compatibility
if sys.platform == "win32":
    import asyncio

    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

from contextlib import asynccontextmanager
from types import SimpleNamespace

import psycopg
import pytest

from userstore import DuplicateEmailError, PostgresCredentialStore
from userstore.error_handling import retry_decorators


class FakeUsersTable:
    def __init__(self):
        self.ids_by_email = {}
        self.drop_connection_after_commit = False


class FakeCursor:
    def __init__(self, table: FakeUsersTable):
        self.table = table
        self._row = None

    async def execute(self, query: str, params: tuple):
        if query.lstrip().startswith("INSERT"):
            user_id, email = params[0], params[2]
            if email in self.table.ids_by_email:
                self._row = None
            else:
                self.table.ids_by_email[email] = user_id
                self._row = (user_id,)
        else:
            user_id = params[0]
            self._row = (user_id,) if user_id in self.table.ids_by_email.values() else None

    async def fetchone(self):
        return self._row


class FakeConnection:
    def __init__(self, table: FakeUsersTable):
        self.table = table

    @asynccontextmanager
    async def cursor(self, row_factory=None):
        yield FakeCursor(self.table)

    async def commit(self):
        if self.table.drop_connection_after_commit:
            self.table.drop_connection_after_commit = False
            raise psycopg.OperationalError("server closed the connection unexpectedly")


class FakePool:
    closed = False

    def __init__(self, table: FakeUsersTable):
        self.table = table

    @asynccontextmanager
    async def connection(self):
        yield FakeConnection(self.table)


@pytest.fixture
def table(monkeypatch):
    async def no_sleep(delay):
        return None

    monkeypatch.setattr(retry_decorators, "asyncio", SimpleNamespace(sleep=no_sleep))
    return FakeUsersTable()


@pytest.mark.asyncio
async def test_lost_commit_acknowledgement_is_still_a_registration(table):
    store = PostgresCredentialStore("postgresql://unused", pool=FakePool(table))
    table.drop_connection_after_commit = True

    user = await store.create("Ada", "ada@example.com", "analytical-engine")

    assert table.ids_by_email == {"ada@example.com": user.id}


@pytest.mark.asyncio
async def test_someone_elses_email_is_still_a_duplicate(table):
    store = PostgresCredentialStore("postgresql://unused", pool=FakePool(table))
    await store.create("Ada", "ada@example.com", "pw")

    table.drop_connection_after_commit = True
    with pytest.raises(DuplicateEmailError):
        await store.create("Imposter", "ADA@example.com", "pw")
