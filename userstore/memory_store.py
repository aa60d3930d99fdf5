"""In-process credential store.

Keeps users in two dictionaries (by email and by id) guarded by a single
``asyncio.Lock``. Only selected explicitly with ``USERSTORE_BACKEND=memory``;
data does not survive a restart and is not shared between worker processes.
"""

import asyncio
from typing import Dict, Optional

from finserv.utils.debug import print__userstore_debug
from userstore.base import CredentialStore
from userstore.models import UserRecord, normalize_email


class InMemoryCredentialStore(CredentialStore):
    backend_name = "memory"

    def __init__(self):
        self._by_email: Dict[str, UserRecord] = {}
        self._by_id: Dict[str, UserRecord] = {}
        self._lock = asyncio.Lock()

    async def ping(self) -> bool:
        return True

    async def insert_if_absent(self, record: UserRecord) -> bool:
        # Check and insert under one lock acquisition so concurrent
        # registrations of the same email cannot both succeed.
        async with self._lock:
            if record.email in self._by_email:
                print__userstore_debug("MEMORY INSERT: email already present")
                return False
            self._by_email[record.email] = record
            self._by_id[record.id] = record
            print__userstore_debug(f"MEMORY INSERT: stored user {record.id}")
            return True

    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        return self._by_email.get(normalize_email(email))

    async def find_by_id(self, user_id: str) -> Optional[UserRecord]:
        return self._by_id.get(user_id)

    def __len__(self) -> int:
        return len(self._by_email)
