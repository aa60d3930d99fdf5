"""Abstract credential store interface shared by all backends."""

from abc import ABC, abstractmethod
from typing import Optional

from userstore.errors import DuplicateEmailError
from userstore.hashing import hash_password
from userstore.models import UserRecord, normalize_email


class CredentialStore(ABC):
    """Durable mapping from email to :class:`UserRecord`.

    Backends implement the storage primitives; password hashing and email
    normalisation happen here so every backend treats them identically.
    """

    backend_name = "abstract"

    async def init(self) -> None:
        """Open connections and prepare schema. Idempotent."""

    async def shutdown(self) -> None:
        """Release connections. Idempotent."""

    @abstractmethod
    async def ping(self) -> bool:
        """Return True if the store can serve requests right now."""

    @abstractmethod
    async def insert_if_absent(self, record: UserRecord) -> bool:
        """Insert ``record`` unless its email exists, as one atomic step.

        Returns True when the record was inserted and False when another
        record already holds the email.
        """

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        ...

    @abstractmethod
    async def find_by_id(self, user_id: str) -> Optional[UserRecord]:
        ...

    async def create(self, name: str, email: str, password: str) -> UserRecord:
        """Hash ``password`` and persist a new user.

        Raises:
            DuplicateEmailError: a user with this email already exists.
            StoreUnavailableError: the backend failed.
        """
        record = UserRecord(
            name=name.strip(),
            email=normalize_email(email),
            password_hash=await hash_password(password),
        )
        if not await self.insert_if_absent(record):
            raise DuplicateEmailError(record.email)
        return record
