"""Persisted user record."""

import uuid
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


def normalize_email(email: str) -> str:
    """Canonical form used as the uniqueness key: trimmed and lower-cased."""
    return (email or "").strip().lower()


def new_user_id() -> str:
    return str(uuid.uuid4())


class UserRecord(BaseModel):
    """A single row of the credential store.

    ``password_hash`` is write-once: it is produced at registration and never
    recomputed. It must not appear in any response or log line; use
    :meth:`public` or :meth:`profile` for outward-facing projections.
    """

    id: str = Field(default_factory=new_user_id)
    name: str
    email: str
    password_hash: str = Field(repr=False)
    created_at: Optional[datetime] = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    model_config = {"frozen": True}

    def public(self) -> dict:
        """Projection returned by register/login: ``{id, name, email}``."""
        return {"id": self.id, "name": self.name, "email": self.email}

    def profile(self) -> dict:
        """Projection returned by the current-user lookup: ``{name, email}``."""
        return {"name": self.name, "email": self.email}
