"""Errors raised by credential store backends."""


class UserStoreError(Exception):
    """Base class for credential store failures."""


class DuplicateEmailError(UserStoreError):
    """A record with this email already exists."""

    def __init__(self, email: str):
        super().__init__("A user with this email already exists")
        self.email = email


class StoreUnavailableError(UserStoreError):
    """The backing database could not be reached or failed mid-operation."""
