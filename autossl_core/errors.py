from __future__ import annotations


class AutoSSLError(Exception):
    pass


class StorageError(AutoSSLError):
    """The backing store itself failed (I/O, network, timeout)."""


class DecodeError(AutoSSLError):
    """Stored bytes did not parse as the expected record shape."""


class LockError(AutoSSLError):
    pass


class LockMismatchError(LockError):
    """Another party now holds the issuance lock."""

    def __init__(self, key: str):
        super().__init__(f"lock does not match expected value: {key}")
        self.key = key


class LockNotHeldError(LockError):
    """The lock key was already gone (expired or deleted) at release time."""

    def __init__(self, key: str):
        super().__init__(f"lock already gone: {key}")
        self.key = key


class MultinameLimitError(AutoSSLError):
    pass
