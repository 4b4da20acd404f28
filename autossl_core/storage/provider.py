# autossl_core/storage/provider.py
"""
Storage capability contract.

Any backend (memory, SQLite file, a networked store) only has to offer
single-key get / set-with-ttl / delete and suffix enumeration. No
transactions, compare-and-swap or multi-key atomicity are assumed.

Contract:
    get(key)              -> value text, or None when absent
    set(key, value, ttl)  -> True on success
    delete(key)           -> True on success (absent key is not an error)
    keys_with_suffix(sfx) -> list of live keys ending with sfx

Backend failures raise ``StorageError``; absence is never an exception.
"""

from __future__ import annotations
from typing import List, Optional


class StorageProvider:
    # Interface
    def get(self, key: str) -> Optional[str]: ...
    def set(self, key: str, value: str, ttl: Optional[float] = None) -> bool: ...
    def delete(self, key: str) -> bool: ...
    def keys_with_suffix(self, suffix: str) -> List[str]: ...


class AtomicStorageProvider(StorageProvider):
    """
    Optional stronger capability. Backends that can perform these two
    operations atomically let the issuance lock close its check-then-act
    windows without changing its public contract.
    """
    def add(self, key: str, value: str, ttl: Optional[float] = None) -> bool: ...
    def delete_if_equals(self, key: str, value: str) -> bool: ...


def supports_atomic(adapter: StorageProvider) -> bool:
    return isinstance(adapter, AtomicStorageProvider) or (
        callable(getattr(adapter, "add", None))
        and callable(getattr(adapter, "delete_if_equals", None))
    )
