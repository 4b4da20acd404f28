import threading, time
from typing import Callable, Dict, List, Optional, Tuple

from autossl_core.storage.provider import AtomicStorageProvider


class InMemoryStorage(AtomicStorageProvider):
    """
    Process-local store. Useful for tests and single-node setups; each
    entry carries an optional absolute expiry checked on access.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.data: Dict[str, Tuple[str, Optional[float]]] = {}
        self._clock = clock
        self._mutex = threading.Lock()

    def _live(self, key: str) -> Optional[str]:
        entry = self.data.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and expires_at <= self._clock():
            del self.data[key]
            return None
        return value

    def _expires_at(self, ttl: Optional[float]) -> Optional[float]:
        return None if ttl is None else self._clock() + ttl

    def get(self, key: str) -> Optional[str]:
        with self._mutex:
            return self._live(key)

    def set(self, key: str, value: str, ttl: Optional[float] = None) -> bool:
        with self._mutex:
            self.data[key] = (value, self._expires_at(ttl))
        return True

    def delete(self, key: str) -> bool:
        with self._mutex:
            self.data.pop(key, None)
        return True

    def keys_with_suffix(self, suffix: str) -> List[str]:
        with self._mutex:
            return [k for k in list(self.data) if k.endswith(suffix) and self._live(k) is not None]

    # atomic ops
    def add(self, key: str, value: str, ttl: Optional[float] = None) -> bool:
        with self._mutex:
            if self._live(key) is not None:
                return False
            self.data[key] = (value, self._expires_at(ttl))
            return True

    def delete_if_equals(self, key: str, value: str) -> bool:
        with self._mutex:
            if self._live(key) != value:
                return False
            del self.data[key]
            return True
