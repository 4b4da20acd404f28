from __future__ import annotations
from typing import Callable, List, Optional
import os, sqlite3, threading, time
from autossl_core.errors import StorageError
from autossl_core.storage.provider import AtomicStorageProvider


class SQLiteStorage(AtomicStorageProvider):
    """
    File-backed store shared by every process on a host that opens the same
    database path. Expired rows are hidden on read and purged lazily.
    """

    def __init__(self, path="db/autossl.db", clock: Callable[[], float] = time.time):
        # If no directory, default to current working directory
        dir_path = os.path.dirname(path) or "."
        os.makedirs(dir_path, exist_ok=True)
        self.db = sqlite3.connect(path, check_same_thread=False)
        self._clock = clock
        self._mutex = threading.Lock()

        self._init()

    def _init(self) -> None:
        with self._mutex, self.db:
            self.db.execute("""CREATE TABLE IF NOT EXISTS kv(
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                expires_at REAL
            )""")

    def _run(self, fn):
        try:
            with self._mutex, self.db:
                return fn(self._clock())
        except sqlite3.Error as e:
            raise StorageError(f"sqlite: {e}") from e

    def _expires_at(self, now: float, ttl: Optional[float]) -> Optional[float]:
        return None if ttl is None else now + ttl

    def _purge(self, key: str, now: float) -> None:
        self.db.execute("DELETE FROM kv WHERE key=? AND expires_at IS NOT NULL AND expires_at<=?", (key, now))

    def get(self, key: str) -> Optional[str]:
        def op(now):
            self._purge(key, now)
            row = self.db.execute("SELECT value FROM kv WHERE key=?", (key,)).fetchone()
            return row[0] if row else None
        return self._run(op)

    def set(self, key: str, value: str, ttl: Optional[float] = None) -> bool:
        def op(now):
            self.db.execute(
                "INSERT INTO kv(key,value,expires_at) VALUES(?,?,?) "
                "ON CONFLICT(key) DO UPDATE SET value=excluded.value, expires_at=excluded.expires_at",
                (key, value, self._expires_at(now, ttl)),
            )
            return True
        return self._run(op)

    def delete(self, key: str) -> bool:
        def op(now):
            self.db.execute("DELETE FROM kv WHERE key=?", (key,))
            return True
        return self._run(op)

    def keys_with_suffix(self, suffix: str) -> List[str]:
        escaped = suffix.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")

        def op(now):
            cur = self.db.execute(
                "SELECT key FROM kv WHERE key LIKE ? ESCAPE '\\' "
                "AND (expires_at IS NULL OR expires_at>?)",
                ("%" + escaped, now),
            )
            # LIKE is case-insensitive for ASCII
            return [r[0] for r in cur.fetchall() if r[0].endswith(suffix)]
        return self._run(op)

    # atomic ops
    def add(self, key: str, value: str, ttl: Optional[float] = None) -> bool:
        def op(now):
            self._purge(key, now)
            cur = self.db.execute(
                "INSERT OR IGNORE INTO kv(key,value,expires_at) VALUES(?,?,?)",
                (key, value, self._expires_at(now, ttl)),
            )
            return cur.rowcount == 1
        return self._run(op)

    def delete_if_equals(self, key: str, value: str) -> bool:
        def op(now):
            self._purge(key, now)
            cur = self.db.execute("DELETE FROM kv WHERE key=? AND value=?", (key, value))
            return cur.rowcount == 1
        return self._run(op)

    def close(self):
        self.db.close()
