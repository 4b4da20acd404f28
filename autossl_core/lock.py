"""
autossl_core.lock
-----------------
A simplistic cross-instance lock that tries to keep several servers from
issuing a certificate for the same domain at the same time.

It only needs get / set-with-ttl / delete from the store, so it works over
any shared backend. It is best effort: two waiters can both see the key
absent and both write it. Pair it with a process-local lock; together they
stop the vast majority of duplicate requests.

The TTL is the only crash recovery: a holder that dies without releasing
frees the lock once the key expires.

Backends implementing ``add`` / ``delete_if_equals`` get the atomic path
for polling and release; the contract stays the same.
"""

from __future__ import annotations
import time
from typing import Callable

from autossl_core import keys
from autossl_core.config import DEFAULT_LOCK_MAX_WAIT, DEFAULT_LOCK_TTL, DEFAULT_LOCK_WAIT_INTERVAL
from autossl_core.errors import LockMismatchError, LockNotHeldError, StorageError
from autossl_core.logger import get_logger
from autossl_core.storage.provider import StorageProvider, supports_atomic
from autossl_core.utils import random_token

log = get_logger("autossl.lock")


class IssueLock:
    def __init__(
        self,
        adapter: StorageProvider,
        wait_interval: float = DEFAULT_LOCK_WAIT_INTERVAL,
        max_wait: float = DEFAULT_LOCK_MAX_WAIT,
        ttl: float = DEFAULT_LOCK_TTL,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.adapter = adapter
        self.wait_interval = wait_interval
        self.max_wait = max_wait
        self.ttl = ttl
        self._sleep = sleep
        self.atomic = supports_atomic(adapter)

    def acquire(self, domain: str) -> str:
        """
        Wait (up to ``max_wait``) for any existing lock to go away, then take
        it. Returns the random token needed to release.
        """
        key = keys.issue_lock_key(domain)
        token = random_token(32)

        waited = 0.0
        while True:
            if self.atomic:
                if self.adapter.add(key, token, ttl=self.ttl):
                    log.debug(f"[LOCK] acquired {key} after {waited}s")
                    return token
            elif self.adapter.get(key) is None:
                break

            if waited > self.max_wait:
                log.warning(f"[LOCK] gave up waiting for {key} after {waited}s, taking it anyway")
                break
            self._sleep(self.wait_interval)
            waited += self.wait_interval

        if not self.adapter.set(key, token, ttl=self.ttl):
            raise StorageError(f"failed to write lock {key}")
        log.debug(f"[LOCK] acquired {key} after {waited}s")
        return token

    def release(self, domain: str, token: str) -> bool:
        """
        Remove the lock if it still carries ``token``.

        Raises ``LockMismatchError`` if someone else holds it now and
        ``LockNotHeldError`` if it is already gone. Store failures propagate.
        """
        key = keys.issue_lock_key(domain)

        if self.atomic:
            if self.adapter.delete_if_equals(key, token):
                log.debug(f"[LOCK] released {key}")
                return True
            current = self.adapter.get(key)
        else:
            current = self.adapter.get(key)
            if current == token:
                ok = self.adapter.delete(key)
                log.debug(f"[LOCK] released {key} ok={ok}")
                return ok

        if current is not None:
            raise LockMismatchError(key)
        raise LockNotHeldError(key)
