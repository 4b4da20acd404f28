# autossl_core/config.py
"""
Construction-time configuration for ``CertStore``.

The storage capability and the codec are both required; the lock tunables
default to a 0.5s poll interval, a 30s wait ceiling and a 30s lock TTL.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Optional
import os

from autossl_core.codec import Codec, JsonCodec
from autossl_core.storage import StorageProvider, load_storage_provider

DEFAULT_LOCK_WAIT_INTERVAL = 0.5
DEFAULT_LOCK_MAX_WAIT = 30.0
DEFAULT_LOCK_TTL = 30


@dataclass
class StoreConfig:
    adapter: Optional[StorageProvider]
    codec: Optional[Codec] = field(default=None)
    lock_wait_interval: float = DEFAULT_LOCK_WAIT_INTERVAL
    lock_max_wait: float = DEFAULT_LOCK_MAX_WAIT
    lock_ttl: float = DEFAULT_LOCK_TTL

    def __post_init__(self):
        if self.adapter is None:
            raise ValueError("StoreConfig: a storage adapter is required")
        if self.codec is None:
            raise ValueError("StoreConfig: a codec is required")
        for name in ("lock_wait_interval", "lock_max_wait", "lock_ttl"):
            if getattr(self, name) <= 0:
                raise ValueError(f"StoreConfig: {name} must be positive")

    @classmethod
    def from_env(cls, config: dict[str, Any] | None = None) -> "StoreConfig":
        """
        Build a config from a dict and/or AUTOSSL_* environment variables.

        Recognised keys: provider, sqlite_path (see ``load_storage_provider``),
        lock_wait_interval, lock_max_wait, lock_ttl.
        """
        config = config or {}

        def _num(key: str, env: str, default: float) -> float:
            raw = config.get(key)
            if raw is None:
                raw = os.getenv(env)
            return default if raw in (None, "") else float(raw)

        return cls(
            adapter=load_storage_provider(config),
            codec=JsonCodec(),
            lock_wait_interval=_num("lock_wait_interval", "AUTOSSL_LOCK_WAIT_INTERVAL", DEFAULT_LOCK_WAIT_INTERVAL),
            lock_max_wait=_num("lock_max_wait", "AUTOSSL_LOCK_MAX_WAIT", DEFAULT_LOCK_MAX_WAIT),
            lock_ttl=_num("lock_ttl", "AUTOSSL_LOCK_TTL", DEFAULT_LOCK_TTL),
        )
