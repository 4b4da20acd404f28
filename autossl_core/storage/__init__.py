# autossl_core/storage/__init__.py

from .models import CertificateRecord, MultinameGroup
from .provider import StorageProvider, AtomicStorageProvider, supports_atomic
from .providers.memory_provider import InMemoryStorage
from .providers.sqlite_provider import SQLiteStorage
import os


def load_storage_provider(config: dict | None = None) -> StorageProvider:
    """
    Factory resolver for selecting the runtime storage backend.

    For now:
        - memory (default)
        - sqlite
    """
    config = config or {}
    provider = config.get("provider") or os.getenv("AUTOSSL_STORAGE_PROVIDER", "memory")

    if provider == "memory":
        return InMemoryStorage()

    if provider == "sqlite":
        db_path = config.get("sqlite_path") or os.getenv("AUTOSSL_DB_PATH", "db/autossl.db")
        return SQLiteStorage(db_path)

    raise ValueError(f"Unknown storage provider: {provider}")


__all__ = [
    "CertificateRecord",
    "MultinameGroup",
    "StorageProvider",
    "AtomicStorageProvider",
    "supports_atomic",
    "InMemoryStorage",
    "SQLiteStorage",
    "load_storage_provider",
]
