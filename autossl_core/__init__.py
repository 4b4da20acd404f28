"""
autossl_core
============
Shared-store coordination for automatic TLS certificate issuance across
several server instances.

Provides:
- CertStore: certificate, challenge and multiname records over a pluggable store
- A best-effort cross-instance issuance lock
- Pluggable storage interface (in-memory default, SQLite file)
"""

from autossl_core.config import StoreConfig
from autossl_core.store import CertStore

__all__ = ["CertStore", "StoreConfig"]
