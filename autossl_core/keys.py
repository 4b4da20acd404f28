# autossl_core/keys.py
"""
Key-space for everything autossl_core writes to the shared store.

Each record kind uses its own fixed segment, so challenge, certificate,
lock and multiname keys for the same domain never collide.
"""

from __future__ import annotations

CHALLENGE_SEGMENT = ":challenge:"
CERT_SUFFIX = ":latest"
ISSUE_LOCK_SUFFIX = ":issue_cert_lock"
MULTINAME_SUFFIX = ":main"
MULTINAME_LOCK_SUFFIX = ":multiname_lock"

# Scan marker for multiname groups, matches the unprefixed suffix used by
# existing deployments.
MULTINAME_MARKER = "main"


def challenge_key(domain: str, path: str) -> str:
    return domain + CHALLENGE_SEGMENT + path

def cert_key(domain: str) -> str:
    return domain + CERT_SUFFIX

def issue_lock_key(domain: str) -> str:
    return domain + ISSUE_LOCK_SUFFIX

def multiname_key(domain: str) -> str:
    return domain + MULTINAME_SUFFIX

def multiname_lock_key(domain: str) -> str:
    return domain + MULTINAME_LOCK_SUFFIX

def domain_from_key(key: str, suffix: str) -> str:
    """Strip a trailing ``suffix`` from ``key`` (only at the end)."""
    if suffix and key.endswith(suffix):
        return key[: -len(suffix)]
    return key
