"""
autossl_core.utils
------------------
Small helpers shared by the store, the issuance lock and the codec:
random lock tokens, canonical JSON and PEM expiry lookup.
"""

from __future__ import annotations
import json, os
from typing import Any, Dict

from cryptography import x509


def random_token(nbytes: int = 32) -> str:
    # 32 bytes -> 64 hex chars
    return os.urandom(nbytes).hex()

def canonical_json(obj: Dict[str, Any]) -> str:
    return json.dumps(obj, separators=(",", ":"), sort_keys=True, ensure_ascii=False)

def cert_expiry(cert_pem: str | bytes) -> int:
    """
    Return the notAfter of a PEM leaf certificate as integer seconds since epoch.

    Only the validity field is read; the certificate is not verified.
    """
    if isinstance(cert_pem, str):
        cert_pem = cert_pem.encode("ascii")
    cert = x509.load_pem_x509_certificate(cert_pem)
    return int(cert.not_valid_after_utc.timestamp())
