"""
autossl_core.store
------------------
``CertStore`` is the single entry point used by servers issuing and
serving certificates. It layers typed records over a ``StorageProvider``:

- challenge tokens   ``<domain>:challenge:<path>``
- latest certificate ``<domain>:latest``
- issuance lock      ``<domain>:issue_cert_lock``
- multiname groups   ``<domain>:main`` / ``<domain>:multiname_lock``

Typical issuance flow::

    with store.issue_cert_locked(domain):
        if store.get_cert(domain) is None and store.check_multiname(domain) is None:
            ...  # obtain a certificate from the CA
            store.set_cert(domain, fullchain, privkey, cert, expiry)
            store.create_multiname(domain)

Reads distinguish three outcomes: ``None`` (absent), ``DecodeError``
(malformed blob) and ``StorageError`` (backend failure).
"""

from __future__ import annotations
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from autossl_core import keys
from autossl_core.config import StoreConfig
from autossl_core.errors import LockError
from autossl_core.lock import IssueLock
from autossl_core.logger import get_logger
from autossl_core.multiname import MultinameIndex, validate
from autossl_core.storage.models import CertificateRecord, MultinameGroup
from autossl_core.utils import cert_expiry

log = get_logger("autossl.store")


class CertStore:
    def __init__(self, config: StoreConfig, sleep=None):
        self.config = config
        self.adapter = config.adapter
        self.codec = config.codec

        lock_kwargs = {} if sleep is None else {"sleep": sleep}
        self.issue_lock = IssueLock(
            self.adapter,
            wait_interval=config.lock_wait_interval,
            max_wait=config.lock_max_wait,
            ttl=config.lock_ttl,
            **lock_kwargs,
        )
        self.multiname = MultinameIndex(self.adapter, self.codec)

    # ------------------------------------------------------------------
    # Raw key access
    # ------------------------------------------------------------------
    def get_adapter_keys(self, suffix: str) -> List[str]:
        return self.adapter.keys_with_suffix(suffix)

    def get_adapter_key(self, key: str, decode: bool = False) -> Any:
        value = self.adapter.get(key)
        if decode and value is not None:
            return self.codec.decode(value)
        return value

    def get_adapter_key_main(self, domain: str, decode: bool = False) -> Any:
        return self.get_adapter_key(keys.multiname_key(domain), decode=decode)

    # ------------------------------------------------------------------
    # Challenges
    # ------------------------------------------------------------------
    def get_challenge(self, domain: str, path: str) -> Optional[str]:
        return self.adapter.get(keys.challenge_key(domain, path))

    def set_challenge(self, domain: str, path: str, value: str) -> bool:
        return self.adapter.set(keys.challenge_key(domain, path), value)

    def delete_challenge(self, domain: str, path: str) -> bool:
        return self.adapter.delete(keys.challenge_key(domain, path))

    # ------------------------------------------------------------------
    # Certificates
    # ------------------------------------------------------------------
    def get_cert(self, domain: str) -> Optional[CertificateRecord]:
        raw = self.adapter.get(keys.cert_key(domain))
        if raw is None:
            return None
        return CertificateRecord.from_dict(self.codec.decode(raw))

    def set_cert(self, domain: str, fullchain_pem: str, privkey_pem: str, cert_pem: str,
                 expiry: Optional[int] = None) -> bool:
        # Chain, key and leaf go out as one blob in one write so they can't
        # be observed out of sync.
        if expiry is None:
            expiry = cert_expiry(cert_pem)
        record = CertificateRecord(
            fullchain_pem=fullchain_pem,
            privkey_pem=privkey_pem,
            cert_pem=cert_pem,
            expiry=int(expiry),
        )
        ok = self.adapter.set(keys.cert_key(domain), self.codec.encode(record.to_dict()))
        if ok:
            log.info(f"[CERT] stored {domain} expiry={record.expiry}")
        else:
            log.error(f"[CERT] store rejected write for {domain}")
        return ok

    def delete_cert(self, domain: str) -> bool:
        return self.adapter.delete(keys.cert_key(domain))

    def all_cert_domains(self) -> List[str]:
        return [keys.domain_from_key(k, keys.CERT_SUFFIX)
                for k in self.adapter.keys_with_suffix(keys.CERT_SUFFIX)]

    # ------------------------------------------------------------------
    # Issuance lock
    # ------------------------------------------------------------------
    def issue_cert_lock(self, domain: str) -> str:
        return self.issue_lock.acquire(domain)

    def issue_cert_unlock(self, domain: str, lock_rand_value: str) -> bool:
        return self.issue_lock.release(domain, lock_rand_value)

    @contextmanager
    def issue_cert_locked(self, domain: str) -> Iterator[str]:
        token = self.issue_cert_lock(domain)
        try:
            yield token
        finally:
            try:
                self.issue_cert_unlock(domain, token)
            except LockError as e:
                log.warning(f"[LOCK] release for {domain} failed: {e}")

    # ------------------------------------------------------------------
    # Multiname groups
    # ------------------------------------------------------------------
    def get_multiname_array(self) -> Dict[str, str]:
        return self.multiname.all_groups()

    def check_multiname(self, domain: str) -> Optional[str]:
        return self.multiname.check_existing(domain)

    def validate_multiname(self, domain_array: str, new_domain: str) -> bool:
        return validate(domain_array, new_domain)

    def create_multiname(self, domain: str) -> MultinameGroup:
        return self.multiname.create(domain)

    def update_multiname(self, domain_cert_name: str, domain: str) -> Optional[MultinameGroup]:
        return self.multiname.update(domain_cert_name, domain)

    def remove_multiname(self, domain_cert_name: str, domain: str) -> Optional[MultinameGroup]:
        return self.multiname.remove(domain_cert_name, domain)

    def multiname_lock_set(self, domain: str) -> bool:
        return self.multiname.lock_set(domain)

    def multiname_lock_get(self, domain: str) -> Optional[str]:
        return self.multiname.lock_get(domain)

    def multiname_lock_delete(self, domain: str) -> bool:
        return self.multiname.lock_delete(domain)
