"""
autossl_core.multiname
----------------------
Multiname (SAN) index: lets several domains share one certificate.

Each group lives under ``<primary>:main`` as ``{"domain": primary,
"subdomain": "a.com:b.com:..."}``. Updates are read-modify-write on the
whole record and are not atomic; callers that may race on the same group
should hold the advisory lock (``lock_set`` / ``lock_get`` / ``lock_delete``)
around them.
"""

from __future__ import annotations
from typing import Dict, Optional

from autossl_core import keys
from autossl_core.codec import Codec
from autossl_core.errors import AutoSSLError, MultinameLimitError, StorageError
from autossl_core.logger import get_logger
from autossl_core.storage.models import MultinameGroup, SEPARATOR, join_members, split_members
from autossl_core.storage.provider import StorageProvider

log = get_logger("autossl.multiname")

# CA limits for a single certificate order
MAX_NAMES = 100
MAX_REQUEST_LENGTH = 1900
REQUEST_OVERHEAD = 350
PER_NAME_OVERHEAD = 3


def validate(domain_array: str, new_domain: str) -> bool:
    """Check whether ``new_domain`` can still be added to a certificate."""
    members = split_members(domain_array or "")
    count = len(members)

    if count + 1 > MAX_NAMES:
        return False

    names_len = len((domain_array or "").replace(SEPARATOR, ""))
    check_len = REQUEST_OVERHEAD + names_len + len(new_domain or "") + PER_NAME_OVERHEAD * count
    return check_len <= MAX_REQUEST_LENGTH


class MultinameIndex:
    def __init__(self, adapter: StorageProvider, codec: Codec):
        self.adapter = adapter
        self.codec = codec

    def _write(self, domain_cert_name: str, group: MultinameGroup) -> MultinameGroup:
        key = keys.multiname_key(domain_cert_name)
        if not self.adapter.set(key, self.codec.encode(group.to_dict())):
            raise StorageError(f"failed to write multiname group {key}")
        return group

    def get(self, domain_cert_name: str) -> Optional[MultinameGroup]:
        raw = self.adapter.get(keys.multiname_key(domain_cert_name))
        if raw is None:
            return None
        return MultinameGroup.from_dict(self.codec.decode(raw))

    def create(self, domain: str) -> MultinameGroup:
        return self._write(domain, MultinameGroup(domain=domain, subdomain=domain))

    def update(self, domain_cert_name: str, domain: str) -> Optional[MultinameGroup]:
        """Append ``domain`` to the group stored under ``domain_cert_name``."""
        group = self.get(domain_cert_name)
        if group is None:
            log.warning(f"[MULTINAME] update: no group for {domain_cert_name}")
            return None

        members = group.members
        if domain in members:
            return group
        if not validate(group.subdomain, domain):
            raise MultinameLimitError(f"{domain_cert_name}: cannot add {domain}, certificate limits reached")

        members.append(domain)
        group.subdomain = join_members(members)
        log.info(f"[MULTINAME] {domain_cert_name} += {domain}")
        return self._write(domain_cert_name, group)

    def remove(self, domain_cert_name: str, domain: str) -> Optional[MultinameGroup]:
        """Drop ``domain`` from the group; only exact member matches are removed."""
        group = self.get(domain_cert_name)
        if group is None:
            log.warning(f"[MULTINAME] remove: no group for {domain_cert_name}")
            return None

        group.subdomain = join_members([d for d in group.members if d != domain])
        log.info(f"[MULTINAME] {domain_cert_name} -= {domain}")
        return self._write(domain_cert_name, group)

    def all_groups(self) -> Dict[str, str]:
        """
        Map every primary domain to its member list.

        A failing entry is logged and skipped; a failing enumeration raises.
        """
        result: Dict[str, str] = {}
        for key in self.adapter.keys_with_suffix(keys.MULTINAME_MARKER):
            try:
                raw = self.adapter.get(key)
                if raw is None:
                    continue
                group = MultinameGroup.from_dict(self.codec.decode(raw))
            except AutoSSLError as e:
                log.error(f"[MULTINAME] all_groups: skipping {key}: {e}")
                continue
            result[group.domain] = group.subdomain
        return result

    def check_existing(self, domain: str) -> Optional[str]:
        """Return the primary domain whose certificate already covers ``domain``."""
        for primary, subdomain in self.all_groups().items():
            if domain in split_members(subdomain):
                return primary
        return None

    # advisory lock around read-modify-write of a group
    def lock_set(self, domain: str) -> bool:
        return self.adapter.set(keys.multiname_lock_key(domain), self.codec.encode({"lock": "locked"}))

    def lock_get(self, domain: str) -> Optional[str]:
        return self.adapter.get(keys.multiname_lock_key(domain))

    def lock_delete(self, domain: str) -> bool:
        return self.adapter.delete(keys.multiname_lock_key(domain))
