# autossl_core/storage/models.py
from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Any, Dict, List

from autossl_core.errors import DecodeError

SEPARATOR = ":"


@dataclass
class CertificateRecord:
    """
    The latest certificate for a domain.

    All four fields are always encoded into one blob and written with a
    single store call, so a reader never sees a new chain next to an old key.
    """
    fullchain_pem: str
    privkey_pem: str
    cert_pem: str
    expiry: int  # seconds since epoch

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CertificateRecord":
        try:
            return cls(
                fullchain_pem=_require_str(data, "fullchain_pem"),
                privkey_pem=_require_str(data, "privkey_pem"),
                cert_pem=_require_str(data, "cert_pem"),
                expiry=int(data["expiry"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise DecodeError(f"malformed certificate record: {e!r}") from e


@dataclass
class MultinameGroup:
    """A primary domain and the colon-delimited list of domains sharing its certificate."""
    domain: str
    subdomain: str

    @property
    def members(self) -> List[str]:
        return split_members(self.subdomain)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MultinameGroup":
        try:
            return cls(
                domain=_require_str(data, "domain"),
                subdomain=_require_str(data, "subdomain"),
            )
        except (KeyError, TypeError) as e:
            raise DecodeError(f"malformed multiname record: {e!r}") from e


def split_members(subdomain: str) -> List[str]:
    return [d for d in subdomain.split(SEPARATOR) if d]

def join_members(members: List[str]) -> str:
    return SEPARATOR.join(members)

def _require_str(data: Dict[str, Any], field: str) -> str:
    value = data[field]
    if not isinstance(value, str):
        raise TypeError(f"{field} must be a string, got {type(value).__name__}")
    return value
