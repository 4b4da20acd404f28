"""
autossl_core.codec
------------------
Codec capability used to turn records into the single text blob handed to
the storage provider, and back.

Any object with ``encode(dict) -> str`` and ``decode(str) -> dict`` can be
plugged into ``StoreConfig``; ``JsonCodec`` is the default.
"""

from __future__ import annotations
import json
from typing import Any, Dict

from autossl_core.errors import DecodeError
from autossl_core.utils import canonical_json


class Codec:
    # Interface
    def encode(self, record: Dict[str, Any]) -> str: ...
    def decode(self, blob: str) -> Dict[str, Any]: ...


class JsonCodec(Codec):
    def encode(self, record: Dict[str, Any]) -> str:
        return canonical_json(record)

    def decode(self, blob: str | bytes) -> Dict[str, Any]:
        try:
            if isinstance(blob, bytes):
                blob = blob.decode("utf-8")
            data = json.loads(blob)
        except (TypeError, ValueError) as e:
            # UnicodeDecodeError and JSONDecodeError are both ValueErrors
            raise DecodeError(f"invalid JSON blob: {e}") from e
        if not isinstance(data, dict):
            raise DecodeError(f"expected a JSON object, got {type(data).__name__}")
        return data
