"""Canonical serialization and SHA-256 digests for determinism metadata."""

import hashlib
import json
from typing import Any, Union


HASH_PREFIX = "sha256:"


def canonical_json(value: Any) -> str:
    """Serialize with sorted keys and no whitespace so field order never matters."""
    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False, allow_nan=False)


def sha256_hex(data: Union[bytes, str]) -> str:
    """Return `sha256:<hex digest>` of the given bytes (str is UTF-8 encoded)."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return HASH_PREFIX + hashlib.sha256(data).hexdigest()


def hash_value(value: Any) -> str:
    """Digest of the canonical JSON form of a JSON-ready value."""
    return sha256_hex(canonical_json(value))
