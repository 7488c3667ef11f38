"""Canonical hashing helpers for change detection.

A format's fingerprint must not depend on the key order of the JSON it
was read from, so everything is serialized canonically before hashing.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any


def canonical_json_bytes(obj: Any) -> bytes:
    """Produce canonical JSON bytes: sorted keys, compact, deterministic.

    - sorted keys (recursively)
    - no whitespace separators (",", ":")
    - ensure_ascii=True
    - UTF-8 encoding

    Sequence order is preserved and scalars are emitted unchanged.
    """
    return json.dumps(
        obj, sort_keys=True, separators=(",", ":"), ensure_ascii=True
    ).encode("utf-8")


def sha256_hex(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def fingerprint(value: Any) -> str:
    """Fingerprint a JSON-serializable value.

    Returns "sha256:<hex>". Two mappings with the same content but
    different insertion order yield the same fingerprint.
    """
    return f"sha256:{sha256_hex(canonical_json_bytes(value))}"


def same_sequence(a: list[str] | None, b: list[str] | None) -> bool:
    """Element-wise comparison of two ordered string sequences."""
    if a is None or b is None:
        return False
    return list(a) == list(b)
