# src/kvharness/core/canonical.py
"""Canonical JSON and hashing for recorded request signatures.

Each interaction in a recording stores a hash of its request signature.
The hash must come out the same on every machine that replays the
recording, so it is taken over RFC 8785 (JCS) canonical JSON from the
rfc8785 package rather than over json.dumps output.

Signature payloads are made of strings and small integers. Floats are
accepted only when finite; NaN or Infinity raise ValueError.
"""

from __future__ import annotations

import hashlib
import math
from typing import Any

import rfc8785

# Hashing scheme identifier; bump when canonical_json or the digest changes
CANONICAL_VERSION = "sha256-rfc8785-v1"


def _to_json_tree(data: Any) -> Any:
    """Copy a JSON-like structure, turning tuples into lists.

    Raises:
        ValueError: If any float in data is NaN or +/-Infinity
    """
    if isinstance(data, float) and (math.isnan(data) or math.isinf(data)):
        raise ValueError(f"Cannot canonicalize non-finite float: {data}")
    if isinstance(data, dict):
        return {key: _to_json_tree(value) for key, value in data.items()}
    if isinstance(data, list | tuple):
        return [_to_json_tree(value) for value in data]
    return data


def canonical_json(obj: Any) -> str:
    """Serialize obj as RFC 8785 canonical JSON (sorted keys, no whitespace).

    Raises:
        ValueError: If obj contains NaN or Infinity
        rfc8785.CanonicalizationError: If obj holds values JCS cannot represent
    """
    result: bytes = rfc8785.dumps(_to_json_tree(obj))
    return result.decode("utf-8")


def stable_hash(obj: Any) -> str:
    """SHA-256 hex digest of obj's canonical JSON."""
    return hashlib.sha256(canonical_json(obj).encode("utf-8")).hexdigest()
