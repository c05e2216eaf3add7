"""Hashing utilities for cache key generation."""

import hashlib
import json
from collections.abc import Mapping
from typing import Any

# Stands in for bodies that cannot be hashed by content (streams, files, ...)
UNSERIALIZABLE_BODY = "__unserializable_body__"

_JSON_SCALARS = (str, int, float, bool, type(None))


def hash_value(value: Any) -> str:
    """Create a deterministic hash of a value.

    Args:
        value: Any JSON-serializable value.

    Returns:
        A hexadecimal hash string (first 16 chars of SHA-256).
    """
    if value is None:
        return "none"

    # Normalize to JSON with sorted keys for determinism
    normalized = json.dumps(value, sort_keys=True, default=str)
    return hashlib.sha256(normalized.encode()).hexdigest()[:16]


def normalize_headers(headers: Mapping[str, Any] | None) -> list[list[str]] | None:
    """Canonicalize headers so insertion order and name case do not matter.

    Args:
        headers: Request headers, or None.

    Returns:
        Sorted ``[name, value]`` pairs with lower-cased names, or None when
        there are no headers.
    """
    if not headers:
        return None
    return sorted([str(name).lower(), str(value)] for name, value in headers.items())


def normalize_body(body: Any) -> Any:
    """Reduce a request body to a stable, JSON-serializable form.

    JSON-like values are kept as-is (dict ordering is handled by
    ``hash_value``), bytes are reduced to their digest and anything
    else collapses to :data:`UNSERIALIZABLE_BODY`.

    Args:
        body: The request body.

    Returns:
        A value suitable for :func:`hash_value`.
    """
    if isinstance(body, (bytes, bytearray)):
        return {"__bytes__": hashlib.sha256(bytes(body)).hexdigest()}
    if _is_json_like(body):
        return body
    return UNSERIALIZABLE_BODY


def _is_json_like(value: Any) -> bool:
    if isinstance(value, _JSON_SCALARS):
        return True
    if isinstance(value, (list, tuple)):
        return all(_is_json_like(item) for item in value)
    if isinstance(value, dict):
        return all(
            isinstance(key, str) and _is_json_like(item) for key, item in value.items()
        )
    return False
