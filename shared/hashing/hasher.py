"""
Content Hasher
==============

SHA-256 fingerprints over bytes, strings and JSON-compatible objects.

Objects are canonicalized before hashing (sorted keys, compact separators,
Pydantic models dumped in JSON mode) so that semantically identical values
always produce the same digest regardless of key order.

Version: 0.1.0
"""

import hashlib
import json
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel

from shared.errors import EncodingError


HASH_ALGORITHM = "sha256"


def hash_bytes(data: bytes) -> str:
    """Return the hex SHA-256 digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def hash_string(data: str) -> str:
    """Return the hex SHA-256 digest of a UTF-8 string."""
    return hash_bytes(data.encode("utf-8"))


def _json_default(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def canonical_json(obj: Any) -> str:
    """
    Serialize an object to canonical JSON.

    Args:
        obj: Dict, list, scalar or Pydantic model

    Returns:
        JSON string with sorted keys and no insignificant whitespace

    Raises:
        EncodingError: If the object cannot be represented as JSON
    """
    if isinstance(obj, BaseModel):
        obj = obj.model_dump(mode="json")

    try:
        return json.dumps(
            obj,
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
            default=_json_default,
        )
    except (TypeError, ValueError) as e:
        raise EncodingError(f"Cannot canonicalize object for hashing: {e}") from e


def hash_object(obj: Any) -> str:
    """Return the hex SHA-256 digest of an object's canonical JSON form."""
    return hash_string(canonical_json(obj))


def verify_hash(content: str | bytes, expected_hash: str) -> bool:
    """Check content against an expected hex digest (case-insensitive)."""
    actual = hash_bytes(content) if isinstance(content, bytes) else hash_string(content)
    return actual.lower() == expected_hash.lower()
