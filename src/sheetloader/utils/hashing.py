"""
Deterministic content digests for loaded records.

The digest is what a store compares to decide whether an entry changed.
"""

import hashlib
import json
from typing import Any


def _canonical(data: Any) -> str:
    """Serialize data with sorted keys so equal records hash equally."""
    return json.dumps(
        data,
        sort_keys=True,
        ensure_ascii=False,
        separators=(",", ":"),
        default=str,
    )


def hash_record(data: Any) -> str:
    """
    Compute the digest of a validated record.

    Args:
        data: JSON-like record (mapping of field name to scalar).

    Returns:
        Hex digest string, 16 characters.
    """
    return hashlib.md5(_canonical(data).encode("utf-8")).hexdigest()[:16]
