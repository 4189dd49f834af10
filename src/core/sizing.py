"""Approximate in-memory size of cached values.

Strings count two bytes per character, bytes-like values their length, and
everything else the length of its JSON encoding (two bytes per character).
Values that cannot be encoded get a flat 1 KiB estimate.
"""

from __future__ import annotations

import json
from typing import Any

from core.logging import get_logger

logger = get_logger(__name__)

FALLBACK_SIZE = 1024


def estimate_size(value: Any) -> int:
    if isinstance(value, str):
        return len(value) * 2
    if isinstance(value, (bytes, bytearray)):
        return len(value)
    try:
        return len(json.dumps(value)) * 2
    except (TypeError, ValueError) as e:
        logger.warning("cache_size_estimate_failed", value_type=type(value).__name__, error=str(e))
        return FALLBACK_SIZE
