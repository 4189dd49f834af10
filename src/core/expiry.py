"""Expiry policy: pure functions over an entry and the current time."""

from __future__ import annotations

from typing import Optional

from core.models import CacheEntry


def compute_expires_at(now: float, ttl: Optional[float]) -> Optional[float]:
    # Non-positive ttl means "no expiry"
    if ttl is None or ttl <= 0:
        return None
    return now + float(ttl)


def is_expired(entry: CacheEntry, now: float) -> bool:
    return entry.expires_at is not None and now >= entry.expires_at
