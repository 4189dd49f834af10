"""Eviction policy: choose which entry to drop when the store is over capacity.

- LRU: the key at the least-recently-used end of the recency tracker.
- FIFO: the entry with the earliest `inserted_at`; ties go to the entry that
  comes first in store order.

The key currently being written is passed as `protected` and is never chosen.
"""

from __future__ import annotations

from typing import Mapping, Optional

from core.models import CacheEntry
from core.recency import RecencyTracker


def select_lru_victim(recency: RecencyTracker, *, protected: Optional[str] = None) -> Optional[str]:
    return recency.least_recent(exclude=protected)


def select_fifo_victim(
    store: Mapping[str, CacheEntry],
    *,
    protected: Optional[str] = None,
) -> Optional[str]:
    victim: Optional[str] = None
    oldest = float("inf")
    for key, entry in store.items():
        if key == protected:
            continue
        # Strict "<" keeps the earliest key on ties
        if entry.inserted_at < oldest:
            victim = key
            oldest = entry.inserted_at
    return victim


def select_victim(
    store: Mapping[str, CacheEntry],
    recency: RecencyTracker,
    *,
    use_lru: bool,
    protected: Optional[str] = None,
) -> Optional[str]:
    if use_lru:
        return select_lru_victim(recency, protected=protected)
    return select_fifo_victim(store, protected=protected)
