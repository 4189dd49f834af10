"""Recency tracker for LRU eviction.

Keeps cache keys in access order using an OrderedDict: the first key is
the least recently used, the last key the most recently used.
"""

from __future__ import annotations

from collections import OrderedDict
from typing import Iterator, Optional


class RecencyTracker:
    def __init__(self) -> None:
        self._order: "OrderedDict[str, None]" = OrderedDict()

    def touch(self, key: str) -> None:
        # Insert or move to the most-recently-used end
        self._order[key] = None
        self._order.move_to_end(key, last=True)

    def discard(self, key: str) -> None:
        self._order.pop(key, None)

    def clear(self) -> None:
        self._order.clear()

    def least_recent(self, *, exclude: Optional[str] = None) -> Optional[str]:
        for key in self._order:
            if key != exclude:
                return key
        return None

    def __len__(self) -> int:
        return len(self._order)

    def __iter__(self) -> Iterator[str]:
        return iter(self._order)

    def __contains__(self, key: object) -> bool:
        return key in self._order
