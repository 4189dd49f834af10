"""Dataclasses describing cache entries, configuration and statistics.

CacheEntry is the unit of storage; CacheConfig groups construction
options; CacheStats is the read-only snapshot returned by `stats()`.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(slots=True)
class CacheEntry(Generic[T]):
    # Value + monotonic timestamps; recency is tracked elsewhere
    value: T
    inserted_at: float
    expires_at: Optional[float] = None  # None = never expires
    size: int = 0  # estimated bytes, see core.sizing


@dataclass(frozen=True)
class CacheConfig:
    """Construction options for a MemoryCache.

    Durations are in seconds. A missing or zero `default_ttl` means entries
    only expire when `set` is given an explicit ttl; a missing or zero
    `cleanup_interval` disables the background sweep. `max_memory_size` caps
    the estimated bytes held; missing or zero means no memory limit.
    """

    max_size: int
    default_ttl: Optional[float] = None
    cleanup_interval: Optional[float] = None
    use_lru: bool = True
    max_memory_size: Optional[int] = None


@dataclass(frozen=True)
class CacheStats:
    size: int
    capacity: int
    hit_count: int
    miss_count: int
    eviction_count: int
    expired_count: int = 0
    memory_size: int = 0
    max_memory_size: Optional[int] = None

    @property
    def hit_rate(self) -> float:
        total = self.hit_count + self.miss_count
        return self.hit_count / total if total else 0.0

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        out["hit_rate"] = self.hit_rate
        return out
