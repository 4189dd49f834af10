"""In-memory TTL cache with LRU or FIFO eviction and a background sweep.

Values are stored with monotonic timestamps. Expired entries are dropped
lazily by the read that finds them and proactively by an optional
per-instance cleanup thread. When the store grows past `max_size`, entries
are evicted in least-recently-used order (or insertion order when
`use_lru` is off).

All store and recency mutations happen under one re-entrant lock, so each
public operation is atomic with respect to other threads and the sweep.
"""

from __future__ import annotations

import re
import threading
import time
from typing import Callable, Dict, Generic, List, Optional, Pattern, TypeVar, Union

from core.errors import InvalidConfigError, InvalidPatternError
from core.eviction import select_victim
from core.expiry import compute_expires_at, is_expired
from core.logging import get_logger
from core.models import CacheConfig, CacheEntry, CacheStats
from core.recency import RecencyTracker
from core.scheduler import CleanupScheduler
from core.sizing import estimate_size

T = TypeVar("T")

logger = get_logger(__name__)


def _validate_config(config: CacheConfig) -> None:
    size = config.max_size
    if isinstance(size, bool) or not isinstance(size, int):
        raise InvalidConfigError(f"max_size must be an integer, got {size!r}")
    if size <= 0:
        raise InvalidConfigError(f"max_size must be > 0, got {size}")

    for name in ("default_ttl", "cleanup_interval"):
        value = getattr(config, name)
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidConfigError(f"{name} must be a number of seconds, got {value!r}")
        if value < 0:
            raise InvalidConfigError(f"{name} must be >= 0, got {value}")

    memory = config.max_memory_size
    if memory is not None:
        if isinstance(memory, bool) or not isinstance(memory, int):
            raise InvalidConfigError(f"max_memory_size must be an integer, got {memory!r}")
        if memory < 0:
            raise InvalidConfigError(f"max_memory_size must be >= 0, got {memory}")


class MemoryCache(Generic[T]):
    """Thread-safe ephemeral key/value cache.

    Options:
      - max_size: capacity (positive int, required).
      - default_ttl: seconds applied when `set` has no ttl; None/0 = no expiry.
      - cleanup_interval: seconds between background sweeps; None/0 = lazy only.
      - use_lru: evict least-recently-used (True) or oldest-inserted (False).
      - max_memory_size: cap on estimated bytes held; None/0 = unlimited.
        The entry being written is never evicted, so a single value larger
        than the cap is kept on its own.
      - clock: monotonic time source, injectable for tests.

    Call `stop()` (or use the cache as a context manager) to release the
    cleanup thread.
    """

    def __init__(
        self,
        *,
        max_size: int,
        default_ttl: Optional[float] = None,
        cleanup_interval: Optional[float] = None,
        use_lru: bool = True,
        max_memory_size: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        config = CacheConfig(
            max_size=max_size,
            default_ttl=default_ttl,
            cleanup_interval=cleanup_interval,
            use_lru=bool(use_lru),
            max_memory_size=max_memory_size,
        )
        # Fail before any state or thread exists
        _validate_config(config)

        self._config = config
        self._clock = clock
        self._lock = threading.RLock()
        self._store: Dict[str, CacheEntry[T]] = {}
        self._recency = RecencyTracker()
        self._memory_size = 0

        self._hits = 0
        self._misses = 0
        self._evictions = 0
        self._expired = 0

        self._scheduler: Optional[CleanupScheduler] = None
        if config.cleanup_interval:
            self._scheduler = CleanupScheduler(
                interval=config.cleanup_interval,
                callback=self.sweep,
                name=f"cache-cleanup-{id(self):x}",
            )
            self._scheduler.start()

    @classmethod
    def from_config(cls, config: CacheConfig, *, clock: Callable[[], float] = time.monotonic) -> "MemoryCache[T]":
        return cls(
            max_size=config.max_size,
            default_ttl=config.default_ttl,
            cleanup_interval=config.cleanup_interval,
            use_lru=config.use_lru,
            max_memory_size=config.max_memory_size,
            clock=clock,
        )

    @property
    def config(self) -> CacheConfig:
        return self._config

    @property
    def capacity(self) -> int:
        return self._config.max_size

    # --- public operations ---

    def set(self, key: str, value: T, ttl: Optional[float] = None) -> None:
        effective_ttl = ttl if ttl is not None and ttl > 0 else self._config.default_ttl
        now = self._clock()
        entry = CacheEntry(
            value=value,
            inserted_at=now,
            expires_at=compute_expires_at(now, effective_ttl),
            size=estimate_size(value),
        )

        with self._lock:
            # Re-insert so store order follows the latest write (FIFO ties)
            self._remove(key)
            self._store[key] = entry
            self._memory_size += entry.size
            if self._config.use_lru:
                self._recency.touch(key)

            while self._over_limits():
                if not self._evict_one(protected=key):
                    break

            assert len(self._store) <= self._config.max_size

    def get(self, key: str, default: Optional[T] = None) -> Optional[T]:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                self._misses += 1
                return default

            if is_expired(entry, self._clock()):
                self._remove(key)
                self._expired += 1
                self._misses += 1
                logger.debug("cache_miss_expired", key=key)
                return default

            if self._config.use_lru:
                self._recency.touch(key)
            self._hits += 1
            return entry.value

    def has(self, key: str) -> bool:
        # Existence probe: lazy expiry applies, recency and counters do not change
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return False
            if is_expired(entry, self._clock()):
                self._remove(key)
                self._expired += 1
                return False
            return True

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._remove(key)

    def clear(self) -> None:
        self.purge()

    def purge(self) -> int:
        """Clear the cache and return how many entries were dropped.

        Entries, recency order, memory accounting and all counters are reset
        in one step.
        """
        with self._lock:
            count = len(self._store)
            self._store.clear()
            self._recency.clear()
            self._memory_size = 0
            self._hits = 0
            self._misses = 0
            self._evictions = 0
            self._expired = 0
        logger.debug("cache_cleared", removed=count)
        return count

    def delete_matching(self, pattern: Union[str, Pattern[str]]) -> int:
        """Delete every key that matches `pattern` (re.search semantics).

        Expired entries that do not match are left for the expiry policy.
        Raises InvalidPatternError when `pattern` does not compile; the cache
        is untouched in that case.
        """
        regex = self._compile(pattern)

        with self._lock:
            matched = [key for key in self._store if regex.search(key)]
            for key in matched:
                self._remove(key)

        logger.debug("cache_deleted_matching", pattern=regex.pattern, count=len(matched))
        return len(matched)

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                size=len(self._store),
                capacity=self._config.max_size,
                hit_count=self._hits,
                miss_count=self._misses,
                eviction_count=self._evictions,
                expired_count=self._expired,
                memory_size=self._memory_size,
                max_memory_size=self._config.max_memory_size,
            )

    def stop(self) -> None:
        # Not under self._lock: the sweep thread may be waiting on it
        scheduler = self._scheduler
        if scheduler is not None:
            scheduler.stop()

    def sweep(self) -> int:
        """Remove every expired entry now; returns the number removed."""
        with self._lock:
            now = self._clock()
            expired = [key for key, entry in self._store.items() if is_expired(entry, now)]
            for key in expired:
                self._remove(key)
            self._expired += len(expired)

        if expired:
            logger.debug("cache_sweep_removed", count=len(expired))
        return len(expired)

    def keys(self) -> List[str]:
        # Snapshot of stored keys, expired-but-unvisited ones included
        with self._lock:
            return list(self._store)

    # --- dunder helpers ---

    def __len__(self) -> int:
        with self._lock:
            return len(self._store)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.has(key)

    def __enter__(self) -> "MemoryCache[T]":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    # --- internals ---

    def _remove(self, key: str) -> bool:
        # Caller holds self._lock
        entry = self._store.pop(key, None)
        self._recency.discard(key)
        if entry is None:
            return False
        self._memory_size -= entry.size
        assert self._memory_size >= 0
        return True

    def _over_limits(self) -> bool:
        if len(self._store) > self._config.max_size:
            return True
        limit = self._config.max_memory_size
        return bool(limit) and self._memory_size > limit

    def _evict_one(self, *, protected: str) -> bool:
        victim = select_victim(
            self._store,
            self._recency,
            use_lru=self._config.use_lru,
            protected=protected,
        )
        if victim is None:
            return False

        self._remove(victim)
        self._evictions += 1
        logger.debug("cache_evicted", key=victim, policy="lru" if self._config.use_lru else "fifo")
        return True

    @staticmethod
    def _compile(pattern: Union[str, Pattern[str]]) -> Pattern[str]:
        if isinstance(pattern, re.Pattern):
            regex = pattern
        else:
            try:
                regex = re.compile(pattern)
            except (re.error, TypeError) as e:
                raise InvalidPatternError(f"Invalid key pattern {pattern!r}: {e}") from e

        # Keys are str; a bytes pattern can never be searched against them
        if not isinstance(regex.pattern, str):
            raise InvalidPatternError(f"Key pattern must be a text pattern, got {pattern!r}")
        return regex
