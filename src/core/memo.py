"""Memoization helpers built on MemoryCache.

`get_or_compute` returns a cached value or computes, stores and returns it.
`memoize` wraps an async function so its results are cached under a key
derived from the call arguments.
"""

from __future__ import annotations

import functools
import inspect
from typing import Any, Awaitable, Callable, Optional, TypeVar, Union

from core.cache import MemoryCache

T = TypeVar("T")

_MISSING = object()


async def get_or_compute(
    cache: MemoryCache,
    key: str,
    fn: Callable[[], Union[T, Awaitable[T]]],
    ttl: Optional[float] = None,
) -> T:
    cached = cache.get(key, _MISSING)
    if cached is not _MISSING:
        return cached

    value = fn()
    if inspect.isawaitable(value):
        value = await value

    # None results are returned but never cached
    if value is not None:
        cache.set(key, value, ttl)
    return value


def memoize(
    cache: MemoryCache,
    key_fn: Callable[..., str],
    ttl: Optional[float] = None,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    def _decorator(fn: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(fn)
        async def _wrapper(*args: Any, **kwargs: Any) -> T:
            key = key_fn(*args, **kwargs)
            return await get_or_compute(cache, key, lambda: fn(*args, **kwargs), ttl)

        return _wrapper

    return _decorator
