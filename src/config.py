"""Configuration and environment helpers for the project.

Provides small helpers to read typed environment variables and exposes
project-level configuration constants used across the codebase (cache
sizing and TTLs, HTTP behavior of the fetch client, logging).
"""

from __future__ import annotations

import os


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


# Cache engine (durations in seconds; 0 disables)
CACHE_MAX_SIZE = _env_int("CACHE_MAX_SIZE", 1000)
CACHE_DEFAULT_TTL = _env_float("CACHE_DEFAULT_TTL", 60.0)
CACHE_CLEANUP_INTERVAL = _env_float("CACHE_CLEANUP_INTERVAL", CACHE_DEFAULT_TTL / 2)
CACHE_USE_LRU = _env_bool("CACHE_USE_LRU", True)
CACHE_MAX_MEMORY_SIZE = _env_int("CACHE_MAX_MEMORY_SIZE", 50 * 1024 * 1024)  # estimated bytes

# Network / HTTP
HTTP_VERIFY = _env_bool("HTTP_VERIFY", True)
FETCH_TIMEOUT = _env_float("FETCH_TIMEOUT", 20.0)

# Logging
LOG_LEVEL = os.environ.get("LOG_LEVEL", "info").strip() or "info"
LOG_JSON = _env_bool("LOG_JSON", False)
