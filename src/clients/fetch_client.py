"""Memoizing HTTP fetch client.

Wraps `httpx.AsyncClient` GET requests and stores successful responses in a
MemoryCache under a key derived from the request fingerprint (method, URL
and sorted query parameters). Failed requests are never cached.
"""

from __future__ import annotations

import json
import re
from typing import Any, Mapping, Optional
from urllib.parse import urlencode, urlsplit

import httpx

from core.cache import MemoryCache
from core.errors import ExternalServiceError, NotFoundError, ValidationError
from core.logging import get_logger
from core.memo import get_or_compute

logger = get_logger(__name__)


def request_fingerprint(method: str, url: str, params: Optional[Mapping[str, Any]] = None) -> str:
    # Stable key: "GET https://host/path?a=1&b=2" with params sorted by name
    base = url.strip()
    query = urlencode(sorted((str(k), str(v)) for k, v in (params or {}).items()))
    if query:
        sep = "&" if "?" in base else "?"
        base = f"{base}{sep}{query}"
    return f"{method.upper()} {base}"


def _validate_url(url: str) -> str:
    raw = (url or "").strip()
    if not raw:
        raise ValidationError("Missing url")
    parts = urlsplit(raw)
    if parts.scheme not in {"http", "https"} or not parts.netloc:
        raise ValidationError(f"Unsupported url: {raw}")
    return raw


class CachedFetchClient:
    """Async GET client whose responses are memoized in a MemoryCache.

    Purpose:
      - fetch_text(url, params=None, ttl=None) -> str
      - fetch_json(url, params=None, ttl=None) -> Any
      - invalidate(url_prefix) -> int
    """

    USER_AGENT = "ephemeral-cache-mcp"

    def __init__(
        self,
        cache: MemoryCache,
        *,
        timeout: float = 20.0,
        verify: bool = True,
        headers: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._cache = cache
        self._timeout = float(timeout)
        self._verify = bool(verify)
        self._headers = {"User-Agent": self.USER_AGENT, **dict(headers or {})}

    @property
    def cache(self) -> MemoryCache:
        return self._cache

    async def fetch_text(
        self,
        url: str,
        params: Optional[Mapping[str, Any]] = None,
        ttl: Optional[float] = None,
    ) -> str:
        clean_url = _validate_url(url)
        key = request_fingerprint("GET", clean_url, params)
        return await get_or_compute(self._cache, key, lambda: self._get_text(clean_url, params), ttl)

    async def fetch_json(
        self,
        url: str,
        params: Optional[Mapping[str, Any]] = None,
        ttl: Optional[float] = None,
    ) -> Any:
        text = await self.fetch_text(url, params=params, ttl=ttl)
        try:
            return json.loads(text)
        except ValueError as e:
            raise ExternalServiceError(f"Response from {url} is not valid JSON: {e}") from e

    def invalidate(self, url_prefix: str) -> int:
        # Drop every cached GET whose URL starts with url_prefix
        prefix = request_fingerprint("GET", url_prefix)
        return self._cache.delete_matching("^" + re.escape(prefix))

    # --- HTTP helpers ---

    def _create_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            headers=self._headers,
            timeout=self._timeout,
            verify=self._verify,
            follow_redirects=True,
        )

    async def _get_text(self, url: str, params: Optional[Mapping[str, Any]]) -> str:
        logger.debug("fetch_upstream", url=url)
        try:
            async with self._create_client() as client:
                resp = await client.get(url, params=dict(params or {}))
                if resp.status_code == 404:
                    raise NotFoundError(f"Resource not found: {url}")
                resp.raise_for_status()
                return resp.text
        except httpx.HTTPStatusError as e:
            raise ExternalServiceError(f"Upstream returned an error: {e}") from e
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Failed to fetch {url}: {e}") from e
