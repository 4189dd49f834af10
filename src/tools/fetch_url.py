"""MCP tool that fetches a URL through the memoizing fetch client.

Registers the 'fetch_url' tool. Repeated calls for the same URL and
parameters are served from the in-memory cache until their TTL runs out.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP

from clients.fetch_client import CachedFetchClient
from core.errors import ValidationError


def register(mcp: FastMCP, *, fetch_client: CachedFetchClient) -> None:
    @mcp.tool(name="fetch_url")
    async def fetch_url(
        url: str = "",
        params: Optional[Dict[str, str]] = None,
        as_json: bool = False,
        ttl_seconds: Optional[float] = None,
    ) -> Any:
        """Fetch a URL with HTTP GET and return its body, caching the result.

        Parameters:
          - url: absolute http(s) URL (required).
          - params: optional query parameters.
          - as_json: parse the body as JSON instead of returning text.
          - ttl_seconds: cache lifetime for this response; server default if omitted.

        Raises:
          ValidationError for a missing/invalid url or ttl, NotFoundError on 404,
          ExternalServiceError for other upstream failures.
        """
        if not url or not url.strip():
            raise ValidationError("Missing url")
        if ttl_seconds is not None and ttl_seconds < 0:
            raise ValidationError("ttl_seconds must be >= 0")

        if as_json:
            return await fetch_client.fetch_json(url, params=params, ttl=ttl_seconds)
        return await fetch_client.fetch_text(url, params=params, ttl=ttl_seconds)
