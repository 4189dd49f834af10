"""MCP tools for inspecting and invalidating the shared cache."""

from __future__ import annotations

from typing import Any, Dict

from mcp.server.fastmcp import FastMCP

from core.cache import MemoryCache
from core.errors import ValidationError


def register(mcp: FastMCP, *, cache: MemoryCache) -> None:
    @mcp.tool(name="cache_stats")
    async def cache_stats() -> Dict[str, Any]:
        """Return size, capacity, memory use, hit/miss/eviction counters and hit rate."""
        return cache.stats().to_dict()

    @mcp.tool(name="cache_invalidate")
    async def cache_invalidate(pattern: str = "") -> int:
        """Delete cached entries whose key matches a regular expression.

        Keys of fetched responses look like "GET https://host/path?a=1".
        Returns the number of entries removed. Raises InvalidPatternError
        when the pattern does not compile.
        """
        if not pattern:
            raise ValidationError("Missing pattern")
        return cache.delete_matching(pattern)

    @mcp.tool(name="cache_clear")
    async def cache_clear() -> int:
        """Remove every cached entry and return how many were dropped."""
        return cache.purge()
