"""Server bootstrap for the ephemeral cache MCP service.

Configures logging, builds the process cache and fetch client from
config, registers the tools, and starts the MCP server (stdio transport).
The cache's cleanup thread is stopped when the server exits.
"""

from mcp.server.fastmcp import FastMCP

from clients.fetch_client import CachedFetchClient
from config import (
    CACHE_CLEANUP_INTERVAL,
    CACHE_DEFAULT_TTL,
    CACHE_MAX_MEMORY_SIZE,
    CACHE_MAX_SIZE,
    CACHE_USE_LRU,
    FETCH_TIMEOUT,
    HTTP_VERIFY,
    LOG_JSON,
    LOG_LEVEL,
)
from core.cache import MemoryCache
from core.logging import configure_logging, get_logger

from tools.cache_admin import register as register_cache_admin
from tools.fetch_url import register as register_fetch_url

configure_logging(LOG_LEVEL, json=LOG_JSON)
logger = get_logger("server")

mcp = FastMCP("ephemeral-cache-mcp")

cache = MemoryCache(
    max_size=CACHE_MAX_SIZE,
    default_ttl=CACHE_DEFAULT_TTL,
    cleanup_interval=CACHE_CLEANUP_INTERVAL,
    use_lru=CACHE_USE_LRU,
    max_memory_size=CACHE_MAX_MEMORY_SIZE,
)


def register_tools() -> None:
    fetch_client = CachedFetchClient(cache, timeout=FETCH_TIMEOUT, verify=HTTP_VERIFY)

    register_fetch_url(mcp, fetch_client=fetch_client)
    register_cache_admin(mcp, cache=cache)


register_tools()


def main() -> None:
    logger.info("server_starting", max_size=CACHE_MAX_SIZE, default_ttl=CACHE_DEFAULT_TTL)
    try:
        mcp.run(transport="stdio")
    finally:
        cache.stop()


if __name__ == "__main__":
    main()
