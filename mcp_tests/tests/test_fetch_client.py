import httpx
import pytest

from clients.fetch_client import CachedFetchClient, request_fingerprint
from core.cache import MemoryCache
from core.errors import ExternalServiceError, NotFoundError, ValidationError


def _patch_transport(monkeypatch, handler):
    orig = httpx.AsyncClient

    def patched_async_client(*args, **kwargs):
        kwargs["transport"] = httpx.MockTransport(handler)
        return orig(*args, **kwargs)

    monkeypatch.setattr(httpx, "AsyncClient", patched_async_client)


def _client(clock, **cache_kwargs):
    cache_kwargs.setdefault("max_size", 10)
    cache = MemoryCache(clock=clock, **cache_kwargs)
    return CachedFetchClient(cache, timeout=5.0, verify=False)


def test_request_fingerprint_sorts_params():
    a = request_fingerprint("get", " https://api.example/items ", {"b": 2, "a": 1})
    b = request_fingerprint("GET", "https://api.example/items", {"a": "1", "b": "2"})

    assert a == b == "GET https://api.example/items?a=1&b=2"
    assert request_fingerprint("GET", "https://x.test/p?q=1", {"z": 0}) == "GET https://x.test/p?q=1&z=0"
    assert request_fingerprint("GET", "https://x.test/p") == "GET https://x.test/p"


@pytest.mark.asyncio
async def test_fetch_text_is_memoized(monkeypatch, clock):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(str(request.url))
        assert request.headers["User-Agent"] == CachedFetchClient.USER_AGENT
        return httpx.Response(200, text="hello")

    _patch_transport(monkeypatch, handler)
    c = _client(clock)

    assert await c.fetch_text("https://api.example/greeting", params={"lang": "en"}) == "hello"
    assert await c.fetch_text("https://api.example/greeting", params={"lang": "en"}) == "hello"

    assert calls == ["https://api.example/greeting?lang=en"]
    assert c.cache.stats().hit_count == 1


@pytest.mark.asyncio
async def test_fetch_refetches_after_ttl(monkeypatch, clock):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(1)
        return httpx.Response(200, text=f"v{len(calls)}")

    _patch_transport(monkeypatch, handler)
    c = _client(clock)

    assert await c.fetch_text("https://api.example/x", ttl=10.0) == "v1"
    clock.advance(10.0)
    assert await c.fetch_text("https://api.example/x", ttl=10.0) == "v2"


@pytest.mark.asyncio
async def test_fetch_json_parses_body(monkeypatch, clock):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"ok": True, "items": [1, 2]})

    _patch_transport(monkeypatch, handler)
    c = _client(clock)

    assert await c.fetch_json("https://api.example/data") == {"ok": True, "items": [1, 2]}


@pytest.mark.asyncio
async def test_fetch_json_invalid_body_raises(monkeypatch, clock):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>")

    _patch_transport(monkeypatch, handler)
    c = _client(clock)

    with pytest.raises(ExternalServiceError):
        await c.fetch_json("https://api.example/data")


@pytest.mark.asyncio
async def test_fetch_404_raises_not_found_and_is_not_cached(monkeypatch, clock):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(1)
        return httpx.Response(404)

    _patch_transport(monkeypatch, handler)
    c = _client(clock)

    for _ in range(2):
        with pytest.raises(NotFoundError):
            await c.fetch_text("https://api.example/missing")

    assert len(calls) == 2
    assert len(c.cache) == 0


@pytest.mark.asyncio
async def test_fetch_http_error_maps_to_external_error(monkeypatch, clock):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="boom")

    _patch_transport(monkeypatch, handler)
    c = _client(clock)

    with pytest.raises(ExternalServiceError):
        await c.fetch_text("https://api.example/broken")


@pytest.mark.asyncio
async def test_fetch_transport_error_maps_to_external_error(monkeypatch, clock):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    _patch_transport(monkeypatch, handler)
    c = _client(clock)

    with pytest.raises(ExternalServiceError):
        await c.fetch_text("https://api.example/down")


@pytest.mark.asyncio
@pytest.mark.parametrize("url", ["", "   ", "ftp://files.example/a", "not a url"])
async def test_fetch_rejects_invalid_urls(url, clock):
    c = _client(clock)

    with pytest.raises(ValidationError):
        await c.fetch_text(url)


@pytest.mark.asyncio
async def test_invalidate_by_url_prefix(monkeypatch, clock):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text=request.url.path)

    _patch_transport(monkeypatch, handler)
    c = _client(clock)

    await c.fetch_text("https://api.example/users/1")
    await c.fetch_text("https://api.example/users/2")
    await c.fetch_text("https://api.example/posts/1")

    assert c.invalidate("https://api.example/users/") == 2
    assert c.cache.keys() == ["GET https://api.example/posts/1"]
