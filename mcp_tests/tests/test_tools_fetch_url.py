import pytest

from core.errors import ValidationError
from tools import fetch_url as fetch_url_tool


class FakeFetchClient:
    def __init__(self):
        self.calls = []

    async def fetch_text(self, url, *, params=None, ttl=None):
        self.calls.append(("text", url, params, ttl))
        return "body"

    async def fetch_json(self, url, *, params=None, ttl=None):
        self.calls.append(("json", url, params, ttl))
        return {"ok": True}


@pytest.mark.asyncio
async def test_fetch_url_tool_validates_missing_url(dummy_mcp):
    fetch_url_tool.register(dummy_mcp, fetch_client=FakeFetchClient())
    fn = dummy_mcp.tools["fetch_url"]

    with pytest.raises(ValidationError):
        await fn(url="  ")


@pytest.mark.asyncio
async def test_fetch_url_tool_rejects_negative_ttl(dummy_mcp):
    fetch_url_tool.register(dummy_mcp, fetch_client=FakeFetchClient())
    fn = dummy_mcp.tools["fetch_url"]

    with pytest.raises(ValidationError):
        await fn(url="https://api.example/x", ttl_seconds=-1)


@pytest.mark.asyncio
async def test_fetch_url_tool_delegates_text_and_json(dummy_mcp):
    client = FakeFetchClient()
    fetch_url_tool.register(dummy_mcp, fetch_client=client)
    fn = dummy_mcp.tools["fetch_url"]

    assert await fn(url="https://api.example/x", params={"a": "1"}, ttl_seconds=30) == "body"
    assert await fn(url="https://api.example/y", as_json=True) == {"ok": True}

    assert client.calls == [
        ("text", "https://api.example/x", {"a": "1"}, 30),
        ("json", "https://api.example/y", None, None),
    ]
