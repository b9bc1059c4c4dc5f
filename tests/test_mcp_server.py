"""Tests for the MCP cache tools."""

import pytest
from fastmcp import Client

from doccache import mcp_server


@pytest.fixture(autouse=True)
def empty_cache():
    mcp_server.cache.clear()
    yield
    mcp_server.cache.clear()


async def _call(tool: str, **arguments) -> str:
    async with Client(mcp_server.mcp) as client:
        result = await client.call_tool(tool, arguments)
    return result.content[0].text


class TestCacheTools:
    @pytest.mark.anyio
    async def test_list_empty(self) -> None:
        assert await _call("list_cached_documents") == "The document cache is empty."

    @pytest.mark.anyio
    async def test_list_and_remove(self) -> None:
        mcp_server.cache.set("https://example.com/a.pdf", "text", 1048576, 3, "Doc A")

        listing = await _call("list_cached_documents")
        assert "https://example.com/a.pdf" in listing
        assert "Pages: 3" in listing
        assert "Size: 1.0MB" in listing

        removed = await _call("remove_cached_document", url="https://example.com/a.pdf")
        assert removed == "Removed https://example.com/a.pdf from cache."
        missing = await _call("remove_cached_document", url="https://example.com/a.pdf")
        assert "was not in the cache" in missing

    @pytest.mark.anyio
    async def test_stats_and_clear(self) -> None:
        mcp_server.cache.set("a", "text", 10)
        mcp_server.cache.set("b", "text", 10)

        assert "Entries: 2" in await _call("cache_stats")
        assert await _call("clear_cache") == "Cleared 2 cached documents."
        assert len(mcp_server.cache) == 0

    @pytest.mark.anyio
    async def test_extract_reports_errors(self) -> None:
        text = await _call("extract_document", source="not a url")
        assert text.startswith("Could not extract not a url")
