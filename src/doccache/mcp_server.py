from __future__ import annotations

import logging

from dotenv import load_dotenv
load_dotenv()

import logfire
from doccache import config
logfire.configure(
    service_name="doccache-mcp",
    environment=config.ENVIRONMENT,
)
logfire.instrument_httpx()
logging.basicConfig(level=logging.INFO, handlers=[logfire.LogfireLoggingHandler()])

from fastmcp import FastMCP

from doccache.errors import DocumentError
from doccache.fetcher import DocumentFetcher

mcp = FastMCP(name="doccache")
cache = config.build_cache()
fetcher = DocumentFetcher(cache)


@mcp.tool()
async def extract_document(source: str) -> str:
    """Get the text of a PDF, Excel workbook or web page.

    Accepts a URL or a local file path. Text is cached per source for 24
    hours, so asking again for the same document is fast and does not
    download it again.

    Args:
        source: URL (scheme optional, https is assumed) or file path.
    """
    try:
        doc = await fetcher.fetch_text(source)
    except DocumentError as e:
        return f"Could not extract {source}: {e}"

    header = f"# {doc.title or doc.key}"
    if doc.pages:
        header += f" ({doc.pages} pages)"
    if doc.from_cache:
        header += " [cached]"
    return f"{header}\n\n{doc.text}"


@mcp.tool()
def cache_stats() -> str:
    """Show document cache statistics: entries, size, hits, misses and hit rate."""
    s = cache.stats()
    return (
        f"Entries: {s['total_entries']} | "
        f"Size: {s['total_size_bytes'] / (1024 * 1024):.2f}MB | "
        f"Hits: {s['cache_hits']} | Misses: {s['cache_misses']} | "
        f"Hit rate: {s['hit_rate']}%"
    )


@mcp.tool()
def list_cached_documents() -> str:
    """List every cached document with its page count, title and size."""
    entries = cache.list_entries()
    if not entries:
        return "The document cache is empty."
    lines = []
    for entry in entries:
        lines.append(
            f"- `{entry['url']}`\n"
            f"  Title: {entry['title'] or 'Unknown'} | "
            f"Pages: {entry['pages']} | Size: {entry['size_mb']}MB"
        )
    return "\n".join(lines)


@mcp.tool()
def clear_cache() -> str:
    """Drop every cached document. Hit and miss counters are kept."""
    count = len(cache)
    cache.clear()
    return f"Cleared {count} cached document{'s' if count != 1 else ''}."


@mcp.tool()
def remove_cached_document(url: str) -> str:
    """Remove one document from the cache so the next request downloads it again.

    Args:
        url: The cache key exactly as shown by list_cached_documents.
    """
    if cache.remove(url):
        return f"Removed {url} from cache."
    return f"{url} was not in the cache."


def main():
    mcp.run()


if __name__ == "__main__":
    main()
