from __future__ import annotations

import logging
import os

from dotenv import load_dotenv
load_dotenv()

import logfire
from doccache import config
logfire.configure(
    service_name="doccache-server",
    environment=config.ENVIRONMENT,
)
logfire.instrument_httpx()
logging.basicConfig(level=logging.INFO, handlers=[logfire.LogfireLoggingHandler()])

from fastapi import FastAPI, HTTPException

from doccache.content_cache import ContentCache
from doccache.errors import (
    DocumentError,
    DownloadError,
    ExtractionError,
    InvalidSourceError,
    SourceNotFoundError,
)
from doccache.fetcher import DocumentFetcher, is_local_path
from doccache.models import (
    CacheListResponse,
    CacheStatsResponse,
    ExtractedDocument,
    ExtractRequest,
    MessageResponse,
    RemoveRequest,
    RemoveResponse,
)

log = logging.getLogger(__name__)

_ERROR_STATUS: list[tuple[type[DocumentError], int]] = [
    (InvalidSourceError, 400),
    (SourceNotFoundError, 404),
    (ExtractionError, 422),
    (DownloadError, 502),
]


def _status_for(error: DocumentError) -> int:
    for error_type, status in _ERROR_STATUS:
        if isinstance(error, error_type):
            return status
    return 500


def create_app(
    cache: ContentCache | None = None,
    fetcher: DocumentFetcher | None = None,
) -> FastAPI:
    """Build the API around a single cache instance shared by every route."""
    cache = cache if cache is not None else config.build_cache()
    fetcher = fetcher if fetcher is not None else DocumentFetcher(cache)

    app = FastAPI(title="doccache", description="Cached document text extraction")
    logfire.instrument_fastapi(app)
    app.state.cache = cache
    app.state.fetcher = fetcher

    # -----------------------------------------------------------------------
    # Health check
    # -----------------------------------------------------------------------
    @app.get("/health")
    async def health():
        return {"status": "ok"}

    # -----------------------------------------------------------------------
    # Extraction
    # -----------------------------------------------------------------------
    @app.post("/extract", response_model=ExtractedDocument)
    async def extract(request: ExtractRequest):
        """Fetch a URL and return its extracted text.

        Local file paths are refused; only the MCP server reads local files.
        """
        if is_local_path(request.source.strip()):
            raise HTTPException(status_code=400, detail="Local file paths are not accepted")
        try:
            return await fetcher.fetch_url(request.source.strip())
        except DocumentError as e:
            log.warning("Failed to extract %s: %s", request.source, e)
            raise HTTPException(status_code=_status_for(e), detail=str(e))

    # -----------------------------------------------------------------------
    # Cache management
    # -----------------------------------------------------------------------
    @app.get("/cache/stats", response_model=CacheStatsResponse)
    async def cache_stats():
        return {"message": "Document cache statistics", "stats": cache.stats()}

    @app.get("/cache/list", response_model=CacheListResponse)
    async def cache_list():
        entries = cache.list_entries()
        return {"message": "Cached documents", "count": len(entries), "urls": entries}

    @app.delete("/cache/clear", response_model=MessageResponse)
    async def cache_clear():
        cache.clear()
        return {"message": "Document cache cleared successfully"}

    @app.delete("/cache/remove", response_model=RemoveResponse)
    async def cache_remove(request: RemoveRequest):
        removed = cache.remove(request.url)
        return {
            "message": "URL removed from cache" if removed else "URL not found in cache",
            "removed": removed,
            "url": request.url,
        }

    return app


app = create_app()


def main():
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.environ.get("PORT", "8000")))


if __name__ == "__main__":
    main()
