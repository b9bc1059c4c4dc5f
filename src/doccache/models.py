from __future__ import annotations

from pydantic import BaseModel, Field


class ExtractedText(BaseModel):
    """Text pulled out of a single PDF, workbook or web page."""

    text: str
    pages: int = 0  # 0 for spreadsheets and web pages
    title: str | None = None


class ExtractedDocument(BaseModel):
    """Result of fetching a source through the cache."""

    source: str
    key: str  # normalised URL or absolute path used as the cache key
    text: str
    pages: int | None = None  # unknown when served from cache
    title: str | None = None
    from_cache: bool = False


class ExtractRequest(BaseModel):
    """Request body for POST /extract."""

    source: str = Field(min_length=1)


class CacheStats(BaseModel):
    total_entries: int
    total_size_bytes: int
    cache_hits: int
    cache_misses: int
    last_cleanup: float
    hit_rate: float


class CachedEntry(BaseModel):
    url: str
    pages: int
    title: str | None = None
    timestamp: float
    size_mb: float


class CacheStatsResponse(BaseModel):
    message: str
    stats: CacheStats


class CacheListResponse(BaseModel):
    message: str
    count: int
    urls: list[CachedEntry]


class RemoveRequest(BaseModel):
    """Request body for DELETE /cache/remove."""

    url: str = Field(min_length=1)


class RemoveResponse(BaseModel):
    message: str
    removed: bool
    url: str


class MessageResponse(BaseModel):
    message: str
