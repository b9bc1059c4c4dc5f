from __future__ import annotations

import os

from doccache import content_cache

_MB = 1024 * 1024


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    return int(raw) if raw else default


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    return float(raw) if raw else default


ENVIRONMENT = os.environ.get("RAILWAY_ENVIRONMENT", "development")

CACHE_MAX_ENTRIES = _int_env("DOCCACHE_MAX_ENTRIES", content_cache.MAX_ENTRIES)
CACHE_MAX_TOTAL_BYTES = _int_env(
    "DOCCACHE_MAX_TOTAL_MB", content_cache.MAX_TOTAL_BYTES // _MB
) * _MB
CACHE_EXPIRY_SECONDS = _float_env(
    "DOCCACHE_EXPIRY_HOURS", content_cache.EXPIRY_SECONDS / 3600
) * 3600
CACHE_CLEANUP_INTERVAL_SECONDS = _float_env(
    "DOCCACHE_CLEANUP_MINUTES", content_cache.CLEANUP_INTERVAL_SECONDS / 60
) * 60

# Download limits for remote documents
MAX_DOWNLOAD_BYTES = _int_env("DOCCACHE_MAX_DOWNLOAD_MB", 10) * _MB
HTTP_TIMEOUT = _float_env("DOCCACHE_HTTP_TIMEOUT", 15.0)
MAX_REDIRECTS = 3

# Extracted text is truncated to these lengths before it is cached
DOCUMENT_TEXT_LIMIT = 4000
WEB_TEXT_LIMIT = 3000


def build_cache() -> content_cache.ContentCache:
    """Build the process-wide cache from environment settings."""
    return content_cache.ContentCache(
        max_entries=CACHE_MAX_ENTRIES,
        max_total_bytes=CACHE_MAX_TOTAL_BYTES,
        expiry_seconds=CACHE_EXPIRY_SECONDS,
        cleanup_interval_seconds=CACHE_CLEANUP_INTERVAL_SECONDS,
    )
