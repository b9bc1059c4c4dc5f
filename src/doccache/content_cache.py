"""In-memory cache for extracted document text.

Keyed by the normalised source identifier (URL, or absolute path for local
files). Bounded by entry count and by the summed size of the original
artifacts, entries expire after a fixed age, and hit/miss counters live for
the lifetime of the process.

Eviction is by insertion time: reading an entry does not renew it, so a hot
entry is evicted as eagerly as a cold one of the same age.

One instance is built by the entrypoint and passed to whatever needs it.
Cache is lost on process restart.
"""
from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable

log = logging.getLogger(__name__)

MAX_ENTRIES = 50
MAX_TOTAL_BYTES = 100 * 1024 * 1024
EXPIRY_SECONDS = 24 * 60 * 60
CLEANUP_INTERVAL_SECONDS = 60 * 60

_MB = 1024 * 1024


@dataclass
class CacheEntry:
    key: str
    content: str
    created_at: float  # clock() value, drives expiry and eviction
    timestamp: float  # wall clock, for display only
    size_bytes: int  # size of the original artifact, not of content
    pages: int = 0
    title: str | None = None


@dataclass
class CacheStats:
    total_entries: int = 0
    total_size_bytes: int = 0
    cache_hits: int = 0
    cache_misses: int = 0
    last_cleanup: float = 0.0  # wall clock


class ContentCache:
    def __init__(
        self,
        max_entries: int = MAX_ENTRIES,
        max_total_bytes: int = MAX_TOTAL_BYTES,
        expiry_seconds: float = EXPIRY_SECONDS,
        cleanup_interval_seconds: float = CLEANUP_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], float] = time.time,
    ):
        self.max_entries = max_entries
        self.max_total_bytes = max_total_bytes
        self.expiry_seconds = expiry_seconds
        self.cleanup_interval_seconds = cleanup_interval_seconds
        self._clock = clock
        self._wall_clock = wall_clock
        self._entries: dict[str, CacheEntry] = {}
        self._stats = CacheStats(last_cleanup=wall_clock())
        self._last_cleanup_tick = clock()
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get(self, key: str) -> str | None:
        """Return cached content for key, or None if missing or expired."""
        with self._lock:
            self._maybe_cleanup()

            entry = self._entries.get(key)
            if entry is None:
                self._stats.cache_misses += 1
                log.info("Cache MISS for: %s", key)
                return None

            if self._clock() - entry.created_at > self.expiry_seconds:
                log.info("Cache EXPIRED for: %s", key)
                self._remove(key)
                self._stats.cache_misses += 1
                return None

            self._stats.cache_hits += 1
            log.info(
                "Cache HIT for: %s (saved %.2fMB download)",
                key,
                entry.size_bytes / _MB,
            )
            return entry.content

    def set(
        self,
        key: str,
        content: str,
        size_bytes: int,
        pages: int = 0,
        title: str | None = None,
    ) -> None:
        """Store extracted content for key, evicting the oldest entries as needed.

        An entry larger than max_total_bytes on its own is still stored, after
        every other entry has been evicted.
        """
        if size_bytes < 0:
            raise ValueError(f"size_bytes must be >= 0, got {size_bytes}")

        with self._lock:
            self._ensure_space(size_bytes)

            if key in self._entries:
                self._remove(key)

            self._entries[key] = CacheEntry(
                key=key,
                content=content,
                created_at=self._clock(),
                timestamp=self._wall_clock(),
                size_bytes=size_bytes,
                pages=pages,
                title=title,
            )
            self._stats.total_entries += 1
            self._stats.total_size_bytes += size_bytes

            log.info("Cached: %s (%.2fMB, %d pages)", key, size_bytes / _MB, pages)
            log.debug(
                "Cache stats: %d entries, %.2fMB total",
                self._stats.total_entries,
                self._stats.total_size_bytes / _MB,
            )

    def remove(self, key: str) -> bool:
        """Remove one entry. Returns True if it existed."""
        with self._lock:
            return self._remove(key)

    def clear(self) -> None:
        """Drop every entry. Hit and miss counters are kept."""
        with self._lock:
            count = len(self._entries)
            self._entries = {}
            self._stats.total_entries = 0
            self._stats.total_size_bytes = 0
            self._stats.last_cleanup = self._wall_clock()
            self._last_cleanup_tick = self._clock()
            log.info("Cache cleared: %d entries removed", count)

    def stats(self) -> dict:
        with self._lock:
            s = self._stats
            total_requests = s.cache_hits + s.cache_misses
            hit_rate = s.cache_hits / total_requests * 100 if total_requests else 0
            return {
                "total_entries": s.total_entries,
                "total_size_bytes": s.total_size_bytes,
                "cache_hits": s.cache_hits,
                "cache_misses": s.cache_misses,
                "last_cleanup": s.last_cleanup,
                "hit_rate": round(hit_rate, 2),
            }

    def list_entries(self) -> list[dict]:
        """Metadata for every stored entry, including any not yet swept as expired."""
        with self._lock:
            return [
                {
                    "url": entry.key,
                    "pages": entry.pages,
                    "title": entry.title,
                    "timestamp": entry.timestamp,
                    "size_mb": round(entry.size_bytes / _MB, 2),
                }
                for entry in self._entries.values()
            ]

    def _remove(self, key: str) -> bool:
        entry = self._entries.pop(key, None)
        if entry is None:
            return False
        self._stats.total_entries -= 1
        self._stats.total_size_bytes -= entry.size_bytes
        log.debug("Removed from cache: %s", key)
        return True

    def _ensure_space(self, new_size: int) -> None:
        while (
            self._stats.total_size_bytes + new_size > self.max_total_bytes
            and self._entries
        ):
            self._evict_oldest()

        while len(self._entries) >= self.max_entries and self._entries:
            self._evict_oldest()

    def _evict_oldest(self) -> None:
        # min() keeps the first of equal timestamps, i.e. insertion order
        oldest = min(self._entries.values(), key=lambda e: e.created_at)
        log.info("Evicting oldest cache entry: %s", oldest.key)
        self._remove(oldest.key)

    def _maybe_cleanup(self) -> None:
        now = self._clock()
        if now - self._last_cleanup_tick > self.cleanup_interval_seconds:
            self._cleanup_expired(now)
            self._last_cleanup_tick = now
            self._stats.last_cleanup = self._wall_clock()

    def _cleanup_expired(self, now: float) -> None:
        expired = [
            key
            for key, entry in self._entries.items()
            if now - entry.created_at > self.expiry_seconds
        ]
        if expired:
            log.info("Cleaning up %d expired cache entries", len(expired))
        for key in expired:
            self._remove(key)
