from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Awaitable, Callable

from doccache import config
from doccache.content_cache import ContentCache
from doccache.download import download
from doccache.errors import InvalidSourceError, SourceNotFoundError
from doccache.excel_utils import extract_excel_text
from doccache.models import ExtractedDocument, ExtractedText
from doccache.pdf_utils import extract_pdf_text
from doccache.url_utils import is_valid_url, normalize_url
from doccache.web_utils import extract_web_text

log = logging.getLogger(__name__)

Downloader = Callable[[str, str], Awaitable[tuple[bytes, str]]]

PDF, EXCEL, WEB = "pdf", "excel", "web"

_ACCEPT = {
    PDF: "application/pdf,*/*",
    EXCEL: (
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet, "
        "application/vnd.ms-excel, */*"
    ),
    WEB: "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}

# Substrings expected in the response content type for each kind
_EXPECTED_TYPES = {PDF: ("pdf",), EXCEL: ("sheet", "excel"), WEB: ("html", "xml")}

_TEXT_LIMITS = {
    PDF: config.DOCUMENT_TEXT_LIMIT,
    EXCEL: config.DOCUMENT_TEXT_LIMIT,
    WEB: config.WEB_TEXT_LIMIT,
}

_LOCAL_SUFFIXES = {".pdf": PDF, ".xlsx": EXCEL, ".xlsm": EXCEL}

_WHITESPACE_RE = re.compile(r"\s+")


def classify(url: str) -> str:
    """Guess the document kind from the URL alone."""
    lower = url.lower()
    if (
        lower.endswith(".pdf")
        or ".pdf?" in lower
        or "pdf=" in lower
        or "filetype=pdf" in lower
    ):
        return PDF
    if (
        lower.endswith(".xlsx")
        or lower.endswith(".xls")
        or ".xlsx?" in lower
        or ".xls?" in lower
    ):
        return EXCEL
    return WEB


def clean_text(text: str, limit: int) -> str:
    """Collapse whitespace runs and truncate to limit characters."""
    return _WHITESPACE_RE.sub(" ", text).strip()[:limit]


def is_local_path(source: str) -> bool:
    if source.startswith(("/", "./", "../", "~")):
        return True
    return "://" not in source and Path(source).is_file()


def _extract(kind: str, data: bytes) -> ExtractedText:
    if kind == PDF:
        return extract_pdf_text(data)
    if kind == EXCEL:
        return extract_excel_text(data)
    # trafilatura detects the page encoding itself
    return extract_web_text(data)


class DocumentFetcher:
    """Fetches and extracts documents, going through the cache first.

    The cache is only written after a successful download and extraction, so
    a failed fetch leaves it untouched.
    """

    def __init__(self, cache: ContentCache, downloader: Downloader = download):
        self.cache = cache
        self._download = downloader

    async def fetch_text(self, source: str) -> ExtractedDocument:
        """Fetch a URL or local file path.

        Raises:
            DocumentError: Any subclass, if the source cannot be fetched or
                yields no text.
        """
        source = source.strip()
        if is_local_path(source):
            return self.fetch_local(source)
        return await self.fetch_url(source)

    async def fetch_url(self, url: str) -> ExtractedDocument:
        key = normalize_url(url)
        if not is_valid_url(key):
            raise InvalidSourceError(f"Invalid URL format: {url}")

        cached = self.cache.get(key)
        if cached is not None:
            return ExtractedDocument(source=url, key=key, text=cached, from_cache=True)

        kind = classify(key)
        log.info("Downloading %s from: %s", kind, key)
        data, content_type = await self._download(key, _ACCEPT[kind])
        if content_type and not any(t in content_type for t in _EXPECTED_TYPES[kind]):
            log.warning("Expected %s but got content-type: %s", kind, content_type)

        return self._store(url, key, kind, data)

    def fetch_local(self, path: str) -> ExtractedDocument:
        resolved = Path(path).expanduser().resolve()
        key = str(resolved)
        kind = _LOCAL_SUFFIXES.get(resolved.suffix.lower())
        if kind is None:
            raise InvalidSourceError(f"Unsupported file type: {resolved.suffix or path}")
        if not resolved.is_file():
            raise SourceNotFoundError(f"File not found at {resolved}")

        cached = self.cache.get(key)
        if cached is not None:
            return ExtractedDocument(source=path, key=key, text=cached, from_cache=True)

        return self._store(path, key, kind, resolved.read_bytes())

    def _store(self, source: str, key: str, kind: str, data: bytes) -> ExtractedDocument:
        extracted = _extract(kind, data)
        text = clean_text(extracted.text, _TEXT_LIMITS[kind])
        log.info(
            "Extracted %d characters from %s (pages: %d, title: %s)",
            len(extracted.text),
            key,
            extracted.pages,
            extracted.title or "N/A",
        )
        self.cache.set(key, text, len(data), extracted.pages, extracted.title)
        return ExtractedDocument(
            source=source,
            key=key,
            text=text,
            pages=extracted.pages,
            title=extracted.title,
        )
