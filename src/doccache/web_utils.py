from __future__ import annotations

import trafilatura

from doccache.errors import ExtractionError
from doccache.models import ExtractedText

MIN_PAGE_TEXT = 50


def extract_web_text(html: str | bytes) -> ExtractedText:
    """Extract the main readable text and title of an HTML page.

    Raw bytes are accepted so the charset is detected from the document.
    """
    if not html or not html.strip():
        raise ExtractionError("Page is empty")

    text = trafilatura.extract(html, include_comments=False, favor_recall=True) or ""
    if len(text.strip()) < MIN_PAGE_TEXT:
        raise ExtractionError("Could not extract useful content from the page")

    metadata = trafilatura.extract_metadata(html)
    title = metadata.title if metadata is not None else None
    return ExtractedText(text=text, pages=0, title=title or None)
