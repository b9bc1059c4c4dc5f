from __future__ import annotations

import io

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from doccache.errors import ExtractionError
from doccache.models import ExtractedText


def extract_pdf_text(pdf_bytes: bytes) -> ExtractedText:
    """Extract text, page count and title from PDF bytes."""
    try:
        reader = PdfReader(io.BytesIO(pdf_bytes))
        text = "\n".join(page.extract_text() or "" for page in reader.pages)
        title = reader.metadata.title if reader.metadata else None
    except PdfReadError as e:
        raise ExtractionError(f"Could not read PDF: {e}") from e

    if not text.strip():
        raise ExtractionError(
            "No text could be extracted from the PDF - file may be image-based or corrupted"
        )
    return ExtractedText(text=text, pages=len(reader.pages), title=title or None)
