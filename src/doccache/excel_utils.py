from __future__ import annotations

import io
import zipfile

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from doccache.errors import ExtractionError
from doccache.models import ExtractedText


def rows_to_text(rows: list[tuple], sheet_name: str) -> str:
    """Render a sheet as one "header: value" line per data row.

    The first row is the header; blank header cells become colN.
    """
    rows = [row for row in rows if row and any(cell is not None for cell in row)]
    if not rows:
        return ""
    headers = [
        str(h).strip() if h is not None and str(h).strip() else f"col{idx}"
        for idx, h in enumerate(rows[0])
    ]
    lines = [f"### Sheet: {sheet_name}"]
    for row in rows[1:]:
        pairs = [
            f"{header}: {row[idx] if idx < len(row) and row[idx] is not None else ''}"
            for idx, header in enumerate(headers)
        ]
        lines.append(", ".join(pairs))
    return "\n".join(lines) + "\n"


def extract_excel_text(xlsx_bytes: bytes) -> ExtractedText:
    """Extract every sheet of an .xlsx workbook as structured text.

    Spreadsheets have no pages, so pages is always 0.
    """
    try:
        workbook = load_workbook(io.BytesIO(xlsx_bytes), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile) as e:
        raise ExtractionError(f"Could not read Excel workbook: {e}") from e

    try:
        parts = [
            rows_to_text(list(sheet.iter_rows(values_only=True)), sheet.title)
            for sheet in workbook.worksheets
        ]
        title = workbook.properties.title
    finally:
        workbook.close()

    text = "\n".join(parts)
    if not text.strip():
        raise ExtractionError("No text could be extracted from the Excel file")
    return ExtractedText(text=text, pages=0, title=title or None)
