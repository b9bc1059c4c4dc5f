from __future__ import annotations

import io
import os

import pytest

from doccache.content_cache import ContentCache

# Keep logfire local and quiet when the app modules are imported
os.environ.setdefault("LOGFIRE_SEND_TO_LOGFIRE", "false")
os.environ.setdefault("LOGFIRE_CONSOLE", "false")


class FakeClock:
    """Manually advanced clock for expiry tests."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeDownloader:
    """Stands in for doccache.download.download, keyed by URL."""

    def __init__(self, responses: dict):
        self.responses = responses
        self.calls: list[tuple[str, str]] = []

    async def __call__(self, url: str, accept: str) -> tuple[bytes, str]:
        self.calls.append((url, accept))
        result = self.responses[url]
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def anyio_backend() -> str:
    """Force tests to use asyncio backend only."""
    return "asyncio"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> ContentCache:
    return ContentCache(clock=clock, wall_clock=clock)


def build_pdf(pages: list[str], title: str | None = None) -> bytes:
    """Build a minimal PDF with one line of Helvetica text per page."""
    page_count = len(pages)
    font_id = 3 + 2 * page_count
    info_id = font_id + 1
    kids = " ".join(f"{3 + 2 * i} 0 R" for i in range(page_count))

    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        f"<< /Type /Pages /Kids [{kids}] /Count {page_count} >>".encode(),
    ]
    for i, text in enumerate(pages):
        stream = f"BT /F1 18 Tf 72 720 Td ({text}) Tj ET".encode()
        objects.append(
            f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
            f"/Resources << /Font << /F1 {font_id} 0 R >> >> "
            f"/Contents {4 + 2 * i} 0 R >>".encode()
        )
        objects.append(
            f"<< /Length {len(stream)} >>\nstream\n".encode() + stream + b"\nendstream"
        )
    objects.append(b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>")
    objects.append(f"<< /Title ({title or ''}) >>".encode())

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += f"{number} 0 obj\n".encode() + body + b"\nendobj\n"
    xref_at = len(out)
    out += f"xref\n0 {len(objects) + 1}\n0000000000 65535 f \n".encode()
    for offset in offsets:
        out += f"{offset:010d} 00000 n \n".encode()
    trailer = f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R"
    if title:
        trailer += f" /Info {info_id} 0 R"
    out += f"{trailer} >>\nstartxref\n{xref_at}\n%%EOF\n".encode()
    return bytes(out)


def build_xlsx(sheets: dict[str, list[list]], title: str | None = None) -> bytes:
    from openpyxl import Workbook

    workbook = Workbook()
    workbook.remove(workbook.active)
    for name, rows in sheets.items():
        sheet = workbook.create_sheet(name)
        for row in rows:
            sheet.append(row)
    if title:
        workbook.properties.title = title
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


ARTICLE_HTML = """<!DOCTYPE html>
<html lang="en">
<head><title>Quarterly Plans</title></head>
<body>
  <nav><a href="/">Home</a></nav>
  <article>
    <h1>Quarterly Plans</h1>
    <p>The team will migrate the billing service to the new cluster during the
    first two weeks of the quarter, followed by a load test of the invoicing
    pipeline and a review of the alerting thresholds.</p>
    <p>Documentation for every changed endpoint is published before the
    rollout, and support staff receive a walkthrough of the new dashboards.</p>
    <p>Once the migration is complete the old cluster is drained, its storage
    volumes are archived for ninety days, and the capacity is returned to the
    shared pool so other teams can schedule their own upgrades.</p>
  </article>
  <footer>Copyright</footer>
</body>
</html>
"""


@pytest.fixture
def pdf_bytes() -> bytes:
    return build_pdf(["Hello World", "Second page"], title="Doc A")


@pytest.fixture
def xlsx_bytes() -> bytes:
    return build_xlsx(
        {"Sales": [["Region", "Total"], ["North", 120], ["South", None]]},
        title="Sales Report",
    )
