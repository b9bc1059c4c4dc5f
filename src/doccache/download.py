from __future__ import annotations

import logging

import httpx

from doccache import config
from doccache.errors import DownloadError, SourceNotFoundError

log = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)

_STATUS_MESSAGES = {
    403: "Access denied to document (403)",
    404: "Document not found (404)",
    413: "Document too large for server to handle (413)",
}


async def download(
    url: str,
    accept: str = "*/*",
    max_bytes: int | None = None,
    timeout: float | None = None,
) -> tuple[bytes, str]:
    """Download a document, returning its bytes and content type.

    Raises:
        SourceNotFoundError: If the server answers 404.
        DownloadError: On timeouts, other HTTP errors, or bodies over max_bytes.
    """
    max_bytes = config.MAX_DOWNLOAD_BYTES if max_bytes is None else max_bytes
    headers = {"User-Agent": USER_AGENT, "Accept": accept}
    try:
        async with httpx.AsyncClient(
            follow_redirects=True,
            max_redirects=config.MAX_REDIRECTS,
            timeout=config.HTTP_TIMEOUT if timeout is None else timeout,
        ) as client:
            async with client.stream("GET", url, headers=headers) as response:
                response.raise_for_status()
                declared = response.headers.get("content-length")
                if declared and declared.isdigit() and int(declared) > max_bytes:
                    raise DownloadError(
                        f"Document exceeds {max_bytes} bytes (declared {declared})",
                        status_code=413,
                    )
                chunks: list[bytes] = []
                received = 0
                async for chunk in response.aiter_bytes():
                    received += len(chunk)
                    if received > max_bytes:
                        raise DownloadError(
                            f"Document exceeds {max_bytes} bytes", status_code=413
                        )
                    chunks.append(chunk)
                content_type = response.headers.get("content-type", "")
    except httpx.TimeoutException as e:
        raise DownloadError(
            "Download timeout - file too large or server too slow"
        ) from e
    except httpx.HTTPStatusError as e:
        status = e.response.status_code
        message = _STATUS_MESSAGES.get(status, f"Download failed with HTTP {status}")
        if status == 404:
            raise SourceNotFoundError(message) from e
        raise DownloadError(message, status_code=status) from e
    except httpx.TooManyRedirects as e:
        raise DownloadError(f"Too many redirects fetching {url}") from e
    except httpx.RequestError as e:
        raise DownloadError(f"Failed to download {url}: {e}") from e

    data = b"".join(chunks)
    log.info("Downloaded %s (%.2fMB, %s)", url, len(data) / (1024 * 1024), content_type or "unknown type")
    return data, content_type
