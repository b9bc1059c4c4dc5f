"""URL helpers used to build stable cache keys.

Two references to the same document must normalise to the same string or the
cache never hits, so normalize_url is idempotent on its own output.
"""
from __future__ import annotations

import logging
import re
from urllib.parse import quote, urlsplit

log = logging.getLogger(__name__)

_SCHEME_RE = re.compile(r"^https?://")
_URL_IN_TEXT_RE = re.compile(r"https?://[^\s]+")

# Left unescaped, on top of letters, digits and "_.-~" which quote() never escapes
_SAFE_CHARS = "!*'()/?=&#"


def normalize_url(url: str) -> str:
    """Trim, default the scheme to https and percent-encode path segments.

    Segments that already contain a "%" are assumed to be encoded and are
    left alone.
    """
    normalized = url.strip()
    if not _SCHEME_RE.match(normalized):
        normalized = "https://" + normalized

    parts = normalized.split("/")
    protocol, domain, path_parts = parts[0], parts[2], parts[3:]
    if not domain:
        log.warning("Failed to normalize URL: %s, using original", url)
        return url

    encoded = [part if "%" in part else quote(part, safe=_SAFE_CHARS) for part in path_parts]

    final = f"{protocol}//{domain}"
    if encoded:
        final += "/" + "/".join(encoded)
    if final != url:
        log.debug("URL normalized: %s -> %s", url, final)
    return final


def is_valid_url(url: str) -> bool:
    try:
        parsed = urlsplit(normalize_url(url))
        hostname = parsed.hostname
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(hostname) and " " not in hostname


def filename_from_url(url: str) -> str | None:
    try:
        path = urlsplit(normalize_url(url)).path
    except ValueError:
        return None
    filename = path.rsplit("/", 1)[-1]
    return filename or None


def find_urls(text: str) -> list[str]:
    """Every http(s) URL in a free-text message, in order of appearance."""
    return _URL_IN_TEXT_RE.findall(text)
