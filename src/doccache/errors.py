from __future__ import annotations


class DocumentError(Exception):
    """Base class for failures fetching or extracting a document."""


class InvalidSourceError(DocumentError):
    """Raised when a source is not a usable URL or path."""


class SourceNotFoundError(DocumentError):
    """Raised when a local file does not exist or a server answers 404."""


class DownloadError(DocumentError):
    """Raised when a download times out, is refused, or is too large."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class ExtractionError(DocumentError):
    """Raised when a document downloaded fine but yielded no usable text."""
