"""
Exceptions raised by the schema intelligence pipeline.

Heuristic misses never raise; these cover the cases a caller has to act on.
"""

from urllib.parse import urlparse


class SchemaIntelError(Exception):
    """Base class for all pipeline errors."""


class InsufficientContentError(SchemaIntelError):
    """The page yielded too little text to synthesize a trustworthy schema."""

    def __init__(self, content_length: int, minimum: int):
        self.content_length = content_length
        self.minimum = minimum
        super().__init__(
            f"Extracted content is {content_length} characters, below the "
            f"{minimum} character minimum. Manual input may be required."
        )


class InvalidURLError(SchemaIntelError, ValueError):
    """A URL was required but could not be parsed into scheme and host."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"Invalid URL format: {url!r}")


def require_url(url: str) -> str:
    """Return the URL unchanged, or raise InvalidURLError if it has no scheme/host."""
    parsed = urlparse(url or "")
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidURLError(url)
    return url
