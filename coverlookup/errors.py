"""Error taxonomy for cover lookups.

Every failure raised by the HTTP client and the cover sources derives from
``CoverLookupError`` so source and batch boundaries can catch one type.
"""

from typing import Optional


class CoverLookupError(Exception):
    """Base class for all cover lookup failures."""


class NetworkError(CoverLookupError):
    """DNS or connection failure while talking to a remote host."""


class FetchTimeoutError(CoverLookupError, TimeoutError):
    """A request exceeded its bounded wait."""


class HttpStatusError(CoverLookupError):
    """The remote host answered with a status we do not accept."""

    def __init__(self, url: str, status: int, message: Optional[str] = None):
        self.url = url
        self.status = status
        super().__init__(message or f"HTTP {status} for {url}")


class ParseError(CoverLookupError):
    """A response body could not be decoded."""


class ValidationError(CoverLookupError):
    """A candidate URL does not resolve to an image."""
