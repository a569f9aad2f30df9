"""Book cover lookup: find a cover across several sources and store it locally."""

from coverlookup.errors import (
    CoverLookupError,
    FetchTimeoutError,
    HttpStatusError,
    NetworkError,
    ParseError,
    ValidationError,
)
from coverlookup.models.cover import CoverRequest, CoverResult
from coverlookup.services.cover_lookup import CoverLookupService

__version__ = '0.1.0'

__all__ = [
    'CoverLookupError',
    'CoverLookupService',
    'CoverRequest',
    'CoverResult',
    'FetchTimeoutError',
    'HttpStatusError',
    'NetworkError',
    'ParseError',
    'ValidationError',
]
