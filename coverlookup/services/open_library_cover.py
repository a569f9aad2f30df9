"""Open Library cover sources.

All sources here query the Open Library search API and turn a document's
``cover_i`` into a cover URL. They differ only in how the query is shaped.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import urlencode

from coverlookup.errors import ParseError
from coverlookup.interfaces.cover_source import CoverSourceInterface
from coverlookup.interfaces.http_client import HttpClientInterface
from coverlookup.models.cover import CoverRequest
from coverlookup.services.text_normalizer import (
    clean_author,
    content_words,
    last_name,
    simplify_title,
)
from coverlookup.shared.config import CoverSettings

logger = logging.getLogger(__name__)

SEARCH_FIELDS = 'key,title,author_name,cover_i,isbn'


def _quote_term(text: str) -> str:
    return '"' + text.replace('"', '') + '"'


class OpenLibraryCatalog:
    """Thin client for the Open Library search and covers endpoints."""

    def __init__(self, http_client: HttpClientInterface, settings: CoverSettings):
        self.http_client = http_client
        self.settings = settings

    async def search(self, query: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Run a search query and return the result documents."""
        params = {
            'q': query,
            'limit': limit or self.settings.catalog_limit,
            'fields': SEARCH_FIELDS,
        }
        url = f"{self.settings.search_endpoint}?{urlencode(params)}"
        data = await self.http_client.fetch_json(url)

        if not isinstance(data, dict):
            raise ParseError(f"Unexpected search response from {url}")
        docs = data.get('docs') or []
        if not isinstance(docs, list):
            raise ParseError(f"Unexpected 'docs' value from {url}")
        return [doc for doc in docs if isinstance(doc, dict)]

    def cover_url(self, cover_id: Any) -> str:
        return f"{self.settings.cover_image_endpoint}/{cover_id}-M.jpg"

    def isbn_cover_url(self, isbn: str) -> str:
        # default=false makes the endpoint 404 instead of serving a blank placeholder
        return f"{self.settings.isbn_cover_endpoint}/{isbn}-M.jpg?default=false"

    def first_cover_url(self, docs: Iterable[Dict[str, Any]]) -> Optional[str]:
        """Cover URL of the first document that has a cover id."""
        for doc in docs:
            if doc.get('cover_i'):
                return self.cover_url(doc['cover_i'])
        return None


class OpenLibraryCoverSource(CoverSourceInterface):
    """Base for sources answering from a single Open Library query."""

    def __init__(self, http_client: HttpClientInterface, settings: CoverSettings):
        self.catalog = OpenLibraryCatalog(http_client, settings)

    def build_query(self, request: CoverRequest) -> Optional[str]:
        raise NotImplementedError

    async def _lookup(self, request: CoverRequest) -> Optional[str]:
        query = self.build_query(request)
        if not query:
            return None

        docs = await self.catalog.search(query)
        return self.catalog.first_cover_url(docs)


class TitleAuthorSource(OpenLibraryCoverSource):
    """Structured title + author query."""

    name = 'openlibrary-title-author'

    def build_query(self, request: CoverRequest) -> Optional[str]:
        query = f"title:{_quote_term(request.title)}"
        author = clean_author(request.primary_author)
        if author:
            query += f" author:{_quote_term(author)}"
        return query


class TitleOnlySource(OpenLibraryCoverSource):
    """Raw title as a free-text query."""

    name = 'openlibrary-title'

    def build_query(self, request: CoverRequest) -> Optional[str]:
        return request.title


class SimplifiedTitleSource(OpenLibraryCoverSource):
    """Simplified title plus the cleaned author name."""

    name = 'openlibrary-simplified'

    def build_query(self, request: CoverRequest) -> Optional[str]:
        return ' '.join(filter(None, [simplify_title(request.title),
                                      clean_author(request.primary_author)]))


class LastNameSource(OpenLibraryCoverSource):
    """Simplified title plus the author's last name only."""

    name = 'openlibrary-last-name'

    def build_query(self, request: CoverRequest) -> Optional[str]:
        author = clean_author(request.primary_author)
        if not author:
            return None
        return f"{simplify_title(request.title)} {last_name(author)}"


class IsbnCoverSource(CoverSourceInterface):
    """Look up candidate ISBNs and probe the ISBN cover endpoint for each."""

    name = 'openlibrary-isbn'

    def __init__(self, http_client: HttpClientInterface, settings: CoverSettings):
        self.http_client = http_client
        self.settings = settings
        self.catalog = OpenLibraryCatalog(http_client, settings)

    def _candidate_isbns(self, docs: Iterable[Dict[str, Any]]) -> List[str]:
        isbns: List[str] = []
        for doc in docs:
            values = doc.get('isbn') or []
            if isinstance(values, (str, int)):
                values = [values]
            for isbn in values:
                isbn = str(isbn).strip()
                if isbn and isbn not in isbns:
                    isbns.append(isbn)
                if len(isbns) >= self.settings.max_isbn_candidates:
                    return isbns
        return isbns

    async def _lookup(self, request: CoverRequest) -> Optional[str]:
        query = ' '.join(filter(None, [simplify_title(request.title),
                                       clean_author(request.primary_author)]))
        docs = await self.catalog.search(query)

        for isbn in self._candidate_isbns(docs):
            url = self.catalog.isbn_cover_url(isbn)
            if await self.http_client.is_image(url):
                return url
            logger.debug("No cover image for ISBN %s", isbn)
        return None


class AuthorSweepSource(CoverSourceInterface):
    """Search every book by the author and accept a loose title match.

    A document matches when its title shares at least ``min(2, n)`` content
    words with the simplified target title, ``n`` being the number of
    content words in the target.
    """

    name = 'openlibrary-author-sweep'

    def __init__(self, http_client: HttpClientInterface, settings: CoverSettings):
        self.settings = settings
        self.catalog = OpenLibraryCatalog(http_client, settings)

    async def _lookup(self, request: CoverRequest) -> Optional[str]:
        author = clean_author(request.primary_author)
        target_words = content_words(simplify_title(request.title))
        if not author or not target_words:
            return None

        required = min(2, len(target_words))
        docs = await self.catalog.search(f"author:{_quote_term(author)}",
                                         limit=self.settings.author_sweep_limit)

        for doc in docs:
            if not doc.get('cover_i'):
                continue
            shared = target_words & content_words(str(doc.get('title', '')))
            if len(shared) >= required:
                logger.debug("Author sweep matched %r on %s", doc.get('title'), sorted(shared))
                return self.catalog.cover_url(doc['cover_i'])
        return None
