"""Cover lookup service that tries multiple sources."""

import logging
from typing import Iterable, List, Optional, Sequence

from coverlookup.interfaces.cover_source import CoverSourceInterface
from coverlookup.interfaces.http_client import HttpClientInterface
from coverlookup.models.cover import CoverRequest, CoverResult
from coverlookup.services.batch_processor import BatchProcessor
from coverlookup.services.cover_storage import CoverStorage
from coverlookup.services.goodreads_cover import GoodreadsCoverService
from coverlookup.services.google_books_cover import GoogleBooksCoverService
from coverlookup.services.http_client import AiohttpClient
from coverlookup.services.image_search_cover import ImageSearchCoverService
from coverlookup.services.open_library_cover import (
    AuthorSweepSource,
    IsbnCoverSource,
    LastNameSource,
    SimplifiedTitleSource,
    TitleAuthorSource,
    TitleOnlySource,
)
from coverlookup.services.title_variations_cover import TitleVariationSource
from coverlookup.shared.config import CoverSettings, config_manager

logger = logging.getLogger(__name__)


def build_default_sources(http_client: HttpClientInterface,
                          settings: CoverSettings) -> List[CoverSourceInterface]:
    """Build the cascade in its canonical order."""
    title_author = TitleAuthorSource(http_client, settings)
    google_books = GoogleBooksCoverService(http_client, settings)

    sources: List[CoverSourceInterface] = [
        title_author,
        TitleOnlySource(http_client, settings),
        SimplifiedTitleSource(http_client, settings),
        LastNameSource(http_client, settings),
        google_books,
        IsbnCoverSource(http_client, settings),
        TitleVariationSource([title_author, google_books]),
        AuthorSweepSource(http_client, settings),
    ]

    # Scrapers go last and can be switched off
    if settings.scrape_enabled:
        sources.append(GoodreadsCoverService(http_client, settings))
        sources.append(ImageSearchCoverService(http_client, settings))

    return sources


class CoverLookupService:
    """Service that tries multiple cover lookup sources in order."""

    def __init__(self, http_client: Optional[HttpClientInterface] = None,
                 settings: Optional[CoverSettings] = None,
                 sources: Optional[Sequence[CoverSourceInterface]] = None,
                 storage: Optional[CoverStorage] = None):
        self.settings = settings or config_manager.load_settings()
        self.http_client = http_client or AiohttpClient(self.settings)
        self.sources: List[CoverSourceInterface] = (
            list(sources) if sources is not None
            else build_default_sources(self.http_client, self.settings)
        )
        self.storage = storage or CoverStorage(self.http_client, self.settings)
        self.batch = BatchProcessor(self.resolve_and_store, delay=self.settings.batch_delay)

    async def search_cover(self, title: str, authors: Optional[Sequence[str]] = None) -> CoverResult:
        """Find a cover URL trying each source in order until one succeeds.

        Sources see a cleaned request; the result echoes the caller's title
        and authors as given.
        """
        request = CoverRequest.create(title, authors)
        result = CoverResult(title=title, authors=tuple(authors or ()))
        logger.info('Searching for cover: "%s" by %s', request.title, ', '.join(request.authors) or 'unknown')

        for source in self.sources:
            logger.info("  Trying %s...", source.name)
            try:
                cover_url = await source.get_cover_url(request)
            except Exception as e:
                logger.warning("  Error with %s: %s", source.name, e)
                continue

            if cover_url:
                logger.info("  Found cover via %s: %s", source.name, cover_url)
                result.cover_url = cover_url
                return result

        logger.info('No cover found for "%s"', request.title)
        return result

    async def materialize(self, result: CoverResult) -> CoverResult:
        """Store the result's cover locally; see CoverStorage.materialize."""
        return await self.storage.materialize(result)

    async def resolve_and_store(self, title: str, authors: Optional[Sequence[str]] = None) -> CoverResult:
        """Search for a cover and, when one is found, store it."""
        result = await self.search_cover(title, authors)
        if result.cover_url:
            return await self.materialize(result)
        return result

    async def process_all(self, requests: Iterable[CoverRequest]) -> List[CoverResult]:
        """Resolve and store covers for many books, one at a time."""
        return await self.batch.process_all(requests)

    def cleanup_orphans(self, referenced_paths: Iterable[str]) -> List[str]:
        """Maintenance hook removing stored covers that nothing references."""
        return self.storage.cleanup_orphans(referenced_paths)
