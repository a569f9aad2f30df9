"""Goodreads cover lookup service."""

import logging
import re
from typing import List, Optional
from urllib.parse import urlencode

from bs4 import BeautifulSoup

from coverlookup.interfaces.cover_source import CoverSourceInterface
from coverlookup.interfaces.http_client import HttpClientInterface
from coverlookup.models.cover import CoverRequest
from coverlookup.services.http_client import BROWSER_HEADERS
from coverlookup.services.text_normalizer import clean_author, simplify_title
from coverlookup.shared.config import CoverSettings

logger = logging.getLogger(__name__)

# Fallback when the markup no longer carries the bookCover class
COVER_IMG_PATTERN = re.compile(r'<img[^>]+src="([^"]*books/[^"]*\.(?:jpg|jpeg|png))"[^>]*>', re.IGNORECASE)

PLACEHOLDER_MARKERS = ('nophoto', 'blank')
MAX_CANDIDATES = 3


class GoodreadsCoverService(CoverSourceInterface):
    """Goodreads web scraper service for looking up book covers."""

    name = 'goodreads-scrape'

    def __init__(self, http_client: HttpClientInterface, settings: CoverSettings):
        self.http_client = http_client
        self.settings = settings

    def _extract_candidates(self, html: str) -> List[str]:
        """Pull cover image URLs out of a Goodreads search page."""
        soup = BeautifulSoup(html, 'html.parser')
        urls = [img.get('src') for img in soup.select('img.bookCover')]
        if not urls:
            urls = COVER_IMG_PATTERN.findall(html)

        candidates = []
        for cover_url in urls:
            if not cover_url or cover_url.startswith('data:'):
                continue
            if cover_url.startswith('//'):
                cover_url = 'https:' + cover_url
            if any(marker in cover_url for marker in PLACEHOLDER_MARKERS):
                continue

            # Replace small covers with larger ones if possible
            if '_SX' in cover_url or '_SY' in cover_url:
                cover_url = cover_url.replace('_SX98_', '_SX318_').replace('_SY160_', '_SY475_')
                cover_url = cover_url.replace('_SY75_', '_SY475_').replace('_SX50_', '_SX318_')

            if cover_url not in candidates:
                candidates.append(cover_url)
        return candidates

    async def _lookup(self, request: CoverRequest) -> Optional[str]:
        query = ' '.join(filter(None, [simplify_title(request.title),
                                       clean_author(request.primary_author)]))
        search_url = f"{self.settings.goodreads_search_url}?{urlencode({'q': query})}"

        html = await self.http_client.fetch(search_url, headers=BROWSER_HEADERS)

        for cover_url in self._extract_candidates(html)[:MAX_CANDIDATES]:
            if await self.http_client.is_image(cover_url):
                return cover_url
            logger.debug("Goodreads candidate rejected: %s", cover_url)
        return None
