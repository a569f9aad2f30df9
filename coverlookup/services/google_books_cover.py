"""Google Books cover lookup service."""

import logging
from typing import Any, Optional
from urllib.parse import urlencode

from coverlookup.interfaces.cover_source import CoverSourceInterface
from coverlookup.interfaces.http_client import HttpClientInterface
from coverlookup.models.cover import CoverRequest
from coverlookup.services.text_normalizer import clean_author
from coverlookup.shared.config import CoverSettings, config_manager

logger = logging.getLogger(__name__)

# Prefer larger images when the API offers them
IMAGE_SIZES = ['extraLarge', 'large', 'medium', 'small', 'thumbnail', 'smallThumbnail']


class GoogleBooksCoverService(CoverSourceInterface):
    """Google Books API service for looking up book covers.

    Tries an exact ``intitle:``/``inauthor:`` query first and falls back to a
    loose "title author" query.
    """

    name = 'google-books'

    def __init__(self, http_client: HttpClientInterface, settings: CoverSettings,
                 api_key: Optional[str] = None):
        self.http_client = http_client
        self.settings = settings
        self.api_key = api_key if api_key is not None else config_manager.get_api_key('GOOGLE_BOOKS_API_KEY')

    def _queries(self, request: CoverRequest) -> list:
        author = clean_author(request.primary_author)
        title = request.title.replace('"', '')

        exact = f'intitle:"{title}"'
        if author:
            exact += f' inauthor:"{author}"'
        loose = f"{title} {author}".strip()

        return [exact] if loose == exact else [exact, loose]

    def _search_url(self, query: str) -> str:
        params = {
            'q': query,
            'maxResults': self.settings.google_max_results,
            'fields': 'items(volumeInfo(imageLinks))',
        }
        if self.api_key:
            params['key'] = self.api_key
        return f"{self.settings.google_books_endpoint}?{urlencode(params)}"

    def _extract_cover(self, data: Any) -> Optional[str]:
        if not isinstance(data, dict):
            return None

        items = data.get('items') or []
        if not isinstance(items, list):
            return None

        for item in items:
            volume_info = item.get('volumeInfo') if isinstance(item, dict) else None
            image_links = volume_info.get('imageLinks') if isinstance(volume_info, dict) else None
            if not isinstance(image_links, dict):
                continue

            for size in IMAGE_SIZES:
                if image_links.get(size):
                    # Replace http with https for security
                    return image_links[size].replace('http://', 'https://')
        return None

    async def _lookup(self, request: CoverRequest) -> Optional[str]:
        for query in self._queries(request):
            data = await self.http_client.fetch_json(self._search_url(query))
            cover_url = self._extract_cover(data)
            if cover_url:
                return cover_url
            logger.debug("Google Books had no cover for query %r", query)
        return None
