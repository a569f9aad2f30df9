"""Image search fallback for covers no catalog knows about.

Scrapes a web image-search results page and pattern-matches image URLs out
of it. This is brittle by nature and sits last in the cascade.
"""

import logging
import re
from typing import List, Optional
from urllib.parse import urlencode, urlparse

from coverlookup.errors import CoverLookupError
from coverlookup.interfaces.cover_source import CoverSourceInterface
from coverlookup.interfaces.http_client import HttpClientInterface
from coverlookup.models.cover import CoverRequest
from coverlookup.services.http_client import BROWSER_HEADERS
from coverlookup.services.text_normalizer import clean_author, simplify_title
from coverlookup.shared.config import CoverSettings

logger = logging.getLogger(__name__)

QUOTED_IMAGE_URL = re.compile(r'"(https?://[^"\s]+?\.(?:jpg|jpeg|png|webp)[^"\s]*?)"', re.IGNORECASE)
SRC_IMAGE_URL = re.compile(r'src=["\'](https?://[^"\']+)["\']', re.IGNORECASE)

# Hosts serving the search engine's own thumbnails and UI assets
EXCLUDED_HOSTS = ('gstatic.com', 'google.com', 'googleusercontent.com', 'googleapis.com')
PREFERRED_TOKENS = ('cover', 'book', 'amazon', 'goodreads', 'openlibrary')
MAX_URL_LENGTH = 500


def _unescape(url: str) -> str:
    return (url.replace('\\u003d', '=')
               .replace('\\u0026', '&')
               .replace('&amp;', '&'))


def _is_excluded_host(url: str) -> bool:
    host = (urlparse(url).hostname or '').lower()
    return any(host == excluded or host.endswith('.' + excluded) for excluded in EXCLUDED_HOSTS)


def extract_image_urls(html: str) -> List[str]:
    """Find candidate image URLs in a results page, best candidates first."""
    found = QUOTED_IMAGE_URL.findall(html) + SRC_IMAGE_URL.findall(html)

    urls: List[str] = []
    for url in found:
        url = _unescape(url)
        if url.startswith('data:') or len(url) > MAX_URL_LENGTH:
            continue
        if _is_excluded_host(url) or url in urls:
            continue
        urls.append(url)

    # Stable sort keeps page order within each group
    return sorted(urls, key=lambda u: not any(token in u.lower() for token in PREFERRED_TOKENS))


class ImageSearchCoverService(CoverSourceInterface):
    """Search engine image results as a last resort."""

    name = 'image-search'

    def __init__(self, http_client: HttpClientInterface, settings: CoverSettings):
        self.http_client = http_client
        self.settings = settings

    def build_queries(self, request: CoverRequest) -> List[str]:
        title = request.title.replace('"', '')
        simplified = simplify_title(request.title)
        author = clean_author(request.primary_author)

        if author:
            queries = [
                f'"{title}" "{author}" book cover',
                f'{title} {author} book cover',
                f'"{title}" book cover',
                f'{simplified} {author} book cover',
            ]
        else:
            queries = [
                f'"{title}" book cover',
                f'{title} book cover',
                f'{simplified} book cover',
            ]

        unique: List[str] = []
        for query in queries:
            if query not in unique:
                unique.append(query)
        return unique

    def _search_url(self, query: str) -> str:
        params = {'tbm': 'isch', 'q': query, 'safe': 'active', 'tbs': 'isz:m'}
        return f"{self.settings.image_search_endpoint}?{urlencode(params)}"

    async def _lookup(self, request: CoverRequest) -> Optional[str]:
        for query in self.build_queries(request):
            try:
                html = await self.http_client.fetch(self._search_url(query), headers=BROWSER_HEADERS)
            except CoverLookupError as e:
                logger.debug("Image search %r failed: %s", query, e)
                continue

            candidates = extract_image_urls(html)[:self.settings.max_scrape_candidates]
            logger.debug("Image search %r gave %d candidates", query, len(candidates))

            for url in candidates:
                if await self.http_client.is_image(url):
                    return url
        return None
