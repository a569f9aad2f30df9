"""aiohttp implementation of the HTTP client used by cover sources."""

import asyncio
import logging
from pathlib import Path
from typing import Dict, Optional
from urllib.parse import urljoin

import aiohttp

from coverlookup.errors import (
    FetchTimeoutError,
    HttpStatusError,
    NetworkError,
    ValidationError,
)
from coverlookup.interfaces.http_client import HttpClientInterface
from coverlookup.shared.config import CoverSettings

logger = logging.getLogger(__name__)

USER_AGENT = (
    'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'
)

# Header set for pages that reject obvious bots
BROWSER_HEADERS = {
    'User-Agent': USER_AGENT,
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.5',
    'Connection': 'keep-alive',
    'Upgrade-Insecure-Requests': '1',
}

REDIRECT_STATUSES = (301, 302, 303, 307, 308)
CHUNK_SIZE = 8192


class AiohttpClient(HttpClientInterface):
    """Single-request HTTP client with bounded timeouts and no retries.

    Each call opens its own session, so the client holds no connection
    state between calls.
    """

    def __init__(self, settings: Optional[CoverSettings] = None):
        self.settings = settings or CoverSettings()

    async def fetch(self, url: str, headers: Optional[Dict[str, str]] = None,
                    timeout: Optional[float] = None) -> str:
        """GET a URL and return its body as text."""
        if timeout is None:
            # Header-carrying calls are page scrapes and get more time
            timeout = self.settings.scrape_timeout if headers else self.settings.search_timeout

        try:
            async with aiohttp.ClientSession(headers=headers,
                                             timeout=aiohttp.ClientTimeout(total=timeout)) as session:
                async with session.get(url) as response:
                    if response.status != 200:
                        raise HttpStatusError(url, response.status)
                    return await response.text(errors='replace')
        except asyncio.TimeoutError as e:
            raise FetchTimeoutError(f"Timed out after {timeout}s fetching {url}") from e
        except aiohttp.ClientError as e:
            raise NetworkError(f"Request to {url} failed: {e}") from e

    async def download(self, url: str, dest_path: Path, _redirects_left: Optional[int] = None) -> None:
        """Stream a URL to dest_path, re-invoking itself on redirects.

        The body is written to a ``.part`` sibling first and moved into place
        only once complete, so an interrupted download never leaves a file at
        dest_path.
        """
        redirects_left = self.settings.max_redirects if _redirects_left is None else _redirects_left
        dest_path = Path(dest_path)
        partial_path = dest_path.with_name(dest_path.name + '.part')
        redirect_url = None
        timeout = aiohttp.ClientTimeout(total=self.settings.download_timeout)

        try:
            async with aiohttp.ClientSession(headers={'User-Agent': USER_AGENT},
                                             timeout=timeout) as session:
                async with session.get(url, allow_redirects=False) as response:
                    location = response.headers.get('Location')

                    if response.status in REDIRECT_STATUSES and location:
                        if redirects_left <= 0:
                            raise HttpStatusError(url, response.status, f"Too many redirects for {url}")
                        redirect_url = urljoin(url, location)
                    elif response.status != 200:
                        raise HttpStatusError(url, response.status)
                    else:
                        with open(partial_path, 'wb') as f:
                            async for chunk in response.content.iter_chunked(CHUNK_SIZE):
                                f.write(chunk)
                        partial_path.replace(dest_path)
        except asyncio.TimeoutError as e:
            raise FetchTimeoutError(f"Timed out after {timeout.total}s downloading {url}") from e
        except aiohttp.ClientError as e:
            raise NetworkError(f"Download of {url} failed: {e}") from e
        finally:
            if partial_path.exists():
                partial_path.unlink()

        if redirect_url:
            logger.info("Following redirect to: %s", redirect_url)
            await self.download(redirect_url, dest_path, redirects_left - 1)

    async def validate(self, url: str) -> bool:
        """Probe a URL and confirm it serves an image, without reading the body."""
        timeout = aiohttp.ClientTimeout(total=self.settings.validate_timeout)

        try:
            async with aiohttp.ClientSession(headers={'User-Agent': USER_AGENT},
                                             timeout=timeout) as session:
                async with session.get(url) as response:
                    content_type = response.headers.get('Content-Type', '')
                    if response.status in (200, 302) and content_type.lower().startswith('image/'):
                        return True
                    raise ValidationError(
                        f"Not an image: {url} (status {response.status}, "
                        f"content-type {content_type or 'missing'})"
                    )
        except asyncio.TimeoutError as e:
            raise FetchTimeoutError(f"Timed out after {timeout.total}s validating {url}") from e
        except aiohttp.ClientError as e:
            raise NetworkError(f"Validation request to {url} failed: {e}") from e
