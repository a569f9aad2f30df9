"""Interface for the HTTP capabilities used by cover sources."""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from coverlookup.errors import CoverLookupError, ParseError


class HttpClientInterface(ABC):
    """Abstract interface for fetching pages, probing images and downloading files."""

    @abstractmethod
    async def fetch(self, url: str, headers: Optional[Dict[str, str]] = None,
                    timeout: Optional[float] = None) -> str:
        """Perform a single GET and return the response body.

        Args:
            url: URL to fetch
            headers: Optional extra request headers
            timeout: Optional timeout in seconds overriding the default

        Returns:
            Response body as text

        Raises:
            HttpStatusError: If the status is not 200
            FetchTimeoutError: If the request exceeds its timeout
            NetworkError: On transport failure
        """
        pass

    @abstractmethod
    async def download(self, url: str, dest_path: Path) -> None:
        """Stream the body of a URL into dest_path, following redirects.

        Raises:
            CoverLookupError: If the download fails for any reason
        """
        pass

    @abstractmethod
    async def validate(self, url: str) -> bool:
        """Check that a URL resolves to an image without downloading it.

        Returns:
            True when the URL serves an image

        Raises:
            ValidationError: If the response is not an image
            FetchTimeoutError: If the probe exceeds its timeout
            NetworkError: On transport failure
        """
        pass

    async def fetch_json(self, url: str, headers: Optional[Dict[str, str]] = None,
                         timeout: Optional[float] = None) -> Any:
        """Fetch a URL and decode the body as JSON."""
        body = await self.fetch(url, headers=headers, timeout=timeout)
        try:
            return json.loads(body)
        except ValueError as e:
            raise ParseError(f"Malformed JSON from {url}: {e}") from e

    async def is_image(self, url: str) -> bool:
        """Like validate, but any failure simply means False."""
        try:
            return await self.validate(url)
        except CoverLookupError:
            return False
