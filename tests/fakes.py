"""Test doubles for the HTTP client and cover sources."""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from coverlookup.errors import HttpStatusError, ValidationError
from coverlookup.interfaces.cover_source import CoverSourceInterface
from coverlookup.interfaces.http_client import HttpClientInterface
from coverlookup.models.cover import CoverRequest


class FakeHttpClient(HttpClientInterface):
    """Fake HTTP client returning canned responses keyed by URL substrings.

    A response may be a string body, a dict/list (served as JSON), an
    exception instance (raised) or a callable taking the URL. Unmatched
    URLs answer 404.
    """

    def __init__(self, responses: Optional[Dict[str, Any]] = None,
                 images: Iterable[str] = (),
                 download_body: bytes = b'\xff\xd8\xff fake jpeg',
                 download_error: Optional[Exception] = None) -> None:
        self.responses = responses or {}
        self.images = list(images)
        self.download_body = download_body
        self.download_error = download_error
        self.fetched: List[str] = []
        self.fetch_headers: List[Optional[Dict[str, str]]] = []
        self.validated: List[str] = []
        self.downloads: List[Tuple[str, Path]] = []

    @property
    def network_calls(self) -> int:
        return len(self.fetched) + len(self.validated) + len(self.downloads)

    async def fetch(self, url: str, headers: Optional[Dict[str, str]] = None,
                    timeout: Optional[float] = None) -> str:
        self.fetched.append(url)
        self.fetch_headers.append(headers)

        for pattern, response in self.responses.items():
            if pattern not in url:
                continue
            if callable(response):
                response = response(url)
            if isinstance(response, Exception):
                raise response
            if isinstance(response, (dict, list)):
                return json.dumps(response)
            return response
        raise HttpStatusError(url, 404)

    async def download(self, url: str, dest_path: Path) -> None:
        self.downloads.append((url, Path(dest_path)))
        if self.download_error is not None:
            raise self.download_error
        Path(dest_path).write_bytes(self.download_body)

    async def validate(self, url: str) -> bool:
        self.validated.append(url)
        if any(pattern in url for pattern in self.images):
            return True
        raise ValidationError(f"Not an image: {url}")


class StubSource(CoverSourceInterface):
    """Source answering with a fixed URL, or raising a fixed error."""

    def __init__(self, name: str, url: Optional[str] = None,
                 error: Optional[BaseException] = None) -> None:
        self.name = name
        self.url = url
        self.error = error
        self.requests: List[CoverRequest] = []

    async def _lookup(self, request: CoverRequest) -> Optional[str]:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.url
