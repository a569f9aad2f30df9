"""Cover lookup request and result models."""

from dataclasses import dataclass, field, replace
from typing import Optional, Sequence, Tuple


@dataclass(frozen=True)
class CoverRequest:
    """A single book to find a cover for."""
    title: str
    authors: Tuple[str, ...] = ()

    @classmethod
    def create(cls, title: str, authors: Optional[Sequence[str]] = None) -> 'CoverRequest':
        """Build a request from any author sequence, dropping blank names."""
        cleaned = tuple(a.strip() for a in (authors or []) if a and a.strip())
        return cls(title=title.strip(), authors=cleaned)

    @property
    def primary_author(self) -> str:
        return self.authors[0] if self.authors else ''

    def with_title(self, title: str) -> 'CoverRequest':
        """Return a copy of this request searching for another title."""
        return replace(self, title=title)


@dataclass
class CoverResult:
    """Outcome of a cover lookup.

    ``cover_url`` is set when a source matched and ``local_path`` when the
    image was also stored. A result with neither means nothing was found.
    """
    title: str
    authors: Tuple[str, ...] = field(default_factory=tuple)
    cover_url: Optional[str] = None
    local_path: Optional[str] = None

    @classmethod
    def empty(cls, request: CoverRequest) -> 'CoverResult':
        return cls(title=request.title, authors=tuple(request.authors))

    @property
    def found(self) -> bool:
        return self.cover_url is not None

    @property
    def stored(self) -> bool:
        return self.local_path is not None

    def to_dict(self) -> dict:
        """Convert result to dictionary for JSON output."""
        data = {
            'title': self.title,
            'authors': list(self.authors),
        }
        if self.cover_url:
            data['coverUrl'] = self.cover_url
        if self.local_path:
            data['localPath'] = self.local_path
        return data
