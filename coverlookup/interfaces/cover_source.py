"""Interface for book cover sources."""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from coverlookup.errors import CoverLookupError
from coverlookup.models.cover import CoverRequest

logger = logging.getLogger(__name__)


class CoverSourceInterface(ABC):
    """Abstract interface for one way of locating a cover image URL.

    Subclasses implement ``_lookup`` and may raise any ``CoverLookupError``.
    Callers use ``get_cover_url``, which turns those failures into a miss.
    """

    name: str = 'source'

    @abstractmethod
    async def _lookup(self, request: CoverRequest) -> Optional[str]:
        """Search this source for a cover.

        Args:
            request: Title and authors to search for

        Returns:
            URL to cover image or None if not found
        """
        pass

    async def get_cover_url(self, request: CoverRequest) -> Optional[str]:
        """Get cover image URL for a book, never raising lookup errors."""
        try:
            return await self._lookup(request)
        except CoverLookupError as e:
            logger.debug("%s failed for %r: %s", self.name, request.title, e)
            return None

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.name}>"
