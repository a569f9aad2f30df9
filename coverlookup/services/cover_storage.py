"""Local storage of downloaded cover images."""

import logging
import re
from dataclasses import replace
from pathlib import Path
from typing import Iterable, List, Optional

from coverlookup.errors import CoverLookupError
from coverlookup.interfaces.http_client import HttpClientInterface
from coverlookup.models.cover import CoverResult
from coverlookup.shared.config import CoverSettings

logger = logging.getLogger(__name__)

COVER_EXTENSION = '.jpg'


def sanitize(text: str) -> str:
    """Lower-case text with non-word characters removed and spaces as underscores."""
    text = re.sub(r'[^\w\s-]', '', text)
    return re.sub(r'\s+', '_', text.strip()).lower()


def cover_filename(title: str, author: Optional[str] = None) -> str:
    """Deterministic filename for a (title, author) pair."""
    safe_title = sanitize(title)
    safe_author = sanitize(author or '')
    if safe_author:
        return f"{safe_title}_by_{safe_author}{COVER_EXTENSION}"
    return f"{safe_title}{COVER_EXTENSION}"


class CoverStorage:
    """Stores one cover file per book in the covers directory.

    The file name is derived from title and first author. If the file is
    already present no download happens and the stored path is reused.
    """

    def __init__(self, http_client: HttpClientInterface, settings: CoverSettings):
        self.http_client = http_client
        self.settings = settings
        self.covers_dir = Path(settings.covers_dir)

    def ensure_covers_directory(self) -> None:
        if not self.covers_dir.exists():
            self.covers_dir.mkdir(parents=True, exist_ok=True)
            logger.info("Created covers directory: %s", self.covers_dir)

    def filename_for(self, result: CoverResult) -> str:
        author = None
        if self.settings.include_author_in_filename:
            author = next((a for a in result.authors if a and a.strip()), None)
        return cover_filename(result.title, author)

    def public_path(self, filename: str) -> str:
        return f"{self.settings.public_prefix.rstrip('/')}/{filename}"

    async def materialize(self, result: CoverResult) -> CoverResult:
        """Download the result's cover unless it is already stored.

        Returns the result annotated with ``local_path``, or the result
        unchanged when there is nothing to download or the download fails.
        """
        if not result.cover_url:
            return result

        try:
            self.ensure_covers_directory()

            filename = self.filename_for(result)
            dest_path = self.covers_dir / filename

            if dest_path.exists():
                logger.debug("Cover already stored: %s", dest_path)
                return replace(result, local_path=self.public_path(filename))

            await self.http_client.download(result.cover_url, dest_path)
            logger.info("Cover downloaded to: %s", dest_path)
            return replace(result, local_path=self.public_path(filename))

        except (CoverLookupError, OSError) as e:
            logger.error("Failed to download cover for %r: %s", result.title, e)
            return result

    def cleanup_orphans(self, referenced_paths: Iterable[str]) -> List[str]:
        """Delete stored covers no book refers to any more.

        Args:
            referenced_paths: Public paths (``/covers/<file>``) still in use

        Returns:
            Public paths of the removed files
        """
        if not self.covers_dir.exists():
            return []

        keep = set(referenced_paths)
        removed = []
        for path in sorted(self.covers_dir.glob(f"*{COVER_EXTENSION}")):
            public = self.public_path(path.name)
            if public in keep:
                continue
            path.unlink()
            removed.append(public)

        if removed:
            logger.info("Removed %d orphaned covers", len(removed))
        return removed
