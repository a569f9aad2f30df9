"""Sequential cover processing for collections of books."""

import asyncio
import logging
from typing import Awaitable, Callable, Iterable, List, Optional, Sequence

from coverlookup.models.cover import CoverRequest, CoverResult

logger = logging.getLogger(__name__)

ResolveFunc = Callable[[str, Sequence[str]], Awaitable[CoverResult]]


def stored_count(results: Iterable[CoverResult]) -> int:
    """Number of results that ended with a stored cover."""
    return sum(1 for result in results if result.local_path)


class BatchProcessor:
    """Runs a resolve function over books strictly in order.

    Every input yields exactly one result in the same position. A failing
    item is replaced by a bare result instead of aborting the batch, and the
    processor pauses between items to stay polite to rate-limited APIs.
    """

    def __init__(self, resolve: ResolveFunc, delay: float = 0.5,
                 sleep: Optional[Callable[[float], Awaitable[None]]] = None):
        self.resolve = resolve
        self.delay = delay
        self.sleep = sleep or asyncio.sleep

    async def process_all(self, requests: Iterable[CoverRequest]) -> List[CoverResult]:
        requests = list(requests)
        logger.info("Processing covers for %d books...", len(requests))

        results: List[CoverResult] = []
        for index, request in enumerate(requests):
            if index > 0 and self.delay > 0:
                await self.sleep(self.delay)

            try:
                result = await self.resolve(request.title, request.authors)
            except Exception as e:
                logger.error('Failed to process cover for "%s": %s', request.title, e)
                result = CoverResult.empty(request)
            results.append(result)

        logger.info("Successfully processed %d/%d book covers", stored_count(results), len(requests))
        return results
