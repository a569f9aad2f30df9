"""Retry other sources with relaxed rewrites of the title."""

import logging
from typing import List, Optional

from coverlookup.interfaces.cover_source import CoverSourceInterface
from coverlookup.models.cover import CoverRequest
from coverlookup.services.text_normalizer import title_variants

logger = logging.getLogger(__name__)


class TitleVariationSource(CoverSourceInterface):
    """Sweep title variants through a fixed list of sources.

    Variants are tried in order and, for each one, the wrapped sources in
    order. The original title is skipped since earlier cascade steps already
    searched for it.
    """

    name = 'title-variations'

    def __init__(self, sources: List[CoverSourceInterface]):
        self.sources = sources

    async def _lookup(self, request: CoverRequest) -> Optional[str]:
        for variant in title_variants(request.title):
            if variant == request.title:
                continue

            variant_request = request.with_title(variant)
            for source in self.sources:
                cover_url = await source.get_cover_url(variant_request)
                if cover_url:
                    logger.info("  Variant %r matched via %s", variant, source.name)
                    return cover_url
        return None
