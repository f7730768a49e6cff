"""Candidate selection with backfill outside the preferred categories."""

import logging
from collections.abc import Collection, Sequence

from app.ports.catalog import CatalogPort, ProductFilter, ProductRecord

logger = logging.getLogger(__name__)


class CandidateSelector:
    """Builds the bounded, ordered candidate list for one request."""

    def __init__(self, catalog: CatalogPort) -> None:
        self._catalog = catalog

    async def select(
        self,
        top_categories: Sequence[str],
        viewed_ids: Collection[str],
        target: int = 6,
        pool: int = 8,
    ) -> list[ProductRecord]:
        """
        Select up to ``target`` products.

        Without preferred categories, the first ``pool`` products by id form a
        "popular" pool. Otherwise products from the preferred categories come
        first, then products from other categories fill any shortfall. Products
        in ``viewed_ids`` are never returned; an empty ``viewed_ids`` excludes
        nothing. Store errors propagate unchanged.
        """
        exclude_ids = tuple(viewed_ids)

        if not top_categories:
            popular = await self._catalog.fetch_products(
                ProductFilter(exclude_ids=exclude_ids), limit=pool
            )
            logger.info("No preferred categories; using popular pool (%d products)", len(popular))
            return popular[:target]

        candidates = await self._catalog.fetch_products(
            ProductFilter(category_in=tuple(top_categories), exclude_ids=exclude_ids),
            limit=pool,
        )

        if len(candidates) < target:
            shortfall = target - len(candidates)
            backfill = await self._catalog.fetch_products(
                ProductFilter(category_not_in=tuple(top_categories), exclude_ids=exclude_ids),
                limit=shortfall,
            )
            logger.info(
                "Backfilled %d of %d missing candidates outside %s",
                len(backfill),
                shortfall,
                list(top_categories),
            )
            candidates = [*candidates, *backfill]

        return candidates[:target]
