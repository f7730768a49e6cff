"""Recommendation orchestration: preferences, candidates, explanation fan-out."""

import asyncio
import logging
from collections.abc import Sequence

from app.domain.errors import ClientInputError, PartialAggregationFailure
from app.ports.catalog import CatalogPort, InteractionEvent, ProductRecord
from app.ports.recommender import Recommendation, RecommenderPort
from app.prompts.templates import render_popular_fallback
from app.services.candidates import CandidateSelector
from app.services.explanation import ExplanationClient
from app.services.preference_cache import PreferenceCache
from app.services.scoring import score_categories

logger = logging.getLogger(__name__)


class RecommendationService(RecommenderPort):
    """
    Composes the preference cache, scoring, candidate selection and the
    explanation client into a single ``recommend`` call.

    On a cache hit the cached categories are reused but a smaller, fresh window
    of interactions is still read so already-seen products stay excluded.
    """

    def __init__(
        self,
        catalog: CatalogPort,
        cache: PreferenceCache,
        explainer: ExplanationClient,
        target: int = 6,
        pool: int = 8,
        history_window: int = 100,
        viewed_window: int = 50,
    ) -> None:
        self._catalog = catalog
        self._cache = cache
        self._explainer = explainer
        self._selector = CandidateSelector(catalog)
        self._target = target
        self._pool = pool
        self._history_window = history_window
        self._viewed_window = viewed_window
        self.recompute_count = 0

    async def recommend(self, user_id: str) -> list[Recommendation]:
        if not user_id:
            raise ClientInputError("Missing user_id parameter")

        top_categories, history = await self._resolve_preferences(user_id)
        viewed_ids = {event.product_id for event in history}

        candidates = await self._selector.select(
            top_categories, viewed_ids, target=self._target, pool=self._pool
        )

        if not top_categories:
            return await self._explain_popular(candidates)
        return await self._explain_preferred(candidates, history)

    async def _resolve_preferences(
        self, user_id: str
    ) -> tuple[list[str], list[InteractionEvent]]:
        cached = self._cache.get(user_id)
        if cached is not None:
            logger.debug("Preference cache hit for user %s", user_id)
            history = await self._catalog.fetch_recent_interactions(
                user_id, limit=self._viewed_window
            )
            return cached, history

        logger.debug("Preference cache miss for user %s", user_id)
        history = await self._catalog.fetch_recent_interactions(
            user_id, limit=self._history_window
        )
        if not history:
            return [], history

        top_categories = score_categories(history)
        self.recompute_count += 1
        self._cache.put(user_id, top_categories)
        logger.info("Top categories for user %s: %s", user_id, top_categories)
        return top_categories, history

    async def _explain_popular(
        self, products: Sequence[ProductRecord]
    ) -> list[Recommendation]:
        results = await asyncio.gather(
            *(self._explainer.explain(p.name, p.category, []) for p in products),
            return_exceptions=True,
        )
        recommendations = []
        for product, result in zip(products, results):
            if isinstance(result, Exception):
                logger.error("Explanation failed for popular product %s: %s", product.id, result)
                result = render_popular_fallback(product.category)
            elif isinstance(result, BaseException):
                raise result
            recommendations.append(Recommendation(product=product, explanation=result))
        return recommendations

    async def _explain_preferred(
        self,
        products: Sequence[ProductRecord],
        history: Sequence[InteractionEvent],
    ) -> list[Recommendation]:
        results = await asyncio.gather(
            *(self._explain_one(p, history) for p in products),
            return_exceptions=True,
        )
        recommendations = []
        for result in results:
            if isinstance(result, PartialAggregationFailure):
                logger.error("Dropping candidate: %s", result)
                continue
            if isinstance(result, BaseException):
                raise result
            recommendations.append(result)
        return recommendations

    async def _explain_one(
        self, product: ProductRecord, history: Sequence[InteractionEvent]
    ) -> Recommendation:
        try:
            explanation = await self._explainer.explain(product.name, product.category, history)
        except Exception as exc:
            raise PartialAggregationFailure(product.id, exc) from exc
        return Recommendation(product=product, explanation=explanation)
