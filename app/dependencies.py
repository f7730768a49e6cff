"""Composition root: builds the long-lived collaborators once per process."""

from functools import lru_cache

from fastapi import Depends

from app.adapters.catalog.sqlalchemy_catalog import SQLAlchemyCatalogAdapter
from app.adapters.llm.gemini import GeminiLLMAdapter
from app.adapters.llm.mock import MockLLMAdapter
from app.config import Settings, settings
from app.database import async_session_factory
from app.ports.catalog import CatalogPort
from app.ports.llm import LLMPort
from app.services.explanation import ExplanationClient
from app.services.interaction import InteractionService
from app.services.preference_cache import PreferenceCache
from app.services.recommendation import RecommendationService


def build_llm_adapter(config: Settings) -> LLMPort | None:
    """Pick the LLM backend. Returns None when no credential is configured."""
    if config.gemini_mock:
        return MockLLMAdapter()
    if not config.gemini_api_key:
        return None
    return GeminiLLMAdapter(
        api_key=config.gemini_api_key,
        base_url=config.gemini_base_url,
        method=config.gemini_method,
        model_override=config.gemini_model,
        api_version_override=config.gemini_api_version,
        timeout=config.explanation_timeout_seconds,
        temperature=config.explanation_temperature,
        max_output_tokens=config.explanation_max_output_tokens,
    )


def build_explanation_client(config: Settings) -> ExplanationClient:
    return ExplanationClient(
        llm=build_llm_adapter(config),
        max_retries=config.explanation_max_retries,
        timeout_seconds=config.explanation_timeout_seconds,
        backoff_seconds=config.explanation_backoff_seconds,
        disabled=config.gemini_disabled,
    )


@lru_cache
def get_catalog() -> CatalogPort:
    return SQLAlchemyCatalogAdapter(async_session_factory)


@lru_cache
def get_preference_cache() -> PreferenceCache:
    return PreferenceCache(
        ttl_seconds=settings.preference_cache_ttl_seconds,
        max_entries=settings.preference_cache_max_entries,
    )


@lru_cache
def get_explanation_client() -> ExplanationClient:
    return build_explanation_client(settings)


def get_recommendation_service(
    catalog: CatalogPort = Depends(get_catalog),
    cache: PreferenceCache = Depends(get_preference_cache),
    explainer: ExplanationClient = Depends(get_explanation_client),
) -> RecommendationService:
    return RecommendationService(
        catalog=catalog,
        cache=cache,
        explainer=explainer,
        target=settings.recommendation_target,
        pool=settings.recommendation_pool,
        history_window=settings.history_window,
        viewed_window=settings.viewed_window,
    )


def get_interaction_service(
    catalog: CatalogPort = Depends(get_catalog),
) -> InteractionService:
    return InteractionService(catalog)
