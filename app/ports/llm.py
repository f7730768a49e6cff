"""LLM port — abstract interface for explanation generation."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

from app.ports.catalog import InteractionEvent


@dataclass(frozen=True)
class ModelConfig:
    """A (model identifier, API version) pair tried by the explanation client."""

    model: str
    api_version: str


class LLMPort(ABC):
    """Abstraction over a generative-text backend."""

    @abstractmethod
    async def explain_recommendation(
        self,
        config: ModelConfig,
        product_name: str,
        product_category: str,
        user_history: Sequence[InteractionEvent],
    ) -> str | None:
        """
        Produce a one-sentence justification for recommending a product.

        Returns None when the backend answered but generated no text.
        Raises an ``ExplanationServiceError`` subclass on failure.
        """
        ...
