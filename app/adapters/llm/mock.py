import logging
from collections.abc import Sequence

from app.ports.catalog import InteractionEvent
from app.ports.llm import LLMPort, ModelConfig
from app.prompts.templates import render_mock_explanation

logger = logging.getLogger(__name__)


class MockLLMAdapter(LLMPort):
    """
    Mock LLM adapter for development and testing without API access.

    Returns deterministic explanations and never touches the network.
    """

    def __init__(self) -> None:
        self.calls = 0

    async def explain_recommendation(
        self,
        config: ModelConfig,
        product_name: str,
        product_category: str,
        user_history: Sequence[InteractionEvent],
    ) -> str | None:
        """Return a canned explanation referencing the product."""
        self.calls += 1
        logger.info(
            "MockLLM: explain_recommendation called (product=%s, %d history events)",
            product_name,
            len(user_history),
        )
        return render_mock_explanation(product_name, product_category)
