"""
Structured, versioned prompt templates and deterministic explanation texts.

Prompts are immutable dataclass objects so adapters never build inline
strings. The fallback and mock texts live here too, because the explanation
client and every adapter must agree on them exactly.
"""

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field

from app.ports.catalog import InteractionEvent

# ── Deterministic Texts ──────────────────────────────────────────

FALLBACK_EXPLANATION = (
    "We think you'd like {name} because it matches your interests in "
    "{category} and similar items you've viewed."
)

POPULAR_FALLBACK_EXPLANATION = "This {category} product is popular and might interest you."

MOCK_EXPLANATION = "[mock] {name} is a popular pick for shoppers who love {category}."


def render_fallback_explanation(product_name: str, product_category: str) -> str:
    """Template explanation used whenever no generated text is available."""
    return FALLBACK_EXPLANATION.format(name=product_name, category=product_category)


def render_mock_explanation(product_name: str, product_category: str) -> str:
    """Canned explanation returned in mock mode, distinguishable from the fallback."""
    return MOCK_EXPLANATION.format(name=product_name, category=product_category)


def render_popular_fallback(product_category: str) -> str:
    return POPULAR_FALLBACK_EXPLANATION.format(category=product_category)


# ── Prompt Template ──────────────────────────────────────────────

@dataclass(frozen=True)
class PromptTemplate:
    """
    Immutable prompt template with system persona and user message.

    Attributes:
        name:          Unique identifier for logging and tracking.
        version:       Semantic version for prompt iteration tracking.
        system:        System message defining the LLM persona and constraints.
        user_template: User message template with {variable} placeholders.
        max_tokens:    Maximum output tokens requested from the LLM.
        temperature:   Sampling temperature requested from the LLM.
        tags:          Metadata tags for categorization.
    """

    name: str
    version: str
    system: str
    user_template: str
    max_tokens: int = 50
    temperature: float = 0.7
    tags: tuple[str, ...] = field(default_factory=tuple)

    def render(self, **kwargs: str) -> dict[str, str]:
        """Render template with variables, returning system + user messages."""
        return {
            "system": self.system,
            "user": self.user_template.format(**kwargs),
        }


# ── Recommendation Explanation Prompt ────────────────────────────

EXPLAIN_RECOMMENDATION = PromptTemplate(
    name="explain_recommendation",
    version="1.0.0",
    system=(
        "You are a friendly shopping assistant for an online store. "
        "You explain in plain language why a product suits a shopper.\n\n"
        "Guidelines:\n"
        "- Answer in exactly one sentence.\n"
        "- Mention the product by name.\n"
        "- Do not invent prices, discounts or product features."
    ),
    user_template=(
        "Why recommend {product_name} (category: {product_category})?\n"
        "{history_section}"
        "Answer in one sentence."
    ),
    max_tokens=50,
    temperature=0.7,
    tags=("recommendation", "explanation"),
)


# ── Rendering Helpers ────────────────────────────────────────────

def summarize_history(
    user_history: Sequence[InteractionEvent], top_n: int = 3
) -> tuple[list[str], bool]:
    """Return the most frequent categories (by event count) and whether any purchase exists."""
    counts = Counter(event.category for event in user_history if event.category)
    top_categories = [category for category, _ in counts.most_common(top_n)]
    has_purchases = any(event.action_kind == "purchase" for event in user_history)
    return top_categories, has_purchases


def render_explanation_prompt(
    product_name: str,
    product_category: str,
    user_history: Sequence[InteractionEvent],
) -> dict[str, str]:
    """
    Render the explanation prompt.

    Returns:
        Dict with 'system' and 'user' keys ready for any LLM adapter.
    """
    top_categories, has_purchases = summarize_history(user_history)

    history_section = ""
    if top_categories:
        history_section += (
            f"The shopper mostly browses: {', '.join(top_categories)}.\n"
        )
    if has_purchases:
        history_section += "The shopper has purchased from this store before.\n"

    return EXPLAIN_RECOMMENDATION.render(
        product_name=product_name,
        product_category=product_category,
        history_section=history_section,
    )
