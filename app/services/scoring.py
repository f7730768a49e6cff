"""Weighted category scoring over a user's recent interactions."""

from collections.abc import Sequence

from app.ports.catalog import InteractionEvent

ACTION_WEIGHTS: dict[str, int] = {
    "purchase": 3,
    "add_to_cart": 2,
    "view": 1,
}
DEFAULT_ACTION_WEIGHT = ACTION_WEIGHTS["view"]
TOP_CATEGORY_COUNT = 3


def recency_weight(index: int) -> int:
    """Weight for the event at ``index`` (0 = most recent): 10 for the first ten, then decaying to 1."""
    return max(1, 10 - index // 10)


def accumulate_category_scores(events: Sequence[InteractionEvent]) -> dict[str, int]:
    """
    Sum recency × action weights per category.

    Events are taken in the order given, which callers sort newest first.
    Events without a category are skipped. Unknown action kinds weigh as a view.
    The returned dict preserves first-seen category order.
    """
    scores: dict[str, int] = {}
    for index, event in enumerate(events):
        if not event.category:
            continue
        action_weight = ACTION_WEIGHTS.get(event.action_kind, DEFAULT_ACTION_WEIGHT)
        scores[event.category] = scores.get(event.category, 0) + recency_weight(index) * action_weight
    return scores


def score_categories(
    events: Sequence[InteractionEvent], top_n: int = TOP_CATEGORY_COUNT
) -> list[str]:
    """Return up to ``top_n`` category names by descending score; ties keep first-seen order."""
    scores = accumulate_category_scores(events)
    ranked = sorted(scores.items(), key=lambda item: item[1], reverse=True)
    return [category for category, _ in ranked[:top_n]]
