"""Tests for weighted category scoring."""

import pytest

from app.ports.catalog import InteractionEvent
from app.services.scoring import (
    accumulate_category_scores,
    recency_weight,
    score_categories,
)


def event(category: str, action: str = "view", product_id: str = "p") -> InteractionEvent:
    return InteractionEvent(user_id="u1", product_id=product_id, category=category, action_kind=action)


def test_empty_events_returns_empty():
    assert score_categories([]) == []
    assert accumulate_category_scores([]) == {}


@pytest.mark.parametrize(
    "index, expected",
    [(0, 10), (9, 10), (10, 9), (19, 9), (85, 2), (90, 1), (99, 1), (250, 1)],
)
def test_recency_weight_decays_every_ten_events(index: int, expected: int):
    assert recency_weight(index) == expected


def test_purchase_weighs_three_times_view():
    for index in (0, 15, 42, 120):
        padding = [event("Other")] * index
        viewed = accumulate_category_scores([*padding, event("Home", "view")])["Home"]
        bought = accumulate_category_scores([*padding, event("Home", "purchase")])["Home"]
        assert bought == 3 * viewed


def test_add_to_cart_weighs_twice_view():
    scores = accumulate_category_scores([event("Home", "add_to_cart")])
    assert scores == {"Home": 20}


def test_unknown_action_kind_weighs_as_view():
    scores = accumulate_category_scores([event("Home", "wishlist"), event("Books", "view")])
    assert scores == {"Home": 10, "Books": 10}


def test_events_without_category_still_advance_recency():
    events = [event("") for _ in range(10)] + [event("Books")]
    assert accumulate_category_scores(events) == {"Books": 9}


def test_returns_at_most_three_categories_by_descending_score():
    events = [
        event("Books"),
        event("Home", "purchase"),
        event("Sports"),
        event("Electronics", "add_to_cart"),
        event("Books"),
    ]
    # Books 20, Home 30, Sports 10, Electronics 20
    assert score_categories(events) == ["Home", "Books", "Electronics"]


def test_ties_break_by_first_appearance():
    assert score_categories([event("A"), event("B")]) == ["A", "B"]
    assert score_categories([event("B"), event("A")]) == ["B", "A"]


def test_fewer_categories_than_limit():
    assert score_categories([event("Home"), event("Home", "purchase")]) == ["Home"]


def test_scores_follow_input_order_not_timestamps():
    recent_first = [event("A", "view")] * 10 + [event("B", "view")] * 12
    # A: 10 x 10 = 100; B: 9 x 10 + 8 x 2 = 106
    assert score_categories(recent_first) == ["B", "A"]
