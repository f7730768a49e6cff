"""Recommender port — abstract interface for the recommendation engine."""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from app.ports.catalog import ProductRecord


@dataclass
class Recommendation:
    """A recommended product with its (always non-empty) explanation."""

    product: ProductRecord
    explanation: str


class RecommenderPort(ABC):
    """Abstraction for the product recommendation engine."""

    @abstractmethod
    async def recommend(self, user_id: str) -> list[Recommendation]:
        """Return ordered product recommendations for a user."""
        ...
