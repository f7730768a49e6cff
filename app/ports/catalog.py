"""Catalog port — abstract interface for the product / interaction store."""

from abc import ABC, abstractmethod
from collections.abc import Collection, Sequence
from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class InteractionEvent:
    """A single user action on a product, with the product's category joined in."""

    user_id: str
    product_id: str
    category: str
    action_kind: str
    observed_at: datetime | None = None


@dataclass(frozen=True)
class ProductRecord:
    """Read-only view of a catalog product."""

    id: str
    name: str
    category: str
    price: float
    description: str = ""
    image_url: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class UserRecord:
    id: str
    name: str
    email: str
    created_at: datetime | None = None


@dataclass(frozen=True)
class ProductFilter:
    """
    Conjunctive product filter.

    Empty collections mean "no constraint": an empty ``exclude_ids`` never
    excludes anything, and an empty ``category_in`` does not restrict categories.
    """

    category_in: Collection[str] = field(default_factory=tuple)
    category_not_in: Collection[str] = field(default_factory=tuple)
    exclude_ids: Collection[str] = field(default_factory=tuple)


class CatalogPort(ABC):
    """Abstraction for the relational store holding products, users and interactions."""

    @abstractmethod
    async def fetch_recent_interactions(
        self, user_id: str, limit: int
    ) -> list[InteractionEvent]:
        """Return up to ``limit`` interactions for the user, newest first."""
        ...

    @abstractmethod
    async def fetch_products(
        self, product_filter: ProductFilter, limit: int
    ) -> list[ProductRecord]:
        """Return up to ``limit`` products matching the filter, ordered by id."""
        ...

    @abstractmethod
    async def ensure_user(self, user_id: str, name: str, email: str) -> bool:
        """Create the user if unknown. Returns True when a row was inserted."""
        ...

    @abstractmethod
    async def record_interaction(
        self, user_id: str, product_id: str, action_kind: str
    ) -> InteractionEvent:
        """Persist a new interaction stamped with the current time."""
        ...

    @abstractmethod
    async def list_products(self) -> Sequence[ProductRecord]:
        ...

    @abstractmethod
    async def list_users(self) -> Sequence[UserRecord]:
        ...
