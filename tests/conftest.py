import os
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone

# Must be set before app.database creates its engine.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.adapters.catalog.sqlalchemy_catalog import SQLAlchemyCatalogAdapter
from app.domain.errors import UpstreamDataError
from app.domain.models import Base, Product, User, UserInteraction
from app.ports.catalog import (
    CatalogPort,
    InteractionEvent,
    ProductFilter,
    ProductRecord,
    UserRecord,
)
from app.ports.llm import LLMPort, ModelConfig

TEST_DATABASE_URL = "sqlite+aiosqlite://"

PRODUCTS = [
    ("p01", "Wireless Mouse", "Electronics", 24.99),
    ("p02", "USB-C Hub", "Electronics", 39.0),
    ("p03", "Noise Cancelling Headphones", "Electronics", 199.0),
    ("p04", "Desk Lamp", "Home", 32.5),
    ("p05", "Throw Blanket", "Home", 45.0),
    ("p06", "Ceramic Vase", "Home", 28.0),
    ("p07", "Python Cookbook", "Books", 49.99),
    ("p08", "Mystery Novel", "Books", 14.99),
    ("p09", "Cookbook Classics", "Books", 22.0),
    ("p10", "Yoga Mat", "Sports", 30.0),
    ("p11", "Dumbbell Set", "Sports", 89.0),
    ("p12", "Running Shoes", "Sports", 120.0),
]

FALLBACK = (
    "We think you'd like {name} because it matches your interests in "
    "{category} and similar items you've viewed."
)


# ── Database ───────────────────────────────────────


@pytest.fixture
async def session_factory():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
async def catalog(session_factory) -> SQLAlchemyCatalogAdapter:
    """Catalog adapter over a database seeded with twelve products in four categories."""
    async with session_factory() as session:
        session.add_all(
            Product(id=pid, name=name, category=category, price=price)
            for pid, name, category, price in PRODUCTS
        )
        await session.commit()
    return SQLAlchemyCatalogAdapter(session_factory)


@pytest.fixture
def add_interactions(session_factory):
    """Insert interactions; the first item given becomes the most recent."""

    async def _add(user_id: str, actions: Sequence[tuple[str, str]]) -> None:
        now = datetime.now(timezone.utc)
        async with session_factory() as session:
            if await session.get(User, user_id) is None:
                session.add(User(id=user_id, name=user_id, email=f"{user_id}@example.com"))
            for offset, (product_id, action) in enumerate(actions):
                session.add(
                    UserInteraction(
                        user_id=user_id,
                        product_id=product_id,
                        action_type=action,
                        timestamp=now - timedelta(seconds=offset + 1),
                    )
                )
            await session.commit()

    return _add


# ── Fakes ──────────────────────────────────────────


class ScriptedLLM(LLMPort):
    """Replays a script of results; exceptions in the script are raised."""

    def __init__(self, script: Sequence[object] = (), default: object = "Generated text.") -> None:
        self.script = list(script)
        self.default = default
        self.calls: list[ModelConfig] = []
        self.histories: list[Sequence[InteractionEvent]] = []

    async def explain_recommendation(self, config, product_name, product_category, user_history):
        self.calls.append(config)
        self.histories.append(user_history)
        item = self.script.pop(0) if self.script else self.default
        if isinstance(item, BaseException):
            raise item
        return item


class FailingCatalog(CatalogPort):
    """Every read fails the way an unreachable store would."""

    async def fetch_recent_interactions(self, user_id, limit) -> list[InteractionEvent]:
        raise UpstreamDataError("Failed to fetch user interactions")

    async def fetch_products(self, product_filter: ProductFilter, limit) -> list[ProductRecord]:
        raise UpstreamDataError("Failed to fetch recommendations")

    async def ensure_user(self, user_id, name, email) -> bool:
        raise UpstreamDataError("Failed to create user")

    async def record_interaction(self, user_id, product_id, action_kind) -> InteractionEvent:
        raise UpstreamDataError("Failed to record interaction")

    async def list_products(self) -> list[ProductRecord]:
        raise UpstreamDataError("Failed to list products")

    async def list_users(self) -> list[UserRecord]:
        raise UpstreamDataError("Failed to list users")


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def scripted_llm():
    return ScriptedLLM


@pytest.fixture
def failing_catalog() -> FailingCatalog:
    return FailingCatalog()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleeps():
    """Records backoff delays instead of sleeping."""
    recorded: list[float] = []

    async def _sleep(delay: float) -> None:
        recorded.append(delay)

    _sleep.recorded = recorded
    return _sleep


@pytest.fixture
def fallback_text():
    def _render(name: str, category: str) -> str:
        return FALLBACK.format(name=name, category=category)

    return _render
