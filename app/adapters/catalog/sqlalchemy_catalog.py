"""Catalog adapter backed by an async SQLAlchemy session factory."""

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.domain.errors import UpstreamDataError
from app.domain.models import Product, User, UserInteraction
from app.ports.catalog import (
    CatalogPort,
    InteractionEvent,
    ProductFilter,
    ProductRecord,
    UserRecord,
)

logger = logging.getLogger(__name__)


def _to_product_record(product: Product) -> ProductRecord:
    return ProductRecord(
        id=product.id,
        name=product.name,
        category=product.category,
        price=product.price,
        description=product.description or "",
        image_url=product.image_url,
        created_at=product.created_at,
    )


class SQLAlchemyCatalogAdapter(CatalogPort):
    """Reads and writes catalog data; every call opens its own session."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def fetch_recent_interactions(
        self, user_id: str, limit: int
    ) -> list[InteractionEvent]:
        stmt = (
            select(UserInteraction, Product.category)
            .outerjoin(Product, Product.id == UserInteraction.product_id)
            .where(UserInteraction.user_id == user_id)
            .order_by(UserInteraction.timestamp.desc())
            .limit(limit)
        )
        try:
            async with self._session_factory() as session:
                rows = (await session.execute(stmt)).all()
        except SQLAlchemyError as exc:
            logger.error("Error fetching interactions for user %s: %s", user_id, exc)
            raise UpstreamDataError("Failed to fetch user interactions") from exc

        return [
            InteractionEvent(
                user_id=interaction.user_id,
                product_id=interaction.product_id,
                category=category or "",
                action_kind=interaction.action_type,
                observed_at=interaction.timestamp,
            )
            for interaction, category in rows
        ]

    async def fetch_products(
        self, product_filter: ProductFilter, limit: int
    ) -> list[ProductRecord]:
        stmt = select(Product)
        if product_filter.category_in:
            stmt = stmt.where(Product.category.in_(list(product_filter.category_in)))
        if product_filter.category_not_in:
            stmt = stmt.where(Product.category.not_in(list(product_filter.category_not_in)))
        # An empty exclusion set must not turn into "exclude everything".
        if product_filter.exclude_ids:
            stmt = stmt.where(Product.id.not_in(sorted(product_filter.exclude_ids)))
        stmt = stmt.order_by(Product.id).limit(limit)

        try:
            async with self._session_factory() as session:
                products = (await session.execute(stmt)).scalars().all()
        except SQLAlchemyError as exc:
            logger.error("Error fetching products: %s", exc)
            raise UpstreamDataError("Failed to fetch recommendations") from exc
        return [_to_product_record(p) for p in products]

    async def ensure_user(self, user_id: str, name: str, email: str) -> bool:
        try:
            async with self._session_factory() as session:
                existing = await session.get(User, user_id)
                if existing is not None:
                    return False
                session.add(User(id=user_id, name=name, email=email))
                await session.commit()
        except SQLAlchemyError as exc:
            raise UpstreamDataError(f"Failed to create user {user_id}") from exc
        logger.info("Created user record for %s", user_id)
        return True

    async def record_interaction(
        self, user_id: str, product_id: str, action_kind: str
    ) -> InteractionEvent:
        interaction = UserInteraction(
            user_id=user_id,
            product_id=product_id,
            action_type=action_kind,
            timestamp=datetime.now(timezone.utc),
        )
        try:
            async with self._session_factory() as session:
                session.add(interaction)
                await session.commit()
                category = await session.scalar(
                    select(Product.category).where(Product.id == product_id)
                )
        except SQLAlchemyError as exc:
            logger.error("Error recording interaction: %s", exc)
            raise UpstreamDataError("Failed to record interaction") from exc

        return InteractionEvent(
            user_id=user_id,
            product_id=product_id,
            category=category or "",
            action_kind=action_kind,
            observed_at=interaction.timestamp,
        )

    async def list_products(self) -> list[ProductRecord]:
        try:
            async with self._session_factory() as session:
                products = (
                    await session.execute(select(Product).order_by(Product.name))
                ).scalars().all()
        except SQLAlchemyError as exc:
            raise UpstreamDataError("Failed to list products") from exc
        return [_to_product_record(p) for p in products]

    async def list_users(self) -> list[UserRecord]:
        try:
            async with self._session_factory() as session:
                users = (
                    await session.execute(select(User).order_by(User.name))
                ).scalars().all()
        except SQLAlchemyError as exc:
            raise UpstreamDataError("Failed to list users") from exc
        return [
            UserRecord(id=u.id, name=u.name, email=u.email, created_at=u.created_at)
            for u in users
        ]
