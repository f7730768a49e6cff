"""SQLAlchemy ORM models."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, relationship


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


ACTION_TYPES = ("view", "add_to_cart", "purchase")


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"

    id = Column(String(64), primary_key=True, default=_new_id)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, default="")
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    interactions = relationship("UserInteraction", back_populates="user")


class Product(Base):
    __tablename__ = "products"

    id = Column(String(64), primary_key=True, default=_new_id)
    name = Column(String(300), nullable=False, index=True)
    description = Column(Text, nullable=False, default="")
    category = Column(String(100), nullable=False, index=True)
    price = Column(Float, nullable=False)
    image_url = Column(String(1000), nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    interactions = relationship("UserInteraction", back_populates="product")


class UserInteraction(Base):
    __tablename__ = "user_interactions"

    id = Column(String(64), primary_key=True, default=_new_id)
    user_id = Column(String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(64), ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    action_type = Column(
        Enum(*ACTION_TYPES, name="action_type_enum"),
        nullable=False,
    )
    timestamp = Column(DateTime(timezone=True), default=_utcnow, index=True)

    user = relationship("User", back_populates="interactions")
    product = relationship("Product", back_populates="interactions")
