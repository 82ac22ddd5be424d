"""
Commerce Database Models

Global product catalog, orders created from Stripe checkout sessions,
and the platform settings row.
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import UUID

from amor_presente.db.models.base import Base


class Product(Base):
    """
    A catalog product.

    Admin-created products have no owner; products imported or added by a
    creator carry `created_by`. Stripe ids are cached after first checkout.
    """

    __tablename__ = "products"

    id = Column(String(64), primary_key=True)  # "prd_<hex>"
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    image_url = Column(Text, nullable=True)
    category = Column(String(100), nullable=True, index=True)
    status = Column(String(20), nullable=False, default="active", index=True)
    stripe_product_id = Column(String(255), nullable=True)
    stripe_price_id = Column(String(255), nullable=True)
    created_by = Column(
        UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)


class Order(Base):
    __tablename__ = "orders"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    site_id = Column(
        UUID(as_uuid=True),
        ForeignKey("sites.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    giver_name = Column(String(255), nullable=True)
    giver_email = Column(String(255), nullable=True)
    giver_message = Column(Text, nullable=True)
    total_amount = Column(Numeric(10, 2), nullable=False)
    status = Column(String(20), nullable=False, default="pending", index=True)  # pending, paid, expired
    stripe_checkout_session_id = Column(String(255), unique=True, nullable=True)
    stripe_payment_intent_id = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    order_id = Column(
        UUID(as_uuid=True),
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    site_product_id = Column(
        UUID(as_uuid=True),
        ForeignKey("site_products.id", ondelete="SET NULL"),
        nullable=True,
    )
    name = Column(String(255), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)


class PlatformSettings(Base):
    """Singleton row (id='platform') with the platform-wide Stripe keys."""

    __tablename__ = "settings"

    id = Column(String(20), primary_key=True, default="platform")
    stripe_public_key = Column(Text, nullable=True)
    stripe_secret_key = Column(Text, nullable=True)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
