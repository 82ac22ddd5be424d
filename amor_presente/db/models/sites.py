"""
Site Database Models

Layouts, creator sites, their product lists and RSVPs.
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    Time,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import ARRAY, UUID

from amor_presente.db.models.base import Base


class Layout(Base):
    __tablename__ = "layouts"

    id = Column(String(50), primary_key=True)  # e.g. "cha-casa-nova"
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(50), nullable=True)
    features = Column(ARRAY(String), nullable=False, default=list)
    is_available = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)


class Site(Base):
    """
    A creator's public event page.

    The slug is assigned once on creation and never changes. Stripe keys
    are stored per site but never returned by the API.
    """

    __tablename__ = "sites"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    creator_id = Column(
        UUID(as_uuid=True),
        ForeignKey("profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    layout_id = Column(String(50), ForeignKey("layouts.id"), nullable=False)

    # Content
    title = Column(String(100), nullable=False)
    slug = Column(String(60), unique=True, nullable=False, index=True)
    description = Column(String(500), nullable=True)
    story_text = Column(Text, nullable=True)
    hero_images = Column(ARRAY(Text), nullable=False, default=list)
    story_images = Column(ARRAY(Text), nullable=False, default=list)

    # Theme
    color_scheme = Column(String(50), nullable=True)
    font_family = Column(String(50), nullable=True)
    font_color = Column(String(50), nullable=True)

    # Event
    event_date = Column(Date, nullable=True)
    event_time = Column(Time, nullable=True)
    event_location = Column(Text, nullable=True)

    # Publishing / payments
    custom_domain = Column(String(255), nullable=True)
    payment_method = Column(String(20), nullable=False, default="stripe")
    stripe_publishable_key = Column(Text, nullable=True)
    stripe_secret_key = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<Site {self.slug}>"


class SiteProduct(Base):
    __tablename__ = "site_products"
    __table_args__ = (UniqueConstraint("site_id", "product_id", name="uq_site_products_site_product"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    site_id = Column(
        UUID(as_uuid=True),
        ForeignKey("sites.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    product_id = Column(
        String(64),
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
    )
    custom_name = Column(String(255), nullable=True)
    custom_description = Column(Text, nullable=True)
    custom_image_url = Column(Text, nullable=True)
    custom_price = Column(Numeric(10, 2), nullable=True)
    is_available = Column(Boolean, nullable=False, default=True)
    position = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)


class SiteRsvp(Base):
    """One RSVP per guest email per site; resubmitting overwrites it."""

    __tablename__ = "site_rsvps"
    __table_args__ = (UniqueConstraint("site_id", "guest_email", name="uq_site_rsvps_site_email"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    site_id = Column(
        UUID(as_uuid=True),
        ForeignKey("sites.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    site_user_id = Column(
        UUID(as_uuid=True),
        ForeignKey("site_users.id", ondelete="SET NULL"),
        nullable=True,
    )
    guest_name = Column(String(255), nullable=False)
    guest_email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    adults_count = Column(Integer, nullable=True)
    children_count = Column(Integer, nullable=True)
    will_attend = Column(Boolean, nullable=False)
    message = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
