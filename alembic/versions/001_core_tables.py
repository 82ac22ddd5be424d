"""Create core tables.

Revision ID: 001_core_tables
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID, ARRAY

# revision identifiers, used by Alembic.
revision: str = "001_core_tables"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps(updated: bool = True) -> list[sa.Column]:
    columns = [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        )
    ]
    if updated:
        columns.append(
            sa.Column(
                "updated_at",
                sa.DateTime(timezone=True),
                nullable=False,
                server_default=sa.func.now(),
            )
        )
    return columns


def upgrade() -> None:
    op.execute("CREATE EXTENSION IF NOT EXISTS pgcrypto")

    # ==========================================================================
    # Accounts
    # ==========================================================================
    op.create_table(
        "profiles",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(255), unique=True, nullable=False),
        sa.Column("name", sa.String(255), nullable=True),
        sa.Column("avatar_url", sa.Text, nullable=True),
        sa.Column("user_type", sa.String(20), nullable=False, server_default="creator"),
        sa.Column("approval_status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("approved_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "approval_status IN ('pending', 'approved', 'rejected')",
            name="ck_profiles_approval_status",
        ),
    )
    op.create_index("idx_profiles_approval_status", "profiles", ["approval_status"])

    op.create_table(
        "admins",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("email", sa.String(255), unique=True, nullable=False),
        sa.Column("password_hash", sa.Text, nullable=False),
        *_timestamps(updated=False),
    )

    op.create_table(
        "guest_users",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("email", sa.String(255), unique=True, nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.Text, nullable=False),
        *_timestamps(updated=False),
    )

    op.create_table(
        "settings",
        sa.Column("id", sa.String(20), primary_key=True, server_default="platform"),
        sa.Column("stripe_public_key", sa.Text, nullable=True),
        sa.Column("stripe_secret_key", sa.Text, nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )

    # ==========================================================================
    # Sites
    # ==========================================================================
    op.create_table(
        "layouts",
        sa.Column("id", sa.String(50), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("category", sa.String(50), nullable=True),
        sa.Column("features", ARRAY(sa.String), nullable=False, server_default="{}"),
        sa.Column("is_available", sa.Boolean, nullable=False, server_default=sa.false()),
        *_timestamps(),
    )

    op.create_table(
        "sites",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column(
            "creator_id",
            UUID(as_uuid=True),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("layout_id", sa.String(50), sa.ForeignKey("layouts.id"), nullable=False),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("slug", sa.String(60), unique=True, nullable=False),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column("story_text", sa.Text, nullable=True),
        sa.Column("hero_images", ARRAY(sa.Text), nullable=False, server_default="{}"),
        sa.Column("story_images", ARRAY(sa.Text), nullable=False, server_default="{}"),
        sa.Column("color_scheme", sa.String(50), nullable=True),
        sa.Column("font_family", sa.String(50), nullable=True),
        sa.Column("font_color", sa.String(50), nullable=True),
        sa.Column("event_date", sa.Date, nullable=True),
        sa.Column("event_time", sa.Time, nullable=True),
        sa.Column("event_location", sa.Text, nullable=True),
        sa.Column("custom_domain", sa.String(255), nullable=True),
        sa.Column("payment_method", sa.String(20), nullable=False, server_default="stripe"),
        sa.Column("stripe_publishable_key", sa.Text, nullable=True),
        sa.Column("stripe_secret_key", sa.Text, nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("idx_sites_creator", "sites", ["creator_id"])

    op.create_table(
        "products",
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("image_url", sa.Text, nullable=True),
        sa.Column("category", sa.String(100), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="active"),
        sa.Column("stripe_product_id", sa.String(255), nullable=True),
        sa.Column("stripe_price_id", sa.String(255), nullable=True),
        sa.Column(
            "created_by",
            UUID(as_uuid=True),
            sa.ForeignKey("profiles.id", ondelete="SET NULL"),
            nullable=True,
        ),
        *_timestamps(),
        sa.CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
    )
    op.create_index("idx_products_category", "products", ["category"])
    op.create_index("idx_products_status", "products", ["status"])

    op.create_table(
        "site_products",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column(
            "site_id",
            UUID(as_uuid=True),
            sa.ForeignKey("sites.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "product_id",
            sa.String(64),
            sa.ForeignKey("products.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("custom_name", sa.String(255), nullable=True),
        sa.Column("custom_description", sa.Text, nullable=True),
        sa.Column("custom_image_url", sa.Text, nullable=True),
        sa.Column("custom_price", sa.Numeric(10, 2), nullable=True),
        sa.Column("is_available", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("position", sa.Integer, nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("site_id", "product_id", name="uq_site_products_site_product"),
    )
    op.create_index("idx_site_products_site", "site_products", ["site_id", "position"])

    op.create_table(
        "site_users",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column(
            "site_id",
            UUID(as_uuid=True),
            sa.ForeignKey("sites.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.Text, nullable=False),
        *_timestamps(updated=False),
        sa.UniqueConstraint("site_id", "email", name="uq_site_users_site_email"),
    )

    op.create_table(
        "site_rsvps",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column(
            "site_id",
            UUID(as_uuid=True),
            sa.ForeignKey("sites.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "site_user_id",
            UUID(as_uuid=True),
            sa.ForeignKey("site_users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("guest_name", sa.String(255), nullable=False),
        sa.Column("guest_email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("adults_count", sa.Integer, nullable=True),
        sa.Column("children_count", sa.Integer, nullable=True),
        sa.Column("will_attend", sa.Boolean, nullable=False),
        sa.Column("message", sa.Text, nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("site_id", "guest_email", name="uq_site_rsvps_site_email"),
    )

    # ==========================================================================
    # Orders
    # ==========================================================================
    op.create_table(
        "orders",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column(
            "site_id",
            UUID(as_uuid=True),
            sa.ForeignKey("sites.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("giver_name", sa.String(255), nullable=True),
        sa.Column("giver_email", sa.String(255), nullable=True),
        sa.Column("giver_message", sa.Text, nullable=True),
        sa.Column("total_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("stripe_checkout_session_id", sa.String(255), unique=True, nullable=True),
        sa.Column("stripe_payment_intent_id", sa.String(255), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('pending', 'paid', 'expired')",
            name="ck_orders_status",
        ),
    )
    op.create_index("idx_orders_site_status", "orders", ["site_id", "status"])

    op.create_table(
        "order_items",
        sa.Column("id", UUID(as_uuid=True), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column(
            "order_id",
            UUID(as_uuid=True),
            sa.ForeignKey("orders.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "site_product_id",
            UUID(as_uuid=True),
            sa.ForeignKey("site_products.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("quantity", sa.Integer, nullable=False, server_default="1"),
        *_timestamps(updated=False),
    )
    op.create_index("idx_order_items_order", "order_items", ["order_id"])


def downgrade() -> None:
    for table in (
        "order_items",
        "orders",
        "site_rsvps",
        "site_users",
        "site_products",
        "products",
        "sites",
        "layouts",
        "settings",
        "guest_users",
        "admins",
        "profiles",
    ):
        op.drop_table(table)
