"""Admin dashboard stats and platform-wide Stripe settings."""

from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy import text

from amor_presente.db.client import get_db_session
from amor_presente.kernel.errors import ValidationError

logger = structlog.get_logger()

PLATFORM_SETTINGS_ID = "platform"


async def get_dashboard_stats() -> dict[str, int]:
    async with get_db_session() as session:
        result = await session.execute(
            text(
                """
                SELECT
                    (SELECT COUNT(*) FROM sites) AS sites,
                    (SELECT COUNT(*) FROM sites WHERE is_active = true) AS active_sites,
                    (SELECT COUNT(*) FROM profiles) AS profiles,
                    (SELECT COUNT(*) FROM profiles WHERE approval_status = 'pending') AS pending_profiles,
                    (SELECT COUNT(*) FROM products) AS products,
                    (SELECT COUNT(*) FROM orders WHERE status = 'pending') AS pending_orders
                """
            )
        )
        row = result.fetchone()
    return {
        "sites": int(row.sites),
        "active_sites": int(row.active_sites),
        "profiles": int(row.profiles),
        "pending_profiles": int(row.pending_profiles),
        "products": int(row.products),
        "pending_orders": int(row.pending_orders),
    }


def _mask(secret: str | None) -> str | None:
    if not secret:
        return None
    return f"{secret[:7]}…{secret[-4:]}" if len(secret) > 12 else "…"


async def get_platform_settings() -> dict[str, Any]:
    """The secret key is never returned, only a masked hint."""
    async with get_db_session() as session:
        result = await session.execute(
            text("SELECT stripe_public_key, stripe_secret_key, updated_at FROM settings WHERE id = :id"),
            {"id": PLATFORM_SETTINGS_ID},
        )
        row = result.fetchone()
    if not row:
        return {
            "stripe_public_key": None,
            "has_stripe_secret_key": False,
            "stripe_secret_key_hint": None,
            "updated_at": None,
        }
    return {
        "stripe_public_key": row.stripe_public_key,
        "has_stripe_secret_key": bool(row.stripe_secret_key),
        "stripe_secret_key_hint": _mask(row.stripe_secret_key),
        "updated_at": row.updated_at,
    }


async def update_platform_settings(
    *,
    stripe_public_key: str | None = None,
    stripe_secret_key: str | None = None,
) -> dict[str, Any]:
    """
    Upsert the platform Stripe keys.

    `None` leaves a key untouched; an empty string clears it.
    """
    if stripe_public_key and not stripe_public_key.startswith("pk_"):
        raise ValidationError(message="Chave pública do Stripe inválida", code="settings.invalid_public_key")
    if stripe_secret_key and not stripe_secret_key.startswith(("sk_", "rk_")):
        raise ValidationError(message="Chave secreta do Stripe inválida", code="settings.invalid_secret_key")

    async with get_db_session() as session:
        await session.execute(
            text(
                """
                INSERT INTO settings (id, stripe_public_key, stripe_secret_key, updated_at)
                VALUES (:id, NULLIF(:public_key, ''), NULLIF(:secret_key, ''), NOW())
                ON CONFLICT (id) DO UPDATE SET
                    stripe_public_key = CASE WHEN :public_key IS NULL
                        THEN settings.stripe_public_key ELSE NULLIF(:public_key, '') END,
                    stripe_secret_key = CASE WHEN :secret_key IS NULL
                        THEN settings.stripe_secret_key ELSE NULLIF(:secret_key, '') END,
                    updated_at = NOW()
                """
            ),
            {
                "id": PLATFORM_SETTINGS_ID,
                "public_key": stripe_public_key,
                "secret_key": stripe_secret_key,
            },
        )
    logger.info(
        "Platform Stripe settings updated",
        public_key_changed=stripe_public_key is not None,
        secret_key_changed=stripe_secret_key is not None,
    )
    return await get_platform_settings()
