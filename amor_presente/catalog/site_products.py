"""
Per-site product lists.

A site product links a catalog product to a site and may override its name,
description, image and price. `effective_item` applies those overrides.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

import structlog
from sqlalchemy import text

from amor_presente.catalog.products import (
    coerce_price,
    insert_product,
    validate_product_fields,
)
from amor_presente.db.client import get_db_session
from amor_presente.kernel.errors import ConflictError, NotFoundError, ValidationError

logger = structlog.get_logger()

DEFAULT_SEED_COUNT = 8

SITE_PRODUCT_SELECT = """
    SELECT
        sp.id, sp.site_id, sp.product_id, sp.custom_name, sp.custom_description,
        sp.custom_image_url, sp.custom_price, sp.is_available, sp.position,
        p.name AS product_name, p.description AS product_description,
        p.price AS product_price, p.image_url AS product_image_url,
        p.category AS product_category, p.status AS product_status,
        p.stripe_product_id, p.stripe_price_id
    FROM site_products sp
    JOIN products p ON p.id = sp.product_id
"""

_EDITABLE_FIELDS = (
    "custom_name",
    "custom_description",
    "custom_image_url",
    "custom_price",
    "is_available",
    "position",
)


def effective_item(site_product: Any, product: Any) -> dict[str, Any]:
    """
    Apply site overrides to a catalog product.

    Text overrides win when non-empty; `custom_price` wins whenever it is set,
    including 0.
    """
    def pick(obj: Any, key: str) -> Any:
        return obj.get(key) if isinstance(obj, dict) else getattr(obj, key, None)

    custom_price = pick(site_product, "custom_price")
    price = custom_price if custom_price is not None else pick(product, "price")
    return {
        "name": pick(site_product, "custom_name") or pick(product, "name"),
        "description": pick(site_product, "custom_description") or pick(product, "description"),
        "image_url": pick(site_product, "custom_image_url") or pick(product, "image_url"),
        "price": Decimal(str(price)) if price is not None else None,
    }


def site_product_dict(row: Any) -> dict[str, Any]:
    product = {
        "name": row.product_name,
        "description": row.product_description,
        "image_url": row.product_image_url,
        "price": row.product_price,
    }
    return {
        "id": str(row.id),
        "site_id": str(row.site_id),
        "product_id": row.product_id,
        "custom_name": row.custom_name,
        "custom_description": row.custom_description,
        "custom_image_url": row.custom_image_url,
        "custom_price": Decimal(str(row.custom_price)) if row.custom_price is not None else None,
        "is_available": bool(row.is_available),
        "position": row.position,
        "category": row.product_category,
        "catalog_price": Decimal(str(row.product_price)) if row.product_price is not None else None,
        **effective_item(row, product),
    }


async def list_site_products(site_id: str, *, only_available: bool = False) -> list[dict[str, Any]]:
    where = "WHERE sp.site_id = :site_id"
    if only_available:
        where += " AND sp.is_available = true AND p.status = 'active'"
    async with get_db_session() as session:
        result = await session.execute(
            text(f"{SITE_PRODUCT_SELECT} {where} ORDER BY sp.position ASC NULLS LAST, sp.created_at ASC"),
            {"site_id": site_id},
        )
        return [site_product_dict(row) for row in result.fetchall()]


async def next_position(session: Any, site_id: str) -> int:
    result = await session.execute(
        text("SELECT COALESCE(MAX(position), 0) AS max_position FROM site_products WHERE site_id = :site_id"),
        {"site_id": site_id},
    )
    return int(result.fetchone().max_position) + 1


async def link_product(session: Any, site_id: str, product_id: str, position: int) -> str | None:
    result = await session.execute(
        text(
            """
            INSERT INTO site_products (site_id, product_id, position, is_available)
            VALUES (:site_id, :product_id, :position, true)
            ON CONFLICT (site_id, product_id) DO NOTHING
            RETURNING id
            """
        ),
        {"site_id": site_id, "product_id": product_id, "position": position},
    )
    row = result.fetchone()
    return str(row.id) if row else None


async def add_catalog_product(site_id: str, product_id: str) -> dict[str, Any]:
    async with get_db_session() as session:
        product = await session.execute(
            text("SELECT id FROM products WHERE id = :id AND status = 'active'"),
            {"id": product_id},
        )
        if not product.fetchone():
            raise NotFoundError(message="Produto não encontrado", code="product.not_found")

        position = await next_position(session, site_id)
        site_product_id = await link_product(session, site_id, product_id, position)

    if not site_product_id:
        raise ConflictError(
            message="Este produto já está na lista do site",
            code="site_product.duplicate",
        )
    logger.info("Product added to site", site_id=site_id, product_id=product_id, position=position)
    return {"id": site_product_id, "site_id": site_id, "product_id": product_id, "position": position}


async def add_custom_product(site_id: str, creator_id: str, fields: dict[str, Any]) -> dict[str, Any]:
    """Create a creator-owned product and append it to the site."""
    cleaned = validate_product_fields(fields)
    async with get_db_session() as session:
        product = await insert_product(session, cleaned, creator_id)
        position = await next_position(session, site_id)
        site_product_id = await link_product(session, site_id, product["id"], position)

    logger.info("Custom product added to site", site_id=site_id, product_id=product["id"])
    return {
        "id": site_product_id,
        "site_id": site_id,
        "product_id": product["id"],
        "position": position,
        "product": product,
    }


async def seed_default_products(site_id: str, *, limit: int = DEFAULT_SEED_COUNT) -> int:
    """Give an empty site the first active catalog products (positions 1..limit)."""
    async with get_db_session() as session:
        existing = await session.execute(
            text("SELECT COUNT(*) AS total FROM site_products WHERE site_id = :site_id"),
            {"site_id": site_id},
        )
        if int(existing.fetchone().total) > 0:
            return 0

        result = await session.execute(
            text(
                """
                INSERT INTO site_products (site_id, product_id, position, is_available)
                SELECT :site_id, seed.id, seed.position, true
                FROM (
                    SELECT id, ROW_NUMBER() OVER (ORDER BY created_at ASC, id ASC) AS position
                    FROM products
                    WHERE status = 'active'
                    ORDER BY created_at ASC, id ASC
                    LIMIT :limit
                ) AS seed
                ON CONFLICT (site_id, product_id) DO NOTHING
                RETURNING id
                """
            ),
            {"site_id": site_id, "limit": limit},
        )
        seeded = len(result.fetchall())

    logger.info("Default products seeded", site_id=site_id, count=seeded)
    return seeded


async def get_site_product(site_id: str, site_product_id: str) -> dict[str, Any]:
    async with get_db_session() as session:
        result = await session.execute(
            text(f"{SITE_PRODUCT_SELECT} WHERE sp.site_id = :site_id AND sp.id = :id"),
            {"site_id": site_id, "id": site_product_id},
        )
        row = result.fetchone()
    if not row:
        raise NotFoundError(message="Produto não encontrado na lista", code="site_product.not_found")
    return site_product_dict(row)


async def update_site_product(site_id: str, site_product_id: str, changes: dict[str, Any]) -> dict[str, Any]:
    cleaned: dict[str, Any] = {}
    for key in _EDITABLE_FIELDS:
        if key not in changes:
            continue
        value = changes[key]
        if key == "custom_price" and value is not None:
            value = coerce_price(value)
        elif key in ("is_available", "position") and value is None:
            continue
        elif key == "position":
            if int(value) < 1:
                raise ValidationError(message="Posição inválida", code="site_product.invalid_position")
            value = int(value)
        elif key == "is_available":
            value = bool(value)
        elif isinstance(value, str):
            value = value.strip() or None
        cleaned[key] = value

    if cleaned:
        assignments = ", ".join(f"{key} = :{key}" for key in cleaned)
        async with get_db_session() as session:
            result = await session.execute(
                text(
                    f"""
                    UPDATE site_products
                    SET {assignments}, updated_at = NOW()
                    WHERE id = :id AND site_id = :site_id
                    """
                ),
                {**cleaned, "id": site_product_id, "site_id": site_id},
            )
        if not result.rowcount:
            raise NotFoundError(message="Produto não encontrado na lista", code="site_product.not_found")

    return await get_site_product(site_id, site_product_id)


async def remove_site_product(site_id: str, site_product_id: str) -> None:
    async with get_db_session() as session:
        result = await session.execute(
            text("DELETE FROM site_products WHERE id = :id AND site_id = :site_id"),
            {"id": site_product_id, "site_id": site_id},
        )
    if not result.rowcount:
        raise NotFoundError(message="Produto não encontrado na lista", code="site_product.not_found")
    logger.info("Product removed from site", site_id=site_id, site_product_id=site_product_id)
