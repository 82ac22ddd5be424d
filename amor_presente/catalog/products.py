"""
Global product catalog.

Admins manage the shared catalog; creators add their own products through
site customization or CSV import (those rows carry `created_by`).
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

import structlog
from sqlalchemy import text

from amor_presente.db.client import get_db_session
from amor_presente.kernel.errors import NotFoundError, ValidationError
from amor_presente.kernel.ids import new_prefixed_id

logger = structlog.get_logger()

DEFAULT_CATEGORY = "Eletrodomésticos"
DEFAULT_CATEGORIES = [
    "Eletrodomésticos",
    "Mesa e Decoração",
    "Brincadeiras",
    "Casa e Jardim",
    "Cozinha",
]
PRODUCT_STATUSES = ("active", "inactive")
PRODUCT_COLUMNS = "id, name, description, price, image_url, category, status, created_by, created_at, updated_at"

_EDITABLE_FIELDS = ("name", "description", "price", "image_url", "category", "status")


def product_dict(row: Any) -> dict[str, Any]:
    return {
        "id": row.id,
        "name": row.name,
        "description": row.description,
        "price": Decimal(str(row.price)) if row.price is not None else None,
        "image_url": row.image_url,
        "category": row.category,
        "status": row.status,
        "created_by": str(row.created_by) if getattr(row, "created_by", None) else None,
    }


def coerce_price(value: Any) -> Decimal:
    try:
        price = Decimal(str(value)).quantize(Decimal("0.01"))
    except (InvalidOperation, ValueError):
        raise ValidationError(message="Preço inválido", code="product.invalid_price")
    if price < 0:
        raise ValidationError(message="O preço não pode ser negativo", code="product.invalid_price")
    return price


def validate_product_fields(fields: dict[str, Any], *, partial: bool = False) -> dict[str, Any]:
    """Normalize product fields. Name and price are required unless `partial`."""
    cleaned: dict[str, Any] = {}
    if "name" in fields or not partial:
        name = (fields.get("name") or "").strip()
        if not name:
            raise ValidationError(message="Nome do produto é obrigatório", code="product.name_required")
        cleaned["name"] = name
    if "price" in fields or not partial:
        if fields.get("price") is None:
            raise ValidationError(message="Preço é obrigatório", code="product.price_required")
        cleaned["price"] = coerce_price(fields["price"])
    if "status" in fields and fields["status"] is not None:
        if fields["status"] not in PRODUCT_STATUSES:
            raise ValidationError(message="Status inválido", code="product.invalid_status")
        cleaned["status"] = fields["status"]
    for key in ("description", "image_url", "category"):
        if key in fields:
            value = fields[key]
            cleaned[key] = value.strip() or None if isinstance(value, str) else value
    return cleaned


async def list_products(
    *,
    category: str | None = None,
    status: str | None = "active",
    q: str | None = None,
) -> list[dict[str, Any]]:
    clauses = []
    params: dict[str, Any] = {}
    if status:
        clauses.append("status = :status")
        params["status"] = status
    if category:
        clauses.append("category = :category")
        params["category"] = category
    if q:
        clauses.append("(name ILIKE :q OR description ILIKE :q)")
        params["q"] = f"%{q.strip()}%"
    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

    async with get_db_session() as session:
        result = await session.execute(
            text(f"SELECT {PRODUCT_COLUMNS} FROM products {where} ORDER BY created_at ASC, id ASC"),
            params,
        )
        return [product_dict(row) for row in result.fetchall()]


async def list_categories() -> list[str]:
    """Default categories first, then any other category found in the catalog."""
    async with get_db_session() as session:
        result = await session.execute(
            text(
                """
                SELECT DISTINCT category
                FROM products
                WHERE category IS NOT NULL AND category <> ''
                ORDER BY category
                """
            )
        )
        found = [row.category for row in result.fetchall()]
    return DEFAULT_CATEGORIES + [c for c in found if c not in DEFAULT_CATEGORIES]


async def get_product(product_id: str) -> dict[str, Any]:
    async with get_db_session() as session:
        result = await session.execute(
            text(f"SELECT {PRODUCT_COLUMNS} FROM products WHERE id = :id"),
            {"id": product_id},
        )
        row = result.fetchone()
    if not row:
        raise NotFoundError(message="Produto não encontrado", code="product.not_found")
    return product_dict(row)


async def insert_product(session: Any, fields: dict[str, Any], created_by: str | None) -> dict[str, Any]:
    """Insert a validated product inside an existing session."""
    result = await session.execute(
        text(
            f"""
            INSERT INTO products (id, name, description, price, image_url, category, status, created_by)
            VALUES (:id, :name, :description, :price, :image_url, :category, :status, :created_by)
            RETURNING {PRODUCT_COLUMNS}
            """
        ),
        {
            "id": new_prefixed_id("prd"),
            "name": fields["name"],
            "description": fields.get("description"),
            "price": fields["price"],
            "image_url": fields.get("image_url"),
            "category": fields.get("category") or DEFAULT_CATEGORY,
            "status": fields.get("status") or "active",
            "created_by": created_by,
        },
    )
    return product_dict(result.fetchone())


async def create_product(fields: dict[str, Any], *, created_by: str | None = None) -> dict[str, Any]:
    cleaned = validate_product_fields(fields)
    async with get_db_session() as session:
        product = await insert_product(session, cleaned, created_by)
    logger.info("Product created", product_id=product["id"], created_by=created_by)
    return product


async def update_product(product_id: str, changes: dict[str, Any]) -> dict[str, Any]:
    cleaned = validate_product_fields(
        {k: v for k, v in changes.items() if k in _EDITABLE_FIELDS},
        partial=True,
    )
    if not cleaned:
        return await get_product(product_id)

    assignments = ", ".join(f"{key} = :{key}" for key in cleaned)
    # A new catalog price invalidates the cached Stripe price.
    if "price" in cleaned:
        assignments += ", stripe_price_id = NULL"
    async with get_db_session() as session:
        result = await session.execute(
            text(
                f"""
                UPDATE products
                SET {assignments}, updated_at = NOW()
                WHERE id = :id
                RETURNING {PRODUCT_COLUMNS}
                """
            ),
            {**cleaned, "id": product_id},
        )
        row = result.fetchone()
    if not row:
        raise NotFoundError(message="Produto não encontrado", code="product.not_found")
    return product_dict(row)


async def delete_product(product_id: str) -> None:
    async with get_db_session() as session:
        result = await session.execute(
            text("DELETE FROM products WHERE id = :id"),
            {"id": product_id},
        )
    if not result.rowcount:
        raise NotFoundError(message="Produto não encontrado", code="product.not_found")
    logger.info("Product deleted", product_id=product_id)
