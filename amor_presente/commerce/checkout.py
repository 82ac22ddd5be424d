"""
Stripe Checkout for guest gift purchases.

Items reference site products by id. Each one is re-priced from the database
(custom overrides applied); items that do not resolve fall back to the data
the client sent. A pending order is recorded for every session created.
"""

from __future__ import annotations

import json
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any
from uuid import uuid4

import structlog
from sqlalchemy import text

from amor_presente.catalog.site_products import SITE_PRODUCT_SELECT, effective_item
from amor_presente.commerce.cart import CENTS, Cart, CartItem
from amor_presente.config import get_settings
from amor_presente.db.client import get_db_session
from amor_presente.db.rls import acting_for_guests
from amor_presente.integrations import payments
from amor_presente.kernel.errors import PresenteError, SiteNotFoundError, ValidationError
from amor_presente.sites.service import get_site_stripe_keys
from amor_presente.sites.slug import is_uuid

logger = structlog.get_logger()

_HTTP_URL_RE = re.compile(r"^https?://", re.IGNORECASE)
_METADATA_VALUE_LIMIT = 500


class StripeNotConfiguredError(PresenteError):
    status_code = 503
    default_code = "checkout.stripe_not_configured"
    default_message = "Pagamentos não configurados para este site"


def to_unit_amount(price: Decimal) -> int:
    """Reais to centavos, rounding half up."""
    return int((price * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def stripe_image(url: str | None) -> str | None:
    return url if isinstance(url, str) and _HTTP_URL_RE.match(url) else None


def _parse_quantity(value: Any) -> int:
    if value in (None, ""):
        return 1
    try:
        quantity = int(value)
    except (TypeError, ValueError):
        raise ValidationError(message="Quantidade inválida", code="checkout.invalid_quantity")
    if quantity < 1:
        raise ValidationError(message="Quantidade inválida", code="checkout.invalid_quantity")
    return quantity


def _parse_fallback_price(value: Any) -> Decimal | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        price = Decimal(str(value))
    except InvalidOperation:
        return None
    return price if price >= 0 else None


def _items_metadata(items: list[dict[str, Any]]) -> str | None:
    compact = json.dumps(
        [{"id": item.get("id"), "quantity": _parse_quantity(item.get("quantity"))} for item in items],
        separators=(",", ":"),
    )
    # Stripe caps metadata values; the order row keeps the full detail.
    return compact if len(compact) <= _METADATA_VALUE_LIMIT else None


async def resolve_stripe_secret_key(site_secret_key: str | None) -> tuple[str, str]:
    """Site key, then the platform settings row, then configuration."""
    if site_secret_key:
        return site_secret_key, "site"

    async with get_db_session() as session:
        result = await session.execute(
            text("SELECT stripe_secret_key FROM settings WHERE id = 'platform'")
        )
        row = result.fetchone()
    if row and row.stripe_secret_key:
        return row.stripe_secret_key, "platform"

    settings = get_settings()
    if settings.stripe_secret_key:
        return settings.stripe_secret_key, "config"
    raise StripeNotConfiguredError()


async def _load_site_products(site_id: str, ids: list[str]) -> dict[str, Any]:
    ids = [i for i in ids if is_uuid(i)]
    if not ids:
        return {}
    async with get_db_session() as session:
        result = await session.execute(
            text(f"{SITE_PRODUCT_SELECT} WHERE sp.site_id = :site_id AND sp.id = ANY(CAST(:ids AS uuid[]))"),
            {"site_id": site_id, "ids": ids},
        )
        return {str(row.id): row for row in result.fetchall()}


async def _cache_stripe_ids(product_id: str, stripe_product_id: str, stripe_price_id: str) -> None:
    async with get_db_session() as session:
        await session.execute(
            text(
                """
                UPDATE products
                SET stripe_product_id = :stripe_product_id,
                    stripe_price_id = :stripe_price_id,
                    updated_at = NOW()
                WHERE id = :id
                """
            ),
            {
                "id": product_id,
                "stripe_product_id": stripe_product_id,
                "stripe_price_id": stripe_price_id,
            },
        )


async def _new_stripe_price(
    api_key: str,
    *,
    name: str,
    description: str | None,
    image_url: str | None,
    price: Decimal,
    metadata: dict[str, str],
) -> tuple[str, str]:
    settings = get_settings()
    stripe_product_id = await payments.create_product(
        api_key,
        name=name,
        description=description,
        image_url=stripe_image(image_url),
        metadata=metadata,
    )
    stripe_price_id = await payments.create_price(
        api_key,
        product_id=stripe_product_id,
        unit_amount=to_unit_amount(price),
        currency=settings.stripe_currency,
    )
    return stripe_product_id, stripe_price_id


async def _resolve_item(
    site_id: str,
    key: str,
    item: dict[str, Any],
    row: Any,
    api_key: str,
    *,
    cache_prices: bool,
) -> tuple[CartItem, str]:
    if row is not None:
        effective = effective_item(
            row,
            {
                "name": row.product_name,
                "description": row.product_description,
                "image_url": row.product_image_url,
                "price": row.product_price,
            },
        )
        price = effective["price"]
        uses_catalog_price = price == Decimal(str(row.product_price))

        if uses_catalog_price and cache_prices and row.stripe_price_id:
            stripe_price_id = row.stripe_price_id
        else:
            stripe_product_id, stripe_price_id = await _new_stripe_price(
                api_key,
                name=effective["name"],
                description=effective["description"],
                image_url=effective["image_url"],
                price=price,
                metadata={"product_id": row.product_id, "site_product_id": str(row.id)},
            )
            if uses_catalog_price and cache_prices:
                await _cache_stripe_ids(row.product_id, stripe_product_id, stripe_price_id)
        cart_item = CartItem(
            id=key,
            name=effective["name"],
            price=price,
            image_url=effective["image_url"],
            site_product_id=str(row.id),
        )
        return cart_item, stripe_price_id

    name = (item.get("name") or "").strip() if isinstance(item.get("name"), str) else None
    price = _parse_fallback_price(item.get("price"))
    if not name or price is None:
        raise ValidationError(
            message="Missing product data for checkout item",
            code="checkout.missing_item_data",
        )
    _, stripe_price_id = await _new_stripe_price(
        api_key,
        name=name,
        description=item.get("description") or None,
        image_url=item.get("image_url"),
        price=price,
        metadata={"site_id": site_id, "source": "fallback"},
    )
    return CartItem(id=key, name=name, price=price, image_url=item.get("image_url")), stripe_price_id


async def build_line_items(
    site_id: str,
    items: list[dict[str, Any]],
    api_key: str,
    *,
    cache_prices: bool,
) -> tuple[list[dict[str, Any]], Cart]:
    """
    Resolve checkout items into Stripe line items and a priced cart.

    A cached Stripe price is only reused when the effective price equals the
    catalog price; custom prices always get an ad-hoc Stripe price. Items
    posted twice with the same id become one line.
    """
    rows = await _load_site_products(site_id, [str(item.get("id") or "") for item in items])
    cart = Cart()
    resolved: dict[str, tuple[CartItem, str]] = {}

    for index, item in enumerate(items):
        quantity = _parse_quantity(item.get("quantity"))
        key = str(item.get("id") or "") or f"item-{index}"
        if key not in resolved:
            resolved[key] = await _resolve_item(
                site_id, key, item, rows.get(key), api_key, cache_prices=cache_prices
            )
        cart.add(resolved[key][0], quantity)

    line_items = [{"price": resolved[entry.id][1], "quantity": entry.quantity} for entry in cart.items]
    return line_items, cart


async def _record_order(
    order_id: str,
    site_id: str,
    session_id: str,
    cart: Cart,
    giver: dict[str, Any],
) -> None:
    # Guests have no owner identity, so the order is written as a service action.
    with acting_for_guests():
        async with get_db_session() as session:
            await session.execute(
                text(
                    """
                    INSERT INTO orders (
                        id, site_id, giver_name, giver_email, giver_message,
                        total_amount, status, stripe_checkout_session_id
                    )
                    VALUES (
                        :id, :site_id, :giver_name, :giver_email, :giver_message,
                        :total_amount, 'pending', :session_id
                    )
                    """
                ),
                {
                    "id": order_id,
                    "site_id": site_id,
                    "giver_name": giver.get("name"),
                    "giver_email": giver.get("email"),
                    "giver_message": giver.get("message"),
                    "total_amount": cart.total,
                    "session_id": session_id,
                },
            )
            for entry in cart.items:
                await session.execute(
                    text(
                        """
                        INSERT INTO order_items (order_id, site_product_id, name, price, quantity)
                        VALUES (:order_id, :site_product_id, :name, :price, :quantity)
                        """
                    ),
                    {
                        "order_id": order_id,
                        "site_product_id": entry.site_product_id,
                        "name": entry.name,
                        "price": entry.price.quantize(CENTS),
                        "quantity": entry.quantity,
                    },
                )


async def create_checkout_session(
    site_id: str | None,
    items: list[dict[str, Any]] | None,
    origin: str,
    giver: dict[str, Any] | None = None,
) -> dict[str, str]:
    if not items:
        raise ValidationError(message="Items are required", code="checkout.items_required")
    if not site_id:
        raise ValidationError(message="Site ID is required", code="checkout.site_required")

    site = await get_site_stripe_keys(site_id) if is_uuid(site_id) else None
    if not site:
        raise SiteNotFoundError(site_id)

    api_key, key_source = await resolve_stripe_secret_key(site["secret_key"])
    # Products are global but Stripe prices belong to one account: only the
    # platform account shares cached price ids.
    line_items, cart = await build_line_items(
        site_id,
        items,
        api_key,
        cache_prices=key_source != "site",
    )

    giver = giver or {}
    order_id = str(uuid4())
    origin = origin.rstrip("/")
    metadata = {"site_id": site_id, "order_id": order_id}
    items_metadata = _items_metadata(items)
    if items_metadata:
        metadata["items"] = items_metadata

    params: dict[str, Any] = {
        "mode": "payment",
        "line_items": line_items,
        "success_url": f"{origin}/payment-success?session_id={{CHECKOUT_SESSION_ID}}",
        "cancel_url": f"{origin}/site/{site_id}",
        "metadata": metadata,
        "client_reference_id": order_id,
        "allow_promotion_codes": True,
    }
    if giver.get("email"):
        params["customer_email"] = giver["email"]

    checkout = await payments.create_checkout_session(api_key, **params)
    await _record_order(order_id, site_id, checkout["id"], cart, giver)

    logger.info(
        "Checkout session created",
        site_id=site_id,
        order_id=order_id,
        session_id=checkout["id"],
        item_count=cart.item_count,
        total=str(cart.total),
        key_source=key_source,
    )
    return {"url": checkout["url"], "session_id": checkout["id"], "order_id": order_id}
