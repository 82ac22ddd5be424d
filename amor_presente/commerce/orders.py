"""Orders created by checkout and settled by Stripe webhooks."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

import structlog
from sqlalchemy import text

from amor_presente.auth.context import AuthContext
from amor_presente.config import get_settings
from amor_presente.db.client import get_db_session
from amor_presente.db.rls import acting_for_guests
from amor_presente.integrations import payments
from amor_presente.kernel.errors import NotFoundError, PresenteError, UpstreamError
from amor_presente.sites.service import get_owned_site, get_site_stripe_keys

logger = structlog.get_logger()

ORDER_COLUMNS = """
    id, site_id, giver_name, giver_email, giver_message, total_amount, status,
    stripe_checkout_session_id, stripe_payment_intent_id, created_at, updated_at
"""


def order_dict(row: Any, items: list[Any] | None = None) -> dict[str, Any]:
    return {
        "id": str(row.id),
        "site_id": str(row.site_id),
        "giver_name": row.giver_name,
        "giver_email": row.giver_email,
        "giver_message": row.giver_message,
        "total_amount": Decimal(str(row.total_amount)),
        "status": row.status,
        "stripe_checkout_session_id": row.stripe_checkout_session_id,
        "stripe_payment_intent_id": row.stripe_payment_intent_id,
        "created_at": row.created_at,
        "updated_at": row.updated_at,
        "items": [
            {
                "id": str(item.id),
                "site_product_id": str(item.site_product_id) if item.site_product_id else None,
                "name": item.name,
                "price": Decimal(str(item.price)),
                "quantity": item.quantity,
            }
            for item in (items or [])
        ],
    }


async def _load_items(session: Any, order_ids: list[str]) -> dict[str, list[Any]]:
    if not order_ids:
        return {}
    result = await session.execute(
        text(
            """
            SELECT id, order_id, site_product_id, name, price, quantity
            FROM order_items
            WHERE order_id = ANY(CAST(:ids AS uuid[]))
            ORDER BY created_at ASC
            """
        ),
        {"ids": order_ids},
    )
    grouped: dict[str, list[Any]] = {}
    for item in result.fetchall():
        grouped.setdefault(str(item.order_id), []).append(item)
    return grouped


def _customer_details(checkout: Any) -> tuple[str | None, str | None]:
    details = checkout.get("customer_details") or {}
    return details.get("name"), details.get("email")


async def _mark_paid(checkout: Any) -> int:
    name, email = _customer_details(checkout)
    async with get_db_session() as session:
        result = await session.execute(
            text(
                """
                UPDATE orders
                SET status = 'paid',
                    stripe_payment_intent_id = :payment_intent,
                    giver_name = COALESCE(giver_name, :name),
                    giver_email = COALESCE(giver_email, :email),
                    updated_at = NOW()
                WHERE stripe_checkout_session_id = :session_id
                """
            ),
            {
                "session_id": checkout["id"],
                "payment_intent": checkout.get("payment_intent"),
                "name": name,
                "email": email,
            },
        )
        return result.rowcount


async def _mark_expired(checkout: Any) -> int:
    async with get_db_session() as session:
        result = await session.execute(
            text(
                """
                UPDATE orders
                SET status = 'expired', updated_at = NOW()
                WHERE stripe_checkout_session_id = :session_id AND status = 'pending'
                """
            ),
            {"session_id": checkout["id"]},
        )
        return result.rowcount


async def handle_stripe_event(payload: bytes, signature: str | None) -> dict[str, Any]:
    """
    Verify and apply one Stripe webhook event.

    Returns `{"received": True, "type": ..., "handled": bool}`. Events for
    unknown sessions are acknowledged so Stripe stops retrying them.
    """
    settings = get_settings()
    if not settings.stripe_webhook_secret:
        raise PresenteError(
            code="checkout.webhook_not_configured",
            message="Stripe webhook secret not configured",
            status_code=503,
        )

    event = payments.construct_event(payload, signature, settings.stripe_webhook_secret)
    event_type = event["type"]
    checkout = event["data"]["object"]

    handlers = {
        "checkout.session.completed": _mark_paid,
        "checkout.session.expired": _mark_expired,
    }
    handler = handlers.get(event_type)
    if handler is None:
        logger.debug("Ignoring Stripe event", event_type=event_type)
        return {"received": True, "type": event_type, "handled": False}

    with acting_for_guests():
        updated = await handler(checkout)

    if not updated:
        logger.warning(
            "Stripe event matched no order",
            event_type=event_type,
            session_id=checkout.get("id"),
        )
    else:
        logger.info("Order updated from Stripe", event_type=event_type, session_id=checkout.get("id"))
    return {"received": True, "type": event_type, "handled": bool(updated)}


async def _settle_site_account_order(row: Any) -> str:
    """
    Check a pending order against Stripe directly.

    Sessions created with a site's own secret key live in that site's Stripe
    account, whose webhooks cannot be verified with the platform secret. The
    success page is where those orders get settled.
    """
    site = await get_site_stripe_keys(str(row.site_id))
    if not site or not site["secret_key"]:
        return row.status
    try:
        checkout = await payments.retrieve_checkout_session(site["secret_key"], row.stripe_checkout_session_id)
    except UpstreamError:
        return row.status
    if checkout.get("payment_status") != "paid":
        return row.status
    await _mark_paid(checkout)
    logger.info("Order settled from site Stripe account", session_id=checkout["id"], site_id=str(row.site_id))
    return "paid"


async def get_order_by_session(session_id: str) -> dict[str, Any]:
    """Order summary for the payment-success page; giver contact data is left out."""
    with acting_for_guests():
        async with get_db_session() as session:
            result = await session.execute(
                text(f"SELECT {ORDER_COLUMNS} FROM orders WHERE stripe_checkout_session_id = :session_id"),
                {"session_id": session_id},
            )
            row = result.fetchone()
            if not row:
                raise NotFoundError(
                    message="Pedido não encontrado",
                    code="order.not_found",
                    context={"stripe_session_id": session_id},
                )
            items = await _load_items(session, [str(row.id)])
        status = await _settle_site_account_order(row) if row.status == "pending" else row.status

    order = order_dict(row, items.get(str(row.id)))
    return {
        "id": order["id"],
        "site_id": order["site_id"],
        "status": status,
        "total_amount": order["total_amount"],
        "giver_name": order["giver_name"],
        "items": order["items"],
        "created_at": order["created_at"],
    }


async def list_site_orders(site_id: str, ctx: AuthContext) -> list[dict[str, Any]]:
    await get_owned_site(site_id, ctx)
    async with get_db_session() as session:
        result = await session.execute(
            text(f"SELECT {ORDER_COLUMNS} FROM orders WHERE site_id = :site_id ORDER BY created_at DESC"),
            {"site_id": site_id},
        )
        rows = result.fetchall()
        items = await _load_items(session, [str(row.id) for row in rows])
    return [order_dict(row, items.get(str(row.id))) for row in rows]
