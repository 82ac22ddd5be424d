"""
Stripe access through the official `stripe` library.

The library is synchronous, so calls run in a worker thread. Every call
passes its own `api_key` because each site may bring its own Stripe account.
"""

from __future__ import annotations

import asyncio
from typing import Any

import stripe
import structlog

from amor_presente.kernel.errors import UpstreamError, ValidationError

logger = structlog.get_logger()


async def _call(operation: str, fn: Any, **params: Any) -> Any:
    try:
        return await asyncio.to_thread(fn, **params)
    except stripe.StripeError as exc:
        logger.warning(
            "Stripe call failed",
            operation=operation,
            error=getattr(exc, "user_message", None) or str(exc),
            http_status=getattr(exc, "http_status", None),
        )
        raise UpstreamError(
            message="Falha ao comunicar com o Stripe",
            code=f"stripe.{operation}_failed",
            context={"stripe_operation": operation, "stripe_request_id": getattr(exc, "request_id", None)},
        ) from exc


async def create_product(
    api_key: str,
    *,
    name: str,
    description: str | None,
    image_url: str | None,
    metadata: dict[str, str],
) -> str:
    params: dict[str, Any] = {"api_key": api_key, "name": name, "metadata": metadata}
    if description:
        params["description"] = description
    if image_url:
        params["images"] = [image_url]
    product = await _call("product_create", stripe.Product.create, **params)
    return product["id"]


async def create_price(api_key: str, *, product_id: str, unit_amount: int, currency: str) -> str:
    price = await _call(
        "price_create",
        stripe.Price.create,
        api_key=api_key,
        product=product_id,
        unit_amount=unit_amount,
        currency=currency,
    )
    return price["id"]


async def create_checkout_session(api_key: str, **params: Any) -> dict[str, Any]:
    session = await _call("checkout_create", stripe.checkout.Session.create, api_key=api_key, **params)
    return {"id": session["id"], "url": session["url"]}


async def retrieve_checkout_session(api_key: str, session_id: str) -> dict[str, Any]:
    session = await _call("checkout_retrieve", stripe.checkout.Session.retrieve, id=session_id, api_key=api_key)
    details = session.get("customer_details") or {}
    return {
        "id": session["id"],
        "payment_status": session.get("payment_status"),
        "payment_intent": session.get("payment_intent"),
        "customer_details": {"name": details.get("name"), "email": details.get("email")},
    }


def construct_event(payload: bytes, signature: str | None, secret: str) -> Any:
    """Verify a webhook payload. Bad payloads and bad signatures are client errors."""
    try:
        return stripe.Webhook.construct_event(payload, signature or "", secret)
    except ValueError as exc:
        raise ValidationError(message="Invalid webhook payload", code="stripe.invalid_payload") from exc
    except stripe.SignatureVerificationError as exc:
        raise ValidationError(message="Invalid webhook signature", code="stripe.invalid_signature") from exc
