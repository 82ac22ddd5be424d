"""Stripe Checkout: session creation, status lookup and webhook."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from fastapi import APIRouter, Header, Request
from pydantic import BaseModel, Field

from amor_presente.commerce.checkout import create_checkout_session
from amor_presente.commerce.orders import get_order_by_session, handle_stripe_event
from amor_presente.config import get_settings

router = APIRouter(prefix="/checkout", tags=["Checkout"])


class CheckoutItem(BaseModel):
    id: str | None = None
    name: str | None = None
    price: Decimal | None = None
    quantity: int | None = Field(None, ge=1, le=100)
    description: str | None = None
    image_url: str | None = None


class Giver(BaseModel):
    name: str | None = Field(None, max_length=255)
    email: str | None = Field(None, max_length=255)
    message: str | None = Field(None, max_length=2000)


class CheckoutRequest(BaseModel):
    site_id: str | None = None
    items: list[CheckoutItem] = Field(default_factory=list)
    giver: Giver | None = None


def _origin(request: Request) -> str:
    """Redirect base: the caller's Origin when allowed, else the web app URL."""
    settings = get_settings()
    origin = request.headers.get("origin")
    allowed = {o.rstrip("/") for o in settings.cors_origins}
    if settings.web_app_url:
        allowed.add(settings.web_app_url.rstrip("/"))
    if origin and origin.rstrip("/") in allowed:
        return origin
    return settings.web_app_url or str(request.base_url)


@router.post("/session")
async def create_session(body: CheckoutRequest, request: Request) -> dict[str, str]:
    return await create_checkout_session(
        body.site_id,
        [item.model_dump(exclude_none=True) for item in body.items],
        _origin(request),
        body.giver.model_dump(exclude_none=True) if body.giver else None,
    )


@router.get("/session/{session_id}")
async def session_status(session_id: str) -> dict[str, Any]:
    return await get_order_by_session(session_id)


@router.post("/webhook")
async def stripe_webhook(
    request: Request,
    stripe_signature: str | None = Header(default=None, alias="Stripe-Signature"),
) -> dict[str, Any]:
    payload = await request.body()
    return await handle_stripe_event(payload, stripe_signature)
