"""API tests for Stripe Checkout endpoints."""

from unittest.mock import AsyncMock, patch

import pytest

from amor_presente.kernel.errors import ValidationError

pytestmark = [pytest.mark.api, pytest.mark.asyncio]

SITE_ID = "22222222-2222-2222-2222-222222222222"
ROUTES = "amor_presente.api.routes.checkout"
SESSION = {"url": "https://checkout.stripe.test/cs_1", "session_id": "cs_1", "order_id": "ord-1"}


class TestCreateSession:
    async def test_uses_allowed_origin(self, async_client_no_auth):
        with patch(f"{ROUTES}.create_checkout_session", new_callable=AsyncMock, return_value=SESSION) as create:
            response = await async_client_no_auth.post(
                "/api/v1/checkout/session",
                json={
                    "site_id": SITE_ID,
                    "items": [{"id": "sp-1", "quantity": 2}],
                    "giver": {"name": "Ana", "email": "ana@example.com"},
                },
                headers={"Origin": "https://app.test"},
            )

        assert response.status_code == 200
        assert response.json() == SESSION
        assert create.await_args.args == (
            SITE_ID,
            [{"id": "sp-1", "quantity": 2}],
            "https://app.test",
            {"name": "Ana", "email": "ana@example.com"},
        )

    async def test_unknown_origin_falls_back_to_web_app(self, async_client_no_auth):
        with patch(f"{ROUTES}.create_checkout_session", new_callable=AsyncMock, return_value=SESSION) as create:
            await async_client_no_auth.post(
                "/api/v1/checkout/session",
                json={"site_id": SITE_ID, "items": [{"id": "sp-1"}]},
                headers={"Origin": "https://evil.test"},
            )

        assert create.await_args.args[2] == "https://app.test"
        assert create.await_args.args[3] is None

    async def test_missing_item_data(self, async_client_no_auth):
        with patch(
            f"{ROUTES}.create_checkout_session",
            new_callable=AsyncMock,
            side_effect=ValidationError(
                message="Missing product data for checkout item", code="checkout.missing_item_data"
            ),
        ):
            response = await async_client_no_auth.post(
                "/api/v1/checkout/session", json={"site_id": SITE_ID, "items": [{"id": "x"}]}
            )

        assert response.status_code == 400
        assert response.json()["code"] == "checkout.missing_item_data"

    async def test_quantity_bounds(self, async_client_no_auth):
        response = await async_client_no_auth.post(
            "/api/v1/checkout/session", json={"site_id": SITE_ID, "items": [{"id": "sp-1", "quantity": 0}]}
        )
        assert response.status_code == 422


async def test_session_status(async_client_no_auth):
    order = {"id": "ord-1", "status": "paid", "items": []}
    with patch(f"{ROUTES}.get_order_by_session", new_callable=AsyncMock, return_value=order) as lookup:
        response = await async_client_no_auth.get("/api/v1/checkout/session/cs_1")

    assert response.json() == order
    lookup.assert_awaited_once_with("cs_1")


async def test_webhook_passes_raw_body_and_signature(async_client_no_auth):
    payload = b'{"type": "checkout.session.completed"}'
    with patch(
        f"{ROUTES}.handle_stripe_event",
        new_callable=AsyncMock,
        return_value={"received": True, "type": "checkout.session.completed", "handled": True},
    ) as handle:
        response = await async_client_no_auth.post(
            "/api/v1/checkout/webhook",
            content=payload,
            headers={"Stripe-Signature": "t=1,v1=abc", "Content-Type": "application/json"},
        )

    assert response.status_code == 200
    handle.assert_awaited_once_with(payload, "t=1,v1=abc")


async def test_webhook_bad_signature(async_client_no_auth):
    with patch(
        f"{ROUTES}.handle_stripe_event",
        new_callable=AsyncMock,
        side_effect=ValidationError(message="Invalid webhook signature", code="stripe.invalid_signature"),
    ):
        response = await async_client_no_auth.post("/api/v1/checkout/webhook", content=b"{}")

    assert response.status_code == 400
    assert response.json()["code"] == "stripe.invalid_signature"
