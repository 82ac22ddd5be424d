"""Unit tests for the Stripe wrapper."""

import pytest
import stripe

from amor_presente.integrations import payments
from amor_presente.kernel.errors import UpstreamError, ValidationError

pytestmark = pytest.mark.unit


@pytest.mark.asyncio
async def test_create_product_passes_api_key(monkeypatch):
    captured = {}

    def fake_create(**params):
        captured.update(params)
        return {"id": "prod_1"}

    monkeypatch.setattr(stripe.Product, "create", fake_create)

    product_id = await payments.create_product(
        "sk_site", name="Toalha", description=None, image_url="https://img.test/t.png", metadata={"a": "b"}
    )

    assert product_id == "prod_1"
    assert captured == {
        "api_key": "sk_site",
        "name": "Toalha",
        "metadata": {"a": "b"},
        "images": ["https://img.test/t.png"],
    }


@pytest.mark.asyncio
async def test_stripe_errors_become_upstream(monkeypatch):
    def fail(**params):
        raise stripe.APIConnectionError("network down")

    monkeypatch.setattr(stripe.Price, "create", fail)

    with pytest.raises(UpstreamError) as exc:
        await payments.create_price("sk", product_id="prod_1", unit_amount=100, currency="brl")
    assert exc.value.code == "stripe.price_create_failed"


@pytest.mark.asyncio
async def test_checkout_session_result(monkeypatch):
    monkeypatch.setattr(
        stripe.checkout.Session,
        "create",
        lambda **params: {"id": "cs_1", "url": "https://checkout.stripe.test/cs_1", "object": "checkout.session"},
    )
    assert await payments.create_checkout_session("sk", mode="payment") == {
        "id": "cs_1",
        "url": "https://checkout.stripe.test/cs_1",
    }


def test_invalid_signature_is_client_error(monkeypatch):
    def reject(payload, signature, secret):
        raise stripe.SignatureVerificationError("bad signature", signature)

    monkeypatch.setattr(stripe.Webhook, "construct_event", reject)

    with pytest.raises(ValidationError) as exc:
        payments.construct_event(b"{}", "t=1,v1=bad", "whsec_test")
    assert exc.value.code == "stripe.invalid_signature"


def test_invalid_payload_is_client_error(monkeypatch):
    def reject(payload, signature, secret):
        raise ValueError("not json")

    monkeypatch.setattr(stripe.Webhook, "construct_event", reject)

    with pytest.raises(ValidationError) as exc:
        payments.construct_event(b"nope", None, "whsec_test")
    assert exc.value.code == "stripe.invalid_payload"


@pytest.mark.asyncio
async def test_retrieve_checkout_session(monkeypatch):
    captured = {}

    def fake_retrieve(**params):
        captured.update(params)
        return {
            "id": "cs_site_1",
            "payment_status": "paid",
            "payment_intent": "pi_1",
            "customer_details": {"name": "Ana", "email": "ana@example.com", "phone": None},
        }

    monkeypatch.setattr(stripe.checkout.Session, "retrieve", fake_retrieve)

    result = await payments.retrieve_checkout_session("sk_site", "cs_site_1")

    assert captured == {"id": "cs_site_1", "api_key": "sk_site"}
    assert result == {
        "id": "cs_site_1",
        "payment_status": "paid",
        "payment_intent": "pi_1",
        "customer_details": {"name": "Ana", "email": "ana@example.com"},
    }
