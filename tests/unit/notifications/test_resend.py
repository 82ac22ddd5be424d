"""Unit tests for the Resend sender."""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import httpx
import pytest

from amor_presente.notifications import resend
from amor_presente.notifications.templates import RenderedEmail

pytestmark = [pytest.mark.unit, pytest.mark.asyncio]

SITE_ID = "22222222-2222-2222-2222-222222222222"
EMAIL = RenderedEmail(subject="Confirmação de presença", html="<p>Oi</p>", text="Oi")


def resend_settings(**overrides):
    fields = dict(
        resend_api_key="re_test",
        resend_from="Lista de Presentes <noreply@resend.dev>",
        resend_reply_to=None,
        resend_api_url="https://api.resend.test/",
        resend_timeout_seconds=5.0,
    )
    fields.update(overrides)
    return SimpleNamespace(**fields)


async def send(**overrides):
    kwargs = dict(to=["Ana@Example.com"], category="rsvp", site_id=SITE_ID)
    kwargs.update(overrides)
    return await resend.send_resend_email(EMAIL, **kwargs)


async def test_skips_without_api_key(monkeypatch):
    monkeypatch.setattr(resend, "get_settings", lambda: resend_settings(resend_api_key=None))
    request = AsyncMock()
    monkeypatch.setattr(resend, "request_with_retry", request)

    assert await send() is False
    request.assert_not_awaited()


async def test_skips_without_recipients(monkeypatch):
    monkeypatch.setattr(resend, "get_settings", resend_settings)
    request = AsyncMock()
    monkeypatch.setattr(resend, "request_with_retry", request)

    assert await send(to=["", "  ", None]) is False
    request.assert_not_awaited()


async def test_posts_rendered_email(monkeypatch):
    monkeypatch.setattr(resend, "get_settings", lambda: resend_settings(resend_reply_to="contato@example.com"))
    request = AsyncMock(return_value=httpx.Response(200, json={"id": "em_1"}))
    monkeypatch.setattr(resend, "request_with_retry", request)

    assert await send(to=["Ana@Example.com", "ana@example.com", "bia@example.com"]) is True

    args, kwargs = request.await_args.args, request.await_args.kwargs
    assert args[1:] == ("POST", "https://api.resend.test/emails")
    assert kwargs["headers"]["Authorization"] == "Bearer re_test"
    payload = kwargs["json"]
    assert payload["to"] == ["ana@example.com", "bia@example.com"]
    assert payload["subject"] == "Confirmação de presença"
    assert payload["html"] == "<p>Oi</p>"
    assert payload["reply_to"] == "contato@example.com"


async def test_http_error_returns_false(monkeypatch):
    monkeypatch.setattr(resend, "get_settings", resend_settings)
    monkeypatch.setattr(
        resend, "request_with_retry", AsyncMock(return_value=httpx.Response(422, text="invalid from"))
    )

    assert await send() is False


async def test_payload_tags_category_and_site():
    payload = resend.build_payload(
        EMAIL,
        ["ana@example.com"],
        sender="noreply@resend.dev",
        category="rsvp",
        site_id=SITE_ID,
    )
    assert payload["tags"] == [
        {"name": "category", "value": "rsvp"},
        {"name": "site_id", "value": SITE_ID},
    ]
    assert payload["text"] == "Oi"
    assert "reply_to" not in payload


async def test_admin_mail_has_no_site_tag():
    payload = resend.build_payload(
        EMAIL,
        ["boss@example.com"],
        sender="noreply@resend.dev",
        category="approval_request",
    )
    assert payload["tags"] == [{"name": "category", "value": "approval_request"}]


async def test_normalize_recipients():
    assert resend.normalize_recipients([" B@x.com", None, "b@x.com", "a@x.com"]) == ["b@x.com", "a@x.com"]
