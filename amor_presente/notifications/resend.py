"""
Transactional email through Resend.

Templates render a `RenderedEmail`; this module turns it into a Resend
payload tagged with its category (and the site, for guest mail) and posts it
with retries. Delivery problems are logged and answered with False: RSVPs and
approvals never fail because an email did not go out.
"""

from __future__ import annotations

from typing import Any, Iterable, Literal

import httpx
import structlog

from amor_presente.config import get_settings
from amor_presente.integrations.http import request_with_retry
from amor_presente.notifications.templates import RenderedEmail

logger = structlog.get_logger()

EmailCategory = Literal["rsvp", "approval_request", "approval_result"]


def normalize_recipients(emails: Iterable[str | None]) -> list[str]:
    """Lowercased, blanks dropped, first occurrence wins."""
    cleaned = ((email or "").strip().lower() for email in emails)
    return list(dict.fromkeys(email for email in cleaned if email))


def build_payload(
    rendered: RenderedEmail,
    recipients: list[str],
    *,
    sender: str,
    category: EmailCategory,
    site_id: str | None = None,
    reply_to: str | None = None,
) -> dict[str, Any]:
    tags = [{"name": "category", "value": category}]
    if site_id:
        tags.append({"name": "site_id", "value": str(site_id)})
    payload: dict[str, Any] = {
        "from": sender,
        "to": recipients,
        "subject": rendered.subject,
        "html": rendered.html,
        "text": rendered.text,
        "tags": tags,
    }
    if reply_to:
        payload["reply_to"] = reply_to
    return payload


def _message_id(response: httpx.Response) -> str | None:
    try:
        return response.json().get("id")
    except ValueError:
        return None


async def send_resend_email(
    rendered: RenderedEmail,
    *,
    to: Iterable[str | None],
    category: EmailCategory,
    site_id: str | None = None,
) -> bool:
    """Deliver one rendered email. Returns whether Resend accepted it."""
    settings = get_settings()
    log = logger.bind(email_category=category, site_id=site_id)

    if not settings.resend_api_key or not settings.resend_from:
        log.info("Email not sent, Resend is not configured")
        return False

    recipients = normalize_recipients(to)
    if not recipients:
        log.info("Email not sent, no recipients")
        return False

    payload = build_payload(
        rendered,
        recipients,
        sender=settings.resend_from,
        category=category,
        site_id=site_id,
        reply_to=settings.resend_reply_to,
    )
    async with httpx.AsyncClient(timeout=settings.resend_timeout_seconds) as client:
        response = await request_with_retry(
            client,
            "POST",
            settings.resend_api_url.rstrip("/") + "/emails",
            headers={"Authorization": f"Bearer {settings.resend_api_key}"},
            json=payload,
            max_attempts=3,
            service="resend",
        )

    if response.is_error:
        log.warning("Resend rejected email", status_code=response.status_code, body=response.text[:500])
        return False

    log.info("Email sent", recipient_count=len(recipients), resend_id=_message_id(response))
    return True
