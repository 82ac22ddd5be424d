"""
RSVP submission and listing.

Guests answer once per site and email; a second answer replaces the first.
Submissions come from guests who do not own the site, so writes run with the
internal RLS flag. Only the owner (or an admin) can list answers.
"""

from __future__ import annotations

import re
from typing import Any

import structlog
from sqlalchemy import text

from amor_presente.auth.context import AuthContext
from amor_presente.db.client import get_db_session
from amor_presente.db.rls import acting_for_guests
from amor_presente.kernel.errors import SiteNotFoundError, ValidationError
from amor_presente.notifications.resend import send_resend_email
from amor_presente.notifications.templates import render_rsvp_email
from amor_presente.sites.service import get_owned_site
from amor_presente.sites.slug import is_uuid

logger = structlog.get_logger()

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MAX_GUESTS = 50

RSVP_COLUMNS = """
    id, site_id, site_user_id, guest_name, guest_email, phone, adults_count,
    children_count, will_attend, message, created_at, updated_at
"""

_UPSERT_SQL = f"""
    INSERT INTO site_rsvps (
        site_id, site_user_id, guest_name, guest_email, phone,
        adults_count, children_count, will_attend, message
    )
    VALUES (
        :site_id, :site_user_id, :guest_name, :guest_email, :phone,
        :adults_count, :children_count, :will_attend, :message
    )
    ON CONFLICT (site_id, guest_email) DO UPDATE SET
        site_user_id = COALESCE(EXCLUDED.site_user_id, site_rsvps.site_user_id),
        guest_name = EXCLUDED.guest_name,
        phone = EXCLUDED.phone,
        adults_count = EXCLUDED.adults_count,
        children_count = EXCLUDED.children_count,
        will_attend = EXCLUDED.will_attend,
        message = EXCLUDED.message,
        updated_at = NOW()
    RETURNING {RSVP_COLUMNS}
"""


def rsvp_dict(row: Any) -> dict[str, Any]:
    return {
        "id": str(row.id),
        "site_id": str(row.site_id),
        "site_user_id": str(row.site_user_id) if row.site_user_id else None,
        "guest_name": row.guest_name,
        "guest_email": row.guest_email,
        "phone": row.phone,
        "adults_count": row.adults_count,
        "children_count": row.children_count,
        "will_attend": bool(row.will_attend),
        "message": row.message,
        "created_at": row.created_at,
        "updated_at": row.updated_at,
    }


def _clean_guest(name: str | None, email: str | None) -> tuple[str, str]:
    name = (name or "").strip()
    email = (email or "").strip().lower()
    if not name:
        raise ValidationError(message="Nome é obrigatório", code="rsvp.name_required")
    if not _EMAIL_RE.match(email):
        raise ValidationError(message="Email inválido", code="rsvp.invalid_email")
    return name, email


def _clean_count(value: Any, *, default: int) -> int:
    if value in (None, ""):
        return default
    try:
        count = int(value)
    except (TypeError, ValueError):
        raise ValidationError(message="Número de convidados inválido", code="rsvp.invalid_count")
    if count < 0 or count > MAX_GUESTS:
        raise ValidationError(message="Número de convidados inválido", code="rsvp.invalid_count")
    return count


async def _active_site_title(session: Any, site_id: str) -> str:
    if not is_uuid(site_id):
        raise SiteNotFoundError(site_id)
    result = await session.execute(
        text("SELECT title FROM sites WHERE id = :id AND is_active = true"),
        {"id": site_id},
    )
    row = result.fetchone()
    if not row:
        raise SiteNotFoundError(site_id)
    return row.title


async def _upsert(params: dict[str, Any]) -> tuple[str, Any]:
    with acting_for_guests():
        async with get_db_session() as session:
            title = await _active_site_title(session, params["site_id"])
            result = await session.execute(text(_UPSERT_SQL), params)
            return title, result.fetchone()


async def _send_confirmation(site_title: str, row: Any) -> bool:
    try:
        rendered = render_rsvp_email(
            site_title=site_title,
            guest_name=row.guest_name,
            guest_email=row.guest_email,
            will_attend=bool(row.will_attend),
            message=row.message,
        )
        return await send_resend_email(
            rendered,
            to=[row.guest_email],
            category="rsvp",
            site_id=str(row.site_id),
        )
    except Exception as exc:
        logger.warning("Failed to send RSVP email", site_id=str(row.site_id), error=str(exc))
        return False


async def submit_rsvp(
    site_id: str,
    guest: dict[str, Any],
    will_attend: bool,
    message: str | None = None,
    phone: str | None = None,
    adults_count: Any = None,
    children_count: Any = None,
) -> dict[str, Any]:
    """
    Record a guest's answer.

    `guest` carries `name`, `email` and optionally `site_user_id`. Head
    counts are kept only when the guest is attending.
    """
    name, email = _clean_guest(guest.get("name"), guest.get("email"))
    params = {
        "site_id": site_id,
        "site_user_id": guest.get("site_user_id"),
        "guest_name": name,
        "guest_email": email,
        "phone": (phone or "").strip() or None,
        "adults_count": _clean_count(adults_count, default=1) if will_attend else None,
        "children_count": _clean_count(children_count, default=0) if will_attend else None,
        "will_attend": bool(will_attend),
        "message": (message or "").strip() or None,
    }
    title, row = await _upsert(params)
    logger.info("RSVP recorded", site_id=site_id, will_attend=bool(will_attend))
    email_sent = await _send_confirmation(title, row)
    return {"rsvp": rsvp_dict(row), "email_sent": email_sent}


async def submit_fallback_rsvp(
    site_id: str,
    guest_name: str | None,
    guest_email: str | None,
    will_attend: bool,
    user_agent: str | None = None,
) -> dict[str, Any]:
    """Minimal RSVP for browsers that cannot keep a session. The email is best effort."""
    name, email = _clean_guest(guest_name, guest_email)
    params = {
        "site_id": site_id,
        "site_user_id": None,
        "guest_name": name,
        "guest_email": email,
        "phone": None,
        "adults_count": 1 if will_attend else None,
        "children_count": 0 if will_attend else None,
        "will_attend": bool(will_attend),
        "message": None,
    }
    title, row = await _upsert(params)
    logger.info(
        "Fallback RSVP recorded",
        site_id=site_id,
        will_attend=bool(will_attend),
        user_agent=user_agent,
    )
    email_sent = await _send_confirmation(title, row)
    return {
        "success": True,
        "message": "Presença confirmada!" if will_attend else "Resposta registrada!",
        "rsvp": rsvp_dict(row),
        "email_sent": email_sent,
    }


async def list_site_rsvps(site_id: str, ctx: AuthContext) -> dict[str, Any]:
    await get_owned_site(site_id, ctx)
    async with get_db_session() as session:
        result = await session.execute(
            text(f"SELECT {RSVP_COLUMNS} FROM site_rsvps WHERE site_id = :site_id ORDER BY created_at DESC"),
            {"site_id": site_id},
        )
        rsvps = [rsvp_dict(row) for row in result.fetchall()]
    attending = sum(1 for rsvp in rsvps if rsvp["will_attend"])
    return {
        "rsvps": rsvps,
        "attending": attending,
        "not_attending": len(rsvps) - attending,
    }
