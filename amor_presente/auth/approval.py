"""Creator approval workflow (admin side)."""

from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy import text

from amor_presente.db.client import get_db_session
from amor_presente.kernel.errors import NotFoundError
from amor_presente.notifications.resend import send_resend_email
from amor_presente.notifications.templates import render_approval_result_email

logger = structlog.get_logger()


async def list_pending_users() -> list[dict[str, Any]]:
    async with get_db_session() as session:
        result = await session.execute(
            text(
                """
                SELECT id, name, email, approval_status, created_at
                FROM profiles
                WHERE approval_status = 'pending'
                ORDER BY created_at DESC
                """
            )
        )
        rows = result.fetchall()
    return [
        {
            "id": str(row.id),
            "name": row.name,
            "email": row.email,
            "approval_status": row.approval_status,
            "created_at": row.created_at,
        }
        for row in rows
    ]


async def _notify(email: str, name: str | None, approved: bool) -> bool:
    try:
        rendered = render_approval_result_email(user_name=name, approved=approved)
        return await send_resend_email(rendered, to=[email], category="approval_result")
    except Exception as exc:
        logger.warning("Failed to send approval notification", email=email, error=str(exc))
        return False


async def _set_status(user_id: str, status: str) -> Any:
    approved_clause = ", approved_at = NOW()" if status == "approved" else ""
    async with get_db_session() as session:
        result = await session.execute(
            text(
                f"""
                UPDATE profiles
                SET approval_status = :status{approved_clause}, updated_at = NOW()
                WHERE id = :user_id
                RETURNING id, name, email, approval_status, approved_at
                """
            ),
            {"user_id": user_id, "status": status},
        )
        row = result.fetchone()
    if not row:
        raise NotFoundError(message="Usuário não encontrado", code="profile.not_found")
    return row


async def approve_user(user_id: str) -> dict[str, Any]:
    row = await _set_status(user_id, "approved")
    logger.info("Creator approved", user_id=user_id)
    notified = await _notify(row.email, row.name, approved=True)
    return {
        "id": str(row.id),
        "approval_status": row.approval_status,
        "approved_at": row.approved_at,
        "notified": notified,
    }


async def reject_user(user_id: str) -> dict[str, Any]:
    row = await _set_status(user_id, "rejected")
    logger.info("Creator rejected", user_id=user_id)
    notified = await _notify(row.email, row.name, approved=False)
    return {
        "id": str(row.id),
        "approval_status": row.approval_status,
        "approved_at": row.approved_at,
        "notified": notified,
    }
