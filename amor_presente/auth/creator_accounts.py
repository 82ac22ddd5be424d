"""
Creator accounts backed by Supabase Auth.

Supabase issues and refreshes creator sessions; this module proxies sign-up
and sign-in, verifies access tokens, and owns the `profiles` row that
carries the approval state.
"""

from __future__ import annotations

from typing import Any

import jwt
import structlog
from sqlalchemy import text

from amor_presente.auth.admin_accounts import list_admin_emails
from amor_presente.config import get_settings
from amor_presente.db.client import get_db_session
from amor_presente.integrations import supabase
from amor_presente.kernel.errors import (
    ConflictError,
    UnauthorizedError,
    UpstreamError,
    ValidationError,
)
from amor_presente.notifications.resend import send_resend_email
from amor_presente.notifications.templates import render_approval_request_email

logger = structlog.get_logger()

PROFILE_COLUMNS = "id, email, name, avatar_url, user_type, approval_status, approved_at, created_at"


def _profile_dict(row: Any) -> dict[str, Any]:
    return {
        "id": str(row.id),
        "email": row.email,
        "name": row.name,
        "avatar_url": getattr(row, "avatar_url", None),
        "user_type": getattr(row, "user_type", "creator"),
        "approval_status": row.approval_status or "pending",
        "approved_at": getattr(row, "approved_at", None),
        "created_at": getattr(row, "created_at", None),
    }


def _validate_credentials(email: str, password: str) -> str:
    normalized = (email or "").strip().lower()
    if "@" not in normalized:
        raise ValidationError(message="Email inválido", code="auth.invalid_email")
    if not password or len(password) < 6:
        raise ValidationError(
            message="A senha deve ter pelo menos 6 caracteres",
            code="auth.weak_password",
        )
    return normalized


async def _upsert_pending_profile(user_id: str, email: str, name: str) -> dict[str, Any]:
    async with get_db_session() as session:
        # Supabase answers a repeated sign-up with a fresh user id when email
        # confirmation is on, so the email may already belong to another profile.
        taken = await session.execute(
            text("SELECT id FROM profiles WHERE email = :email AND id <> :id"),
            {"id": user_id, "email": email},
        )
        if taken.fetchone():
            raise ConflictError(
                message="Este email já está cadastrado",
                code="auth.email_taken",
                context={"user_id": user_id},
            )
        result = await session.execute(
            text(
                f"""
                INSERT INTO profiles (id, email, name, approval_status)
                VALUES (:id, :email, :name, 'pending')
                ON CONFLICT (id) DO UPDATE
                SET approval_status = 'pending',
                    name = COALESCE(profiles.name, EXCLUDED.name),
                    updated_at = NOW()
                RETURNING {PROFILE_COLUMNS}
                """
            ),
            {"id": user_id, "email": email, "name": name},
        )
        return _profile_dict(result.fetchone())


async def send_approval_request(user_id: str, user_name: str | None, user_email: str) -> bool:
    """Email the platform admins about a new creator. Never raises."""
    settings = get_settings()
    try:
        recipients = list(settings.approval_admin_emails or [])
        if not recipients:
            recipients = await list_admin_emails()
        rendered = render_approval_request_email(
            user_id=user_id,
            user_name=user_name,
            user_email=user_email,
        )
        return await send_resend_email(rendered, to=recipients, category="approval_request")
    except Exception as exc:
        logger.warning("Failed to send approval request email", user_id=user_id, error=str(exc))
        return False


async def sign_up(email: str, password: str, name: str) -> dict[str, Any]:
    """
    Register a creator in Supabase Auth and mark the profile as pending.

    Returns the profile plus the Supabase session when email confirmation
    is disabled (otherwise `session` is None).
    """
    normalized = _validate_credentials(email, password)
    display_name = (name or "").strip()
    if not display_name:
        raise ValidationError(message="Nome é obrigatório", code="auth.name_required")

    data = await supabase.auth_request(
        "signup",
        {"email": normalized, "password": password, "data": {"name": display_name}},
    )
    user = data.get("user") if isinstance(data.get("user"), dict) else data
    user_id = user.get("id") if isinstance(user, dict) else None
    if not user_id:
        raise UpstreamError(message="Erro desconhecido no cadastro", code="supabase.missing_user")

    profile = await _upsert_pending_profile(str(user_id), normalized, display_name)
    await send_approval_request(str(user_id), display_name, normalized)

    logger.info("Creator signed up", user_id=str(user_id))
    session = None
    if data.get("access_token"):
        session = {
            "access_token": data["access_token"],
            "refresh_token": data.get("refresh_token"),
            "expires_in": data.get("expires_in"),
        }
    return {"profile": profile, "session": session}


async def sign_in(email: str, password: str) -> dict[str, Any]:
    normalized = (email or "").strip().lower()
    try:
        data = await supabase.auth_request(
            "token",
            {"email": normalized, "password": password},
            params={"grant_type": "password"},
        )
    except ValidationError as exc:
        raise UnauthorizedError(message="Email ou senha inválidos", code="auth.invalid_credentials") from exc

    user = data.get("user") or {}
    profile = await get_profile(str(user.get("id"))) if user.get("id") else None
    return {
        "access_token": data.get("access_token"),
        "refresh_token": data.get("refresh_token"),
        "expires_in": data.get("expires_in"),
        "profile": profile,
    }


def verify_supabase_jwt(token: str) -> dict[str, Any] | None:
    """Verify a Supabase access token. Returns its claims, or None when invalid/expired."""
    settings = get_settings()
    if not settings.supabase_jwt_secret:
        logger.warning("SUPABASE_JWT_SECRET not configured, creator tokens cannot be verified")
        return None
    try:
        claims = jwt.decode(
            token,
            settings.supabase_jwt_secret,
            algorithms=["HS256"],
            audience=settings.supabase_jwt_audience,
        )
    except jwt.InvalidTokenError:
        return None
    if not claims.get("sub"):
        return None
    return claims


async def get_profile(user_id: str) -> dict[str, Any] | None:
    async with get_db_session() as session:
        result = await session.execute(
            text(f"SELECT {PROFILE_COLUMNS} FROM profiles WHERE id = :id"),
            {"id": user_id},
        )
        row = result.fetchone()
    return _profile_dict(row) if row else None


async def check_approval_status(user_id: str) -> str:
    """A creator without a profile row is treated as pending."""
    profile = await get_profile(user_id)
    if not profile:
        return "pending"
    return profile["approval_status"]
