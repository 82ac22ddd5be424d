"""
Guest accounts.

- Site users (`site_users`): accounts that exist inside one site, used to RSVP
- Platform guests (`guest_users`): accounts shared across every site

Both store PBKDF2 hashes and get a signed guest token (30 days). Signing
out is client-side: the token is discarded.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Literal

import jwt
import structlog
from pydantic import BaseModel
from sqlalchemy import text

from amor_presente.auth.passwords import hash_password, verify_password
from amor_presente.auth.scopes import Scope
from amor_presente.config import get_settings
from amor_presente.db.client import get_db_session
from amor_presente.kernel.errors import (
    ConflictError,
    SiteNotFoundError,
    UnauthorizedError,
    ValidationError,
)
from amor_presente.sites.slug import is_uuid

logger = structlog.get_logger()

JWT_ALGORITHM = "HS256"
JWT_EXPIRY_DAYS = 30

GuestKind = Literal["site_user", "guest"]


class GuestToken(BaseModel):
    """JWT claims for guest sessions."""

    kind: GuestKind
    sub: str
    email: str
    name: str
    site_id: str | None = None
    exp: datetime
    iat: datetime


def _require_site_id(site_id: str) -> None:
    if not is_uuid(site_id):
        raise SiteNotFoundError(site_id)


def _get_guest_jwt_secret() -> str:
    settings = get_settings()
    if settings.guest_jwt_secret:
        return settings.guest_jwt_secret
    base = settings.secret_salt or "insecure-default-secret-change-me"
    logger.warning("GUEST_JWT_SECRET not configured, using derived secret (dev only)")
    return f"{base}::guest"


def _normalize(email: str, password: str, name: str | None = None) -> tuple[str, str | None]:
    normalized = (email or "").strip().lower()
    if "@" not in normalized:
        raise ValidationError(message="Email inválido", code="auth.invalid_email")
    if not password or len(password) < 6:
        raise ValidationError(
            message="A senha deve ter pelo menos 6 caracteres",
            code="auth.weak_password",
        )
    if name is not None:
        name = name.strip()
        if not name:
            raise ValidationError(message="Nome é obrigatório", code="auth.name_required")
    return normalized, name


def create_guest_jwt(
    *,
    kind: GuestKind,
    user_id: str,
    email: str,
    name: str,
    site_id: str | None = None,
) -> str:
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "kind": kind,
        "sub": user_id,
        "email": email,
        "name": name,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(days=JWT_EXPIRY_DAYS)).timestamp()),
    }
    if site_id:
        payload["site_id"] = site_id
    return jwt.encode(payload, _get_guest_jwt_secret(), algorithm=JWT_ALGORITHM)


def verify_guest_jwt(token: str) -> GuestToken | None:
    try:
        payload = jwt.decode(token, _get_guest_jwt_secret(), algorithms=[JWT_ALGORITHM])
    except jwt.InvalidTokenError:
        return None

    kind = payload.get("kind")
    if kind not in ("site_user", "guest"):
        return None
    if kind == "site_user" and not payload.get("site_id"):
        return None
    try:
        return GuestToken(
            kind=kind,
            sub=str(payload["sub"]),
            email=str(payload.get("email") or ""),
            name=str(payload.get("name") or ""),
            site_id=payload.get("site_id"),
            exp=datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc),
            iat=datetime.fromtimestamp(int(payload["iat"]), tz=timezone.utc),
        )
    except (KeyError, TypeError, ValueError):
        return None


def guest_scopes() -> list[str]:
    return [Scope.RSVP.value]


def _session_payload(kind: GuestKind, row: Any) -> dict[str, Any]:
    site_id = str(row.site_id) if kind == "site_user" else None
    user = {
        "id": str(row.id),
        "email": row.email,
        "name": row.name,
    }
    if site_id:
        user["site_id"] = site_id
    return {
        "user": user,
        "token": create_guest_jwt(
            kind=kind,
            user_id=str(row.id),
            email=row.email,
            name=row.name,
            site_id=site_id,
        ),
        "expires_in": JWT_EXPIRY_DAYS * 24 * 3600,
    }


# =============================================================================
# Site users
# =============================================================================


async def sign_up_site_user(site_id: str, email: str, password: str, name: str) -> dict[str, Any]:
    _require_site_id(site_id)
    normalized, display_name = _normalize(email, password, name)

    async with get_db_session() as session:
        site = await session.execute(
            text("SELECT id FROM sites WHERE id = :site_id AND is_active = true"),
            {"site_id": site_id},
        )
        if not site.fetchone():
            raise SiteNotFoundError(site_id)

        result = await session.execute(
            text(
                """
                INSERT INTO site_users (site_id, email, name, password_hash)
                VALUES (:site_id, :email, :name, :password_hash)
                ON CONFLICT (site_id, email) DO NOTHING
                RETURNING id, site_id, email, name
                """
            ),
            {
                "site_id": site_id,
                "email": normalized,
                "name": display_name,
                "password_hash": hash_password(password),
            },
        )
        row = result.fetchone()

    if not row:
        raise ConflictError(
            message="Este email já está cadastrado neste site",
            code="guest.email_taken",
        )
    logger.info("Site user signed up", site_id=site_id, site_user_id=str(row.id))
    return _session_payload("site_user", row)


async def sign_in_site_user(site_id: str, email: str, password: str) -> dict[str, Any]:
    _require_site_id(site_id)
    normalized = (email or "").strip().lower()
    async with get_db_session() as session:
        result = await session.execute(
            text(
                """
                SELECT id, site_id, email, name, password_hash
                FROM site_users
                WHERE site_id = :site_id AND email = :email
                """
            ),
            {"site_id": site_id, "email": normalized},
        )
        row = result.fetchone()

    if not row or not verify_password(password, row.password_hash):
        raise UnauthorizedError(message="Email ou senha inválidos", code="auth.invalid_credentials")
    return _session_payload("site_user", row)


# =============================================================================
# Platform guests
# =============================================================================


async def sign_up_guest(email: str, password: str, name: str) -> dict[str, Any]:
    normalized, display_name = _normalize(email, password, name)
    async with get_db_session() as session:
        result = await session.execute(
            text(
                """
                INSERT INTO guest_users (email, name, password_hash)
                VALUES (:email, :name, :password_hash)
                ON CONFLICT (email) DO NOTHING
                RETURNING id, email, name
                """
            ),
            {
                "email": normalized,
                "name": display_name,
                "password_hash": hash_password(password),
            },
        )
        row = result.fetchone()

    if not row:
        raise ConflictError(message="Este email já está cadastrado", code="guest.email_taken")
    logger.info("Guest signed up", guest_id=str(row.id))
    return _session_payload("guest", row)


async def sign_in_guest(email: str, password: str) -> dict[str, Any]:
    normalized = (email or "").strip().lower()
    async with get_db_session() as session:
        result = await session.execute(
            text("SELECT id, email, name, password_hash FROM guest_users WHERE email = :email"),
            {"email": normalized},
        )
        row = result.fetchone()

    if not row or not verify_password(password, row.password_hash):
        raise UnauthorizedError(message="Email ou senha inválidos", code="auth.invalid_credentials")
    return _session_payload("guest", row)
