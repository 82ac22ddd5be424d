"""
Admin Auth

Admins authenticate against the `admins` table (email + PBKDF2 hash):
- Tokens are signed with a distinct secret (`ADMIN_JWT_SECRET`) so they cannot
  be replayed as guest tokens.
- Admin auth yields ADMIN + INTERNAL scopes and bypasses owner RLS.

A creator whose Supabase email is listed in `admins` is also treated as an
admin (see `is_admin_email`).
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Literal

import jwt
import structlog
from pydantic import BaseModel
from sqlalchemy import text

from amor_presente.auth.passwords import hash_password, verify_password
from amor_presente.auth.scopes import Scope
from amor_presente.config import get_settings
from amor_presente.db.client import get_db_session
from amor_presente.kernel.errors import UnauthorizedError

logger = structlog.get_logger()

JWT_ALGORITHM = "HS256"
JWT_EXPIRY_HOURS = 12
ADMIN_TOKEN_KIND = "presente_admin"


class AdminToken(BaseModel):
    """JWT claims for admin sessions."""

    kind: Literal["presente_admin"]
    sub: str
    email: str
    scopes: list[str]
    exp: datetime
    iat: datetime


def _get_admin_jwt_secret() -> str:
    settings = get_settings()
    if settings.admin_jwt_secret:
        return settings.admin_jwt_secret

    # Dev fallback so local stacks work without extra env.
    base = settings.secret_salt or "insecure-default-secret-change-me"
    logger.warning("ADMIN_JWT_SECRET not configured, using derived secret (dev only)")
    return f"{base}::admin"


async def authenticate_admin(email: str, password: str) -> dict[str, str]:
    """Check admin credentials. Raises UnauthorizedError without saying which part was wrong."""
    normalized = email.strip().lower()
    async with get_db_session() as session:
        result = await session.execute(
            text(
                """
                SELECT id, email, password_hash
                FROM admins
                WHERE lower(email) = :email
                """
            ),
            {"email": normalized},
        )
        row = result.fetchone()

    if not row or not verify_password(password, row.password_hash):
        logger.info("Admin login rejected", email=normalized)
        raise UnauthorizedError(message="Credenciais inválidas", code="auth.invalid_credentials")

    return {"id": str(row.id), "email": str(row.email).lower()}


async def create_admin_account(email: str, password: str) -> str:
    """Insert or rotate an admin password. Used by operators when provisioning admins."""
    normalized = email.strip().lower()
    async with get_db_session() as session:
        result = await session.execute(
            text(
                """
                INSERT INTO admins (email, password_hash)
                VALUES (:email, :password_hash)
                ON CONFLICT (email) DO UPDATE SET password_hash = EXCLUDED.password_hash
                RETURNING id
                """
            ),
            {"email": normalized, "password_hash": hash_password(password)},
        )
        row = result.fetchone()
    logger.info("Admin account provisioned", email=normalized)
    return str(row.id)


async def is_admin_email(email: str | None) -> bool:
    if not email:
        return False
    async with get_db_session() as session:
        result = await session.execute(
            text("SELECT 1 FROM admins WHERE lower(email) = :email"),
            {"email": email.strip().lower()},
        )
        return result.fetchone() is not None


async def list_admin_emails() -> list[str]:
    async with get_db_session() as session:
        result = await session.execute(text("SELECT email FROM admins ORDER BY email"))
        return [str(row.email) for row in result.fetchall()]


def create_admin_jwt(admin_id: str, email: str) -> str:
    now = datetime.now(timezone.utc)
    expiry = now + timedelta(hours=JWT_EXPIRY_HOURS)

    payload = {
        "kind": ADMIN_TOKEN_KIND,
        "sub": admin_id,
        "email": email.lower(),
        "scopes": [Scope.ADMIN.value, Scope.INTERNAL.value],
        "iat": int(now.timestamp()),
        "exp": int(expiry.timestamp()),
    }
    return jwt.encode(payload, _get_admin_jwt_secret(), algorithm=JWT_ALGORITHM)


def verify_admin_jwt(token: str) -> AdminToken | None:
    try:
        payload = jwt.decode(token, _get_admin_jwt_secret(), algorithms=[JWT_ALGORITHM])
    except jwt.InvalidTokenError:
        return None

    if payload.get("kind") != ADMIN_TOKEN_KIND:
        return None
    try:
        return AdminToken(
            kind=ADMIN_TOKEN_KIND,
            sub=str(payload.get("sub") or ""),
            email=str(payload.get("email") or ""),
            scopes=list(payload.get("scopes") or []),
            exp=datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc),
            iat=datetime.fromtimestamp(int(payload["iat"]), tz=timezone.utc),
        )
    except (KeyError, TypeError, ValueError) as exc:
        logger.debug("Malformed admin JWT claims", error=str(exc))
        return None
