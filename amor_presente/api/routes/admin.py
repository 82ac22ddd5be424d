"""
Admin routes.

Admins sign in with email/password accounts stored in `admins`. The admin
JWT is returned in the body and also set as an httpOnly cookie scoped to
this router's path. Creators whose email is listed in `admins` reach the
same endpoints with their Supabase token.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import structlog
from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from amor_presente.admin.service import (
    get_dashboard_stats,
    get_platform_settings,
    update_platform_settings,
)
from amor_presente.auth.admin_accounts import authenticate_admin, create_admin_jwt
from amor_presente.auth.approval import approve_user, list_pending_users, reject_user
from amor_presente.auth.context import AuthContext
from amor_presente.auth.middleware import ADMIN_SESSION_COOKIE, require_admin
from amor_presente.config import get_settings

logger = structlog.get_logger()

router = APIRouter(prefix="/admin", tags=["Admin"])

ADMIN_COOKIE_MAX_AGE = 60 * 60 * 12  # 12 hours
ADMIN_COOKIE_PATH = "/api/v1/admin"


def _set_admin_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=ADMIN_SESSION_COOKIE,
        value=token,
        max_age=ADMIN_COOKIE_MAX_AGE,
        httponly=True,
        secure=get_settings().environment == "production",
        samesite="lax",
        path=ADMIN_COOKIE_PATH,
    )


def _clear_admin_cookie(response: Response) -> None:
    response.delete_cookie(key=ADMIN_SESSION_COOKIE, path=ADMIN_COOKIE_PATH)


class AdminLoginRequest(BaseModel):
    email: str
    password: str


class AdminLoginResponse(BaseModel):
    admin: dict[str, str]
    session_token: str
    expires_at: datetime


class PlatformSettingsRequest(BaseModel):
    stripe_public_key: str | None = None
    stripe_secret_key: str | None = None


# =============================================================================
# Session
# =============================================================================


@router.post("/login", response_model=AdminLoginResponse)
async def admin_login(request: AdminLoginRequest, response: Response) -> AdminLoginResponse:
    admin = await authenticate_admin(request.email, request.password)
    expires_at = datetime.now(timezone.utc) + timedelta(seconds=ADMIN_COOKIE_MAX_AGE)
    token = create_admin_jwt(admin["id"], admin["email"])
    _set_admin_cookie(response, token)
    logger.info("Admin logged in", admin_id=admin["id"])
    return AdminLoginResponse(admin=admin, session_token=token, expires_at=expires_at)


@router.post("/logout")
async def admin_logout(response: Response) -> dict[str, str]:
    _clear_admin_cookie(response)
    return {"status": "ok"}


@router.get("/me")
async def admin_me(ctx: AuthContext = Depends(require_admin)) -> dict[str, Any]:
    return {
        "id": ctx.subject_id,
        "email": ctx.email,
        "principal_type": ctx.principal_type.value,
        "scopes": ctx.scopes,
    }


# =============================================================================
# Dashboard and approvals
# =============================================================================


@router.get("/stats")
async def stats(ctx: AuthContext = Depends(require_admin)) -> dict[str, int]:
    return await get_dashboard_stats()


@router.get("/users/pending")
async def pending_users(ctx: AuthContext = Depends(require_admin)) -> list[dict[str, Any]]:
    return await list_pending_users()


@router.post("/users/{user_id}/approve")
async def approve(user_id: str, ctx: AuthContext = Depends(require_admin)) -> dict[str, Any]:
    logger.info("Approval requested", user_id=user_id, admin_id=ctx.subject_id)
    return await approve_user(user_id)


@router.post("/users/{user_id}/reject")
async def reject(user_id: str, ctx: AuthContext = Depends(require_admin)) -> dict[str, Any]:
    logger.info("Rejection requested", user_id=user_id, admin_id=ctx.subject_id)
    return await reject_user(user_id)


# =============================================================================
# Platform settings
# =============================================================================


@router.get("/settings")
async def platform_settings(ctx: AuthContext = Depends(require_admin)) -> dict[str, Any]:
    return await get_platform_settings()


@router.put("/settings")
async def put_platform_settings(
    request: PlatformSettingsRequest,
    ctx: AuthContext = Depends(require_admin),
) -> dict[str, Any]:
    return await update_platform_settings(
        stripe_public_key=request.stripe_public_key,
        stripe_secret_key=request.stripe_secret_key,
    )
