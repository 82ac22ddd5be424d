"""
FastAPI authentication dependencies.

Authentication priority:
1. Admin session cookie (admin paths or `X-Presente-Client: admin`)
2. Bearer admin token
3. Bearer Supabase access token (creators)
4. Bearer guest token (site users and platform guests)

Every successful path sets the RLS context for the request.
"""

from __future__ import annotations

from typing import Callable

import structlog
from fastapi import Depends, Header, HTTPException, Request

from amor_presente.auth.admin_accounts import is_admin_email, verify_admin_jwt
from amor_presente.auth.context import AuthContext, PrincipalType
from amor_presente.auth.creator_accounts import get_profile, verify_supabase_jwt
from amor_presente.auth.guest_accounts import guest_scopes, verify_guest_jwt
from amor_presente.auth.scopes import Scope, scopes_for_creator
from amor_presente.db.rls import set_rls_context

logger = structlog.get_logger()

ADMIN_SESSION_COOKIE = "admin_session"
ADMIN_CLIENT_HEADER = "X-Presente-Client"
ADMIN_SCOPES = [Scope.ADMIN.value, Scope.INTERNAL.value]


def _unauthorized(detail: str = "Not authenticated") -> HTTPException:
    return HTTPException(
        status_code=401,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _admin_context(admin_id: str, email: str) -> AuthContext:
    set_rls_context(admin_id, is_internal=True)
    return AuthContext(
        principal_type=PrincipalType.ADMIN,
        subject_id=admin_id,
        email=email,
        scopes=list(ADMIN_SCOPES),
        is_internal=True,
    )


async def _creator_context(claims: dict) -> AuthContext:
    user_id = str(claims["sub"])
    email = claims.get("email")
    profile = await get_profile(user_id)
    approval_status = profile["approval_status"] if profile else "pending"
    scopes = scopes_for_creator(approval_status)
    is_internal = False

    if await is_admin_email(email):
        scopes = sorted(set(scopes) | {Scope.READ.value, Scope.WRITE.value, *ADMIN_SCOPES})
        is_internal = True

    set_rls_context(user_id, is_internal=is_internal)
    return AuthContext(
        principal_type=PrincipalType.CREATOR,
        subject_id=user_id,
        email=email,
        name=profile["name"] if profile else None,
        scopes=scopes,
        approval_status=approval_status,
        is_internal=is_internal,
    )


async def get_auth_context(
    request: Request,
    authorization: str | None = Header(default=None),
) -> AuthContext:
    """Resolve the caller. Raises 401 when no credential verifies."""
    is_admin_client = request.headers.get(ADMIN_CLIENT_HEADER) == "admin"
    path_is_admin = request.url.path.startswith("/api/v1/admin")
    admin_cookie = request.cookies.get(ADMIN_SESSION_COOKIE)
    bearer = authorization[7:].strip() if authorization and authorization.startswith("Bearer ") else None

    if admin_cookie and (is_admin_client or path_is_admin):
        admin_token = verify_admin_jwt(admin_cookie)
        if admin_token:
            return _admin_context(admin_token.sub, admin_token.email)
        if not bearer:
            raise _unauthorized("Invalid or expired admin session")

    if not bearer:
        raise _unauthorized()

    admin_token = verify_admin_jwt(bearer)
    if admin_token:
        return _admin_context(admin_token.sub, admin_token.email)

    claims = verify_supabase_jwt(bearer)
    if claims:
        ctx = await _creator_context(claims)
        logger.debug("creator_authentication_success", path=request.url.path, **ctx.to_log_context())
        return ctx

    guest = verify_guest_jwt(bearer)
    if guest:
        set_rls_context(None, is_internal=False)
        return AuthContext(
            principal_type=PrincipalType.SITE_USER if guest.kind == "site_user" else PrincipalType.GUEST,
            subject_id=guest.sub,
            email=guest.email,
            name=guest.name,
            scopes=guest_scopes(),
            site_id=guest.site_id,
        )

    raise _unauthorized("Invalid or expired session")


async def get_optional_auth_context(
    request: Request,
    authorization: str | None = Header(default=None),
) -> AuthContext | None:
    """Returns None instead of raising for anonymous or invalid credentials."""
    try:
        return await get_auth_context(request, authorization)
    except HTTPException:
        set_rls_context(None, is_internal=False)
        return None


def require_scope(scope: str | Scope) -> Callable:
    """
    FastAPI dependency factory for requiring a specific scope.

    Usage:
        @router.post("/sites")
        async def create(ctx: AuthContext = Depends(require_scope(Scope.WRITE))):
            ...
    """
    scope_str = scope.value if isinstance(scope, Scope) else scope

    async def check_scope(ctx: AuthContext = Depends(get_auth_context)) -> AuthContext:
        if not ctx.has_scope(scope_str):
            logger.warning(
                "Insufficient permissions",
                required_scope=scope_str,
                granted_scopes=ctx.scopes,
                subject_id=ctx.subject_id,
            )
            raise HTTPException(
                status_code=403,
                detail=f"Insufficient permissions. Required scope: {scope_str}",
            )
        return ctx

    return check_scope


async def require_creator(ctx: AuthContext = Depends(get_auth_context)) -> AuthContext:
    """Any signed-in creator (or admin), approved or not."""
    if ctx.is_guest:
        raise HTTPException(status_code=403, detail="Creator account required")
    return ctx


async def require_creator_write(ctx: AuthContext = Depends(require_creator)) -> AuthContext:
    """Creators that are pending or rejected keep read-only access."""
    if not ctx.has_scope(Scope.WRITE):
        logger.warning(
            "Write denied for unapproved creator",
            subject_id=ctx.subject_id,
            approval_status=ctx.approval_status,
        )
        raise HTTPException(status_code=403, detail="Seu cadastro ainda não foi aprovado")
    return ctx


async def require_approved_creator(ctx: AuthContext = Depends(get_auth_context)) -> AuthContext:
    if ctx.is_admin:
        return ctx
    if not ctx.is_creator:
        raise HTTPException(status_code=403, detail="Creator account required")
    if ctx.approval_status != "approved":
        raise HTTPException(
            status_code=403,
            detail="Seu cadastro ainda não foi aprovado",
        )
    return ctx


async def require_admin(ctx: AuthContext = Depends(get_auth_context)) -> AuthContext:
    if not ctx.is_admin:
        raise HTTPException(status_code=403, detail="Admin access denied")
    return ctx


async def require_guest(ctx: AuthContext = Depends(get_auth_context)) -> AuthContext:
    if not ctx.is_guest:
        raise HTTPException(status_code=403, detail="Guest account required")
    return ctx
