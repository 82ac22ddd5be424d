"""
Creator authentication routes.

Creators authenticate against Supabase Auth; the returned access token is
sent back as a Bearer token. Admin sessions live in the admin router.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from amor_presente.auth.context import AuthContext
from amor_presente.auth.creator_accounts import check_approval_status, get_profile, sign_in, sign_up
from amor_presente.auth.middleware import require_creator

router = APIRouter(prefix="/auth", tags=["Authentication"])


class SignUpRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)
    name: str = Field(..., min_length=1, max_length=255)


class SignInRequest(BaseModel):
    email: str
    password: str


class MeResponse(BaseModel):
    id: str
    email: str | None
    name: str | None
    principal_type: str
    approval_status: str | None
    is_admin: bool
    scopes: list[str]
    profile: dict[str, Any] | None = None


@router.post("/signup", status_code=201)
async def creator_sign_up(request: SignUpRequest) -> dict[str, Any]:
    """Register a creator. New accounts wait for admin approval."""
    return await sign_up(request.email, request.password, request.name)


@router.post("/signin")
async def creator_sign_in(request: SignInRequest) -> dict[str, Any]:
    return await sign_in(request.email, request.password)


@router.get("/me", response_model=MeResponse)
async def creator_me(ctx: AuthContext = Depends(require_creator)) -> MeResponse:
    profile = await get_profile(ctx.subject_id) if ctx.is_creator else None
    return MeResponse(
        id=ctx.subject_id,
        email=ctx.email,
        name=ctx.name,
        principal_type=ctx.principal_type.value,
        approval_status=ctx.approval_status,
        is_admin=ctx.is_admin,
        scopes=ctx.scopes,
        profile=profile,
    )


@router.get("/approval-status")
async def approval_status(ctx: AuthContext = Depends(require_creator)) -> dict[str, str]:
    """Polled by the pending-approval page."""
    return {"approval_status": await check_approval_status(ctx.subject_id)}
