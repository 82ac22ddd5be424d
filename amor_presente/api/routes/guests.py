"""Guest accounts: site users (scoped to one site) and platform guests."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from amor_presente.auth.context import AuthContext
from amor_presente.auth.guest_accounts import (
    sign_in_guest,
    sign_in_site_user,
    sign_up_guest,
    sign_up_site_user,
)
from amor_presente.auth.middleware import require_guest

router = APIRouter(prefix="/guests", tags=["Guests"])


class GuestSignUpRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1, max_length=128)
    name: str = Field(..., min_length=1, max_length=255)


class GuestSignInRequest(BaseModel):
    email: str
    password: str


@router.post("/sites/{site_id}/signup", status_code=201)
async def site_user_sign_up(site_id: str, request: GuestSignUpRequest) -> dict[str, Any]:
    return await sign_up_site_user(site_id, request.email, request.password, request.name)


@router.post("/sites/{site_id}/signin")
async def site_user_sign_in(site_id: str, request: GuestSignInRequest) -> dict[str, Any]:
    return await sign_in_site_user(site_id, request.email, request.password)


@router.post("/signup", status_code=201)
async def guest_sign_up(request: GuestSignUpRequest) -> dict[str, Any]:
    return await sign_up_guest(request.email, request.password, request.name)


@router.post("/signin")
async def guest_sign_in(request: GuestSignInRequest) -> dict[str, Any]:
    return await sign_in_guest(request.email, request.password)


@router.get("/me")
async def guest_me(ctx: AuthContext = Depends(require_guest)) -> dict[str, Any]:
    return {
        "id": ctx.subject_id,
        "email": ctx.email,
        "name": ctx.name,
        "kind": ctx.principal_type.value,
        "site_id": ctx.site_id,
    }
