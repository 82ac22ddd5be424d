"""
Unauthenticated site surface.

Sites resolve by UUID or slug; inactive sites answer 404. RSVPs accept an
optional guest token: when present, the guest's identity fills in name and
email.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Header
from pydantic import BaseModel, Field

from amor_presente.auth.context import AuthContext
from amor_presente.auth.middleware import get_optional_auth_context
from amor_presente.rsvp.service import submit_fallback_rsvp, submit_rsvp
from amor_presente.sites.service import get_public_site

router = APIRouter(prefix="/public", tags=["Public"])


class RSVPRequest(BaseModel):
    guest_name: str | None = Field(None, max_length=255)
    guest_email: str | None = Field(None, max_length=255)
    will_attend: bool
    message: str | None = Field(None, max_length=2000)
    phone: str | None = Field(None, max_length=50)
    adults_count: int | None = Field(None, ge=0)
    children_count: int | None = Field(None, ge=0)


class FallbackRSVPRequest(BaseModel):
    guest_name: str = Field(..., max_length=255)
    guest_email: str = Field(..., max_length=255)
    will_attend: bool


@router.get("/sites/{identifier}")
async def public_site(identifier: str) -> dict[str, Any]:
    return await get_public_site(identifier)


@router.post("/sites/{site_id}/rsvp", status_code=201)
async def rsvp(
    site_id: str,
    request: RSVPRequest,
    ctx: AuthContext | None = Depends(get_optional_auth_context),
) -> dict[str, Any]:
    guest: dict[str, Any] = {"name": request.guest_name, "email": request.guest_email}
    if ctx is not None and ctx.is_guest:
        guest["name"] = request.guest_name or ctx.name
        guest["email"] = ctx.email
        # Site users answer for their own site only.
        if ctx.site_id == site_id:
            guest["site_user_id"] = ctx.subject_id
    return await submit_rsvp(
        site_id,
        guest,
        request.will_attend,
        message=request.message,
        phone=request.phone,
        adults_count=request.adults_count,
        children_count=request.children_count,
    )


@router.post("/sites/{site_id}/rsvp/fallback")
async def rsvp_fallback(
    site_id: str,
    request: FallbackRSVPRequest,
    user_agent: str | None = Header(default=None),
) -> dict[str, Any]:
    return await submit_fallback_rsvp(
        site_id,
        request.guest_name,
        request.guest_email,
        request.will_attend,
        user_agent=user_agent,
    )
