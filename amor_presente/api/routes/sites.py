"""
Creator site management.

Every route under `/sites/{site_id}` checks ownership first; sites owned by
someone else answer 404.
"""

from __future__ import annotations

from datetime import date, time
from decimal import Decimal
from typing import Any

from fastapi import APIRouter, Depends, File, Response, UploadFile
from pydantic import BaseModel, Field

from amor_presente.auth.context import AuthContext
from amor_presente.auth.middleware import (
    require_approved_creator,
    require_creator,
    require_creator_write,
)
from amor_presente.catalog.csv_import import import_products_csv
from amor_presente.catalog.site_products import (
    add_catalog_product,
    add_custom_product,
    list_site_products,
    remove_site_product,
    seed_default_products,
    update_site_product,
)
from amor_presente.commerce.orders import list_site_orders
from amor_presente.kernel.errors import ValidationError
from amor_presente.rsvp.service import list_site_rsvps
from amor_presente.sites.service import (
    create_site,
    delete_site,
    get_owned_site,
    list_creator_sites,
    update_site,
)

router = APIRouter(prefix="/sites", tags=["Sites"])

CSV_MAX_BYTES = 1024 * 1024


# =============================================================================
# Request Models
# =============================================================================


class CreateSiteRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)
    layout_id: str | None = None


class UpdateSiteRequest(BaseModel):
    title: str | None = None
    description: str | None = None
    story_text: str | None = None
    hero_images: list[str] | None = None
    story_images: list[str] | None = None
    color_scheme: str | None = None
    font_family: str | None = None
    font_color: str | None = None
    event_date: date | None = None
    event_time: time | None = None
    event_location: str | None = None
    custom_domain: str | None = None
    payment_method: str | None = None
    stripe_publishable_key: str | None = None
    stripe_secret_key: str | None = None
    is_active: bool | None = None


class AddSiteProductRequest(BaseModel):
    product_id: str


class CustomProductRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    price: Decimal = Field(..., ge=0)
    description: str | None = None
    image_url: str | None = None
    category: str | None = None


class UpdateSiteProductRequest(BaseModel):
    custom_name: str | None = None
    custom_description: str | None = None
    custom_image_url: str | None = None
    custom_price: Decimal | None = Field(None, ge=0)
    is_available: bool | None = None
    position: int | None = Field(None, ge=1)


# =============================================================================
# Sites
# =============================================================================


@router.get("")
async def list_sites(ctx: AuthContext = Depends(require_creator)) -> list[dict[str, Any]]:
    return await list_creator_sites(ctx.subject_id)


@router.post("", status_code=201)
async def create(
    request: CreateSiteRequest,
    ctx: AuthContext = Depends(require_approved_creator),
) -> dict[str, Any]:
    return await create_site(
        ctx,
        title=request.title,
        description=request.description,
        layout_id=request.layout_id,
    )


@router.get("/{site_id}")
async def get_site(site_id: str, ctx: AuthContext = Depends(require_creator)) -> dict[str, Any]:
    return await get_owned_site(site_id, ctx)


@router.patch("/{site_id}")
async def patch_site(
    site_id: str,
    request: UpdateSiteRequest,
    ctx: AuthContext = Depends(require_creator_write),
) -> dict[str, Any]:
    # Only fields present in the body are changed; explicit nulls clear.
    return await update_site(site_id, ctx, request.model_dump(exclude_unset=True))


@router.delete("/{site_id}", status_code=204)
async def remove_site(site_id: str, ctx: AuthContext = Depends(require_creator_write)) -> Response:
    await delete_site(site_id, ctx)
    return Response(status_code=204)


# =============================================================================
# Site products
# =============================================================================


@router.get("/{site_id}/products")
async def get_site_products(site_id: str, ctx: AuthContext = Depends(require_creator)) -> list[dict[str, Any]]:
    await get_owned_site(site_id, ctx)
    return await list_site_products(site_id)


@router.post("/{site_id}/products", status_code=201)
async def add_product(
    site_id: str,
    request: AddSiteProductRequest,
    ctx: AuthContext = Depends(require_creator_write),
) -> dict[str, Any]:
    await get_owned_site(site_id, ctx)
    return await add_catalog_product(site_id, request.product_id)


@router.post("/{site_id}/products/custom", status_code=201)
async def add_custom(
    site_id: str,
    request: CustomProductRequest,
    ctx: AuthContext = Depends(require_creator_write),
) -> dict[str, Any]:
    await get_owned_site(site_id, ctx)
    return await add_custom_product(site_id, ctx.subject_id, request.model_dump())


@router.post("/{site_id}/products/seed")
async def seed_products(site_id: str, ctx: AuthContext = Depends(require_creator_write)) -> dict[str, int]:
    await get_owned_site(site_id, ctx)
    return {"seeded": await seed_default_products(site_id)}


@router.post("/{site_id}/products/import")
async def import_csv(
    site_id: str,
    file: UploadFile = File(...),
    ctx: AuthContext = Depends(require_creator_write),
) -> dict[str, Any]:
    await get_owned_site(site_id, ctx)
    raw = await file.read(CSV_MAX_BYTES + 1)
    if len(raw) > CSV_MAX_BYTES:
        raise ValidationError(message="Arquivo CSV muito grande", code="csv.too_large", status_code=413)
    try:
        content = raw.decode("utf-8")
    except UnicodeDecodeError:
        content = raw.decode("latin-1")
    return await import_products_csv(site_id, ctx.subject_id, content)


@router.patch("/{site_id}/products/{site_product_id}")
async def patch_site_product(
    site_id: str,
    site_product_id: str,
    request: UpdateSiteProductRequest,
    ctx: AuthContext = Depends(require_creator_write),
) -> dict[str, Any]:
    await get_owned_site(site_id, ctx)
    return await update_site_product(site_id, site_product_id, request.model_dump(exclude_unset=True))


@router.delete("/{site_id}/products/{site_product_id}", status_code=204)
async def delete_site_product(
    site_id: str,
    site_product_id: str,
    ctx: AuthContext = Depends(require_creator_write),
) -> Response:
    await get_owned_site(site_id, ctx)
    await remove_site_product(site_id, site_product_id)
    return Response(status_code=204)


# =============================================================================
# RSVPs and orders
# =============================================================================


@router.get("/{site_id}/rsvps")
async def get_rsvps(site_id: str, ctx: AuthContext = Depends(require_creator)) -> dict[str, Any]:
    return await list_site_rsvps(site_id, ctx)


@router.get("/{site_id}/orders")
async def get_orders(site_id: str, ctx: AuthContext = Depends(require_creator)) -> list[dict[str, Any]]:
    return await list_site_orders(site_id, ctx)
