"""Global product catalog. Reads are public; writes are admin-only."""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Literal

from fastapi import APIRouter, Depends, Query, Response
from pydantic import BaseModel, Field

from amor_presente.auth.context import AuthContext
from amor_presente.auth.middleware import require_admin
from amor_presente.catalog.products import (
    create_product,
    delete_product,
    get_product,
    list_categories,
    list_products,
    update_product,
)

router = APIRouter(prefix="/products", tags=["Products"])


class ProductRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    price: Decimal = Field(..., ge=0)
    description: str | None = None
    image_url: str | None = None
    category: str | None = None
    status: Literal["active", "inactive"] | None = None


class ProductUpdateRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    price: Decimal | None = Field(None, ge=0)
    description: str | None = None
    image_url: str | None = None
    category: str | None = None
    status: Literal["active", "inactive"] | None = None


@router.get("")
async def get_products(
    category: str | None = None,
    q: str | None = Query(None, max_length=100),
) -> list[dict[str, Any]]:
    return await list_products(category=category, q=q)


@router.get("/categories")
async def get_categories() -> list[str]:
    return await list_categories()


@router.get("/{product_id}")
async def get_one(product_id: str) -> dict[str, Any]:
    return await get_product(product_id)


@router.post("", status_code=201)
async def create(request: ProductRequest, ctx: AuthContext = Depends(require_admin)) -> dict[str, Any]:
    fields = request.model_dump(exclude_none=True)
    return await create_product(fields, created_by=ctx.subject_id if ctx.is_creator else None)


@router.patch("/{product_id}")
async def patch(
    product_id: str,
    request: ProductUpdateRequest,
    ctx: AuthContext = Depends(require_admin),
) -> dict[str, Any]:
    return await update_product(product_id, request.model_dump(exclude_unset=True))


@router.delete("/{product_id}", status_code=204)
async def remove(product_id: str, ctx: AuthContext = Depends(require_admin)) -> Response:
    await delete_product(product_id)
    return Response(status_code=204)
