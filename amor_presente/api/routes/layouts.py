"""Layout catalog."""

from typing import Any

from fastapi import APIRouter

from amor_presente.sites.layouts import list_layouts
from amor_presente.sites.theme import theme_catalog

router = APIRouter(tags=["Layouts"])


@router.get("/layouts")
async def get_layouts() -> list[dict[str, Any]]:
    return await list_layouts()


@router.get("/themes")
async def get_themes() -> dict[str, list[dict]]:
    """Color schemes, font families and font colors a site can pick from."""
    return theme_catalog()
