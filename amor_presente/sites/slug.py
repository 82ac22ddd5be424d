"""URL slugs for public sites (`/s/{slug}`)."""

from __future__ import annotations

import re
import unicodedata
from typing import Awaitable, Callable

SLUG_MAX_LENGTH = 50
FALLBACK_SLUG = "lista"

_UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)
_COMBINING_RE = re.compile("[\u0300-\u036f]")
_INVALID_RE = re.compile(r"[^a-z0-9\s]")
_SPACES_RE = re.compile(r"\s+")
_DASHES_RE = re.compile(r"-+")


def generate_slug(title: str) -> str:
    """
    Build a slug from a site title.

    "Chá de Casa Nova da Ana & João!" -> "cha-de-casa-nova-da-ana-joao"

    Truncation to 50 chars happens last, so a cut can end on a dash.
    """
    value = unicodedata.normalize("NFD", (title or "").lower())
    value = _COMBINING_RE.sub("", value)
    value = _INVALID_RE.sub("", value)
    value = _SPACES_RE.sub("-", value)
    value = _DASHES_RE.sub("-", value)
    value = value.strip("-")
    return value[:SLUG_MAX_LENGTH]


def is_uuid(value: str | None) -> bool:
    return bool(value) and bool(_UUID_RE.match(value))


def site_url(base_url: str, *, slug: str | None = None, title: str = "") -> str:
    """Public URL for a site; the stored slug wins, otherwise the title is slugified."""
    return f"{base_url.rstrip('/')}/s/{slug or generate_slug(title)}"


async def unique_slug(base: str, exists: Callable[[str], Awaitable[bool]]) -> str:
    """Return `base`, `base-2`, `base-3`, ... whichever is free first."""
    base = base or FALLBACK_SLUG
    candidate = base
    counter = 2
    while await exists(candidate):
        suffix = f"-{counter}"
        candidate = f"{base[:SLUG_MAX_LENGTH - len(suffix)]}{suffix}"
        counter += 1
    return candidate
