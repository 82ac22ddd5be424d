"""
Site service.

Sites belong to one creator. Admins can reach every site; anyone else who
is not the owner gets a 404 so site ids do not leak. Stripe keys never leave
this module: serialized sites only say whether keys are configured.
"""

from __future__ import annotations

from datetime import date, time
from typing import Any

import structlog
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError

from amor_presente.auth.context import AuthContext
from amor_presente.catalog.site_products import list_site_products, seed_default_products
from amor_presente.config import get_settings
from amor_presente.db.client import get_db_session
from amor_presente.kernel.errors import (
    ConflictError,
    ForbiddenError,
    SiteNotFoundError,
    ValidationError,
)
from amor_presente.sites.countdown import countdown_for
from amor_presente.sites.layouts import DEFAULT_LAYOUT_ID, get_available_layout
from amor_presente.sites.slug import generate_slug, is_uuid, site_url, unique_slug
from amor_presente.sites.theme import (
    DEFAULT_COLOR_SCHEME,
    DEFAULT_FONT_COLOR,
    DEFAULT_FONT_FAMILY,
    build_theme,
    validate_theme_ids,
)

logger = structlog.get_logger()

TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500
PAYMENT_METHODS = ("stripe",)

SITE_COLUMNS = """
    id, creator_id, layout_id, title, slug, description, story_text,
    hero_images, story_images, color_scheme, font_family, font_color,
    event_date, event_time, event_location, custom_domain, payment_method,
    stripe_publishable_key, stripe_secret_key, is_active, created_at, updated_at
"""

_TEXT_FIELDS = (
    "story_text",
    "event_location",
    "custom_domain",
    "stripe_publishable_key",
    "stripe_secret_key",
)
_EDITABLE_FIELDS = (
    "title",
    "description",
    "hero_images",
    "story_images",
    "color_scheme",
    "font_family",
    "font_color",
    "event_date",
    "event_time",
    "payment_method",
    "is_active",
    *_TEXT_FIELDS,
)


def site_dict(row: Any) -> dict[str, Any]:
    """Serialize a site row without its Stripe keys."""
    settings = get_settings()
    return {
        "id": str(row.id),
        "creator_id": str(row.creator_id),
        "layout_id": row.layout_id,
        "title": row.title,
        "slug": row.slug,
        "url": site_url(settings.web_app_url or "", slug=row.slug, title=row.title),
        "description": row.description,
        "story_text": row.story_text,
        "hero_images": list(row.hero_images or []),
        "story_images": list(row.story_images or []),
        "color_scheme": row.color_scheme or DEFAULT_COLOR_SCHEME,
        "font_family": row.font_family or DEFAULT_FONT_FAMILY,
        "font_color": row.font_color or DEFAULT_FONT_COLOR,
        "event_date": row.event_date,
        "event_time": row.event_time,
        "event_location": row.event_location,
        "custom_domain": row.custom_domain,
        "payment_method": row.payment_method or "stripe",
        "has_stripe_publishable_key": bool(row.stripe_publishable_key),
        "has_stripe_secret_key": bool(row.stripe_secret_key),
        "is_active": bool(row.is_active),
        "created_at": row.created_at,
        "updated_at": row.updated_at,
    }


def _clean_title(title: str | None) -> str:
    value = (title or "").strip()
    if not value:
        raise ValidationError(message="O título do site é obrigatório", code="site.title_required")
    if len(value) > TITLE_MAX_LENGTH:
        raise ValidationError(
            message=f"O título deve ter no máximo {TITLE_MAX_LENGTH} caracteres",
            code="site.title_too_long",
        )
    return value


def _clean_description(description: str | None) -> str | None:
    value = (description or "").strip()
    if len(value) > DESCRIPTION_MAX_LENGTH:
        raise ValidationError(
            message=f"A descrição deve ter no máximo {DESCRIPTION_MAX_LENGTH} caracteres",
            code="site.description_too_long",
        )
    return value or None


def _parse_date(value: Any) -> date | None:
    if value in (None, ""):
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise ValidationError(message="Data do evento inválida", code="site.invalid_event_date")


def _parse_time(value: Any) -> time | None:
    if value in (None, ""):
        return None
    if isinstance(value, time):
        return value
    try:
        return time.fromisoformat(str(value))
    except ValueError:
        raise ValidationError(message="Horário do evento inválido", code="site.invalid_event_time")


def _clean_images(value: Any) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, (list, tuple)):
        raise ValidationError(message="Lista de imagens inválida", code="site.invalid_images")
    return [str(v).strip() for v in value if v and str(v).strip()]


async def create_site(
    ctx: AuthContext,
    *,
    title: str,
    description: str | None = None,
    layout_id: str | None = None,
) -> dict[str, Any]:
    if not ctx.is_admin and ctx.approval_status != "approved":
        raise ForbiddenError(
            message="Seu cadastro precisa ser aprovado antes de criar sites",
            code="creator.not_approved",
        )

    clean_title = _clean_title(title)
    clean_description = _clean_description(description)
    layout = await get_available_layout(layout_id or DEFAULT_LAYOUT_ID)

    try:
        async with get_db_session() as session:

            async def slug_taken(candidate: str) -> bool:
                result = await session.execute(
                    text("SELECT 1 FROM sites WHERE slug = :slug"),
                    {"slug": candidate},
                )
                return result.fetchone() is not None

            slug = await unique_slug(generate_slug(clean_title), slug_taken)
            result = await session.execute(
                text(
                    f"""
                    INSERT INTO sites (
                        creator_id, layout_id, title, slug, description,
                        color_scheme, font_family, font_color, is_active
                    )
                    VALUES (
                        :creator_id, :layout_id, :title, :slug, :description,
                        :color_scheme, :font_family, :font_color, true
                    )
                    RETURNING {SITE_COLUMNS}
                    """
                ),
                {
                    "creator_id": ctx.subject_id,
                    "layout_id": layout["id"],
                    "title": clean_title,
                    "slug": slug,
                    "description": clean_description,
                    "color_scheme": DEFAULT_COLOR_SCHEME,
                    "font_family": DEFAULT_FONT_FAMILY,
                    "font_color": DEFAULT_FONT_COLOR,
                },
            )
            row = result.fetchone()
    except IntegrityError as exc:
        logger.warning("Site creation conflicted", title=clean_title, error=str(exc.orig))
        raise ConflictError(message="Já existe um site com este endereço", code="site.slug_taken") from exc

    site = site_dict(row)
    await seed_default_products(site["id"])
    logger.info("Site created", site_id=site["id"], slug=site["slug"], creator_id=ctx.subject_id)
    return site


async def list_creator_sites(creator_id: str) -> list[dict[str, Any]]:
    async with get_db_session() as session:
        result = await session.execute(
            text(
                f"""
                SELECT {SITE_COLUMNS}
                FROM sites
                WHERE creator_id = :creator_id
                ORDER BY created_at DESC
                """
            ),
            {"creator_id": creator_id},
        )
        return [site_dict(row) for row in result.fetchall()]


async def _load_owned_row(session: Any, site_id: str, ctx: AuthContext) -> Any:
    if not is_uuid(site_id):
        raise SiteNotFoundError(site_id)
    result = await session.execute(
        text(f"SELECT {SITE_COLUMNS} FROM sites WHERE id = :id"),
        {"id": site_id},
    )
    row = result.fetchone()
    if not row or (str(row.creator_id) != ctx.subject_id and not ctx.is_admin):
        raise SiteNotFoundError(site_id)
    return row


async def get_owned_site(site_id: str, ctx: AuthContext) -> dict[str, Any]:
    async with get_db_session() as session:
        row = await _load_owned_row(session, site_id, ctx)
    return site_dict(row)


def _clean_changes(changes: dict[str, Any]) -> dict[str, Any]:
    cleaned: dict[str, Any] = {}
    for key in _EDITABLE_FIELDS:
        if key not in changes:
            continue
        value = changes[key]
        if key == "title":
            value = _clean_title(value)
        elif key == "description":
            value = _clean_description(value)
        elif key in ("hero_images", "story_images"):
            value = _clean_images(value)
        elif key == "event_date":
            value = _parse_date(value)
        elif key == "event_time":
            value = _parse_time(value)
        elif key == "payment_method":
            if value not in PAYMENT_METHODS:
                raise ValidationError(message="Método de pagamento inválido", code="site.invalid_payment_method")
        elif key == "is_active":
            if value is None:
                continue
            value = bool(value)
        elif key in _TEXT_FIELDS:
            value = value.strip() or None if isinstance(value, str) else value
        cleaned[key] = value

    validate_theme_ids(
        color_scheme=cleaned.get("color_scheme"),
        font_family=cleaned.get("font_family"),
        font_color=cleaned.get("font_color"),
    )
    return cleaned


async def update_site(site_id: str, ctx: AuthContext, changes: dict[str, Any]) -> dict[str, Any]:
    """Partial update. The slug is fixed at creation and never regenerated."""
    cleaned = _clean_changes(changes)
    async with get_db_session() as session:
        row = await _load_owned_row(session, site_id, ctx)
        if not cleaned:
            return site_dict(row)

        assignments = ", ".join(f"{key} = :{key}" for key in cleaned)
        result = await session.execute(
            text(
                f"""
                UPDATE sites
                SET {assignments}, updated_at = NOW()
                WHERE id = :id
                RETURNING {SITE_COLUMNS}
                """
            ),
            {**cleaned, "id": site_id},
        )
        updated = result.fetchone()

    logger.info("Site updated", site_id=site_id, fields=sorted(cleaned))
    return site_dict(updated)


async def delete_site(site_id: str, ctx: AuthContext) -> None:
    async with get_db_session() as session:
        await _load_owned_row(session, site_id, ctx)
        await session.execute(text("DELETE FROM site_products WHERE site_id = :id"), {"id": site_id})
        await session.execute(text("DELETE FROM site_rsvps WHERE site_id = :id"), {"id": site_id})
        await session.execute(text("DELETE FROM sites WHERE id = :id"), {"id": site_id})
    logger.info("Site deleted", site_id=site_id, deleted_by=ctx.subject_id)


async def get_site_stripe_keys(site_id: str) -> dict[str, str | None] | None:
    """Internal accessor for checkout. Returns None for unknown or inactive sites."""
    async with get_db_session() as session:
        result = await session.execute(
            text(
                """
                SELECT id, title, stripe_publishable_key, stripe_secret_key
                FROM sites
                WHERE id = :id AND is_active = true
                """
            ),
            {"id": site_id},
        )
        row = result.fetchone()
    if not row:
        return None
    return {
        "title": row.title,
        "publishable_key": row.stripe_publishable_key,
        "secret_key": row.stripe_secret_key,
    }


async def get_public_site(identifier: str) -> dict[str, Any]:
    """Public view of an active site by UUID or slug."""
    column = "id" if is_uuid(identifier) else "slug"
    async with get_db_session() as session:
        result = await session.execute(
            text(f"SELECT {SITE_COLUMNS} FROM sites WHERE {column} = :identifier AND is_active = true"),
            {"identifier": identifier},
        )
        row = result.fetchone()
    if not row:
        raise SiteNotFoundError(identifier)

    site = site_dict(row)
    products = await list_site_products(site["id"], only_available=True)
    categories: list[str] = []
    for product in products:
        if product["category"] and product["category"] not in categories:
            categories.append(product["category"])

    settings = get_settings()
    return {
        "site": site,
        "theme": build_theme(row.color_scheme, row.font_family, row.font_color),
        "countdown": countdown_for(row.event_date, row.event_time, settings.event_timezone),
        "categories": categories,
        "products": products,
    }
