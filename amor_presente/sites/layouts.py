"""Layout catalog (seeded by migration 003)."""

from __future__ import annotations

from typing import Any

from sqlalchemy import text

from amor_presente.db.client import get_db_session
from amor_presente.kernel.errors import ValidationError

DEFAULT_LAYOUT_ID = "cha-casa-nova"


def _layout_dict(row: Any) -> dict[str, Any]:
    return {
        "id": row.id,
        "name": row.name,
        "description": row.description,
        "category": row.category,
        "features": list(row.features or []),
        "is_available": bool(row.is_available),
    }


async def list_layouts() -> list[dict[str, Any]]:
    """Available layouts first, then alphabetical."""
    async with get_db_session() as session:
        result = await session.execute(
            text(
                """
                SELECT id, name, description, category, features, is_available
                FROM layouts
                ORDER BY is_available DESC, name ASC
                """
            )
        )
        return [_layout_dict(row) for row in result.fetchall()]


async def get_available_layout(layout_id: str) -> dict[str, Any]:
    async with get_db_session() as session:
        result = await session.execute(
            text(
                """
                SELECT id, name, description, category, features, is_available
                FROM layouts
                WHERE id = :layout_id
                """
            ),
            {"layout_id": layout_id},
        )
        row = result.fetchone()

    if not row:
        raise ValidationError(message="Layout não encontrado", code="layout.not_found")
    if not row.is_available:
        raise ValidationError(message="Layout ainda não disponível", code="layout.unavailable")
    return _layout_dict(row)
