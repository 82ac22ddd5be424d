"""Seed the layout catalog.

Revision ID: 003_seed_layouts
Revises: 002_rls_policies
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ARRAY

# revision identifiers, used by Alembic.
revision: str = "003_seed_layouts"
down_revision: Union[str, None] = "002_rls_policies"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

LAYOUTS = [
    {
        "id": "cha-casa-nova",
        "name": "Chá de Casa Nova",
        "description": "Layout especial para celebrar sua nova casa, com seções para presentes essenciais e decoração",
        "category": "casa",
        "features": ["Seções organizadas", "Lista de presentes", "Fotos da casa", "Mensagem personalizada"],
        "is_available": True,
    },
    {
        "id": "casamento",
        "name": "Casamento",
        "description": "Em breve - Layout elegante para listas de casamento",
        "category": "casamento",
        "features": ["Em breve"],
        "is_available": False,
    },
    {
        "id": "cha-bebe",
        "name": "Chá de Bebê",
        "description": "Em breve - Layout fofo para celebrar a chegada do bebê",
        "category": "bebe",
        "features": ["Em breve"],
        "is_available": False,
    },
    {
        "id": "aniversario",
        "name": "Aniversário",
        "description": "Em breve - Layout festivo para comemorações de aniversário",
        "category": "aniversario",
        "features": ["Em breve"],
        "is_available": False,
    },
]


def upgrade() -> None:
    layouts = sa.table(
        "layouts",
        sa.column("id", sa.String),
        sa.column("name", sa.String),
        sa.column("description", sa.Text),
        sa.column("category", sa.String),
        sa.column("features", ARRAY(sa.String)),
        sa.column("is_available", sa.Boolean),
    )
    op.bulk_insert(layouts, LAYOUTS)


def downgrade() -> None:
    ids = ", ".join(f"'{layout['id']}'" for layout in LAYOUTS)
    op.execute(f"DELETE FROM layouts WHERE id IN ({ids})")
