"""Enable row-level security on creator-owned tables.

Revision ID: 002_rls_policies
Revises: 001_core_tables
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "002_rls_policies"
down_revision: Union[str, None] = "001_core_tables"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_INTERNAL = "current_setting(''app.is_internal'', true) = ''true''"
_USER = "current_setting(''app.user_id'', true)"

# table -> (owner predicate, public read predicate or None)
_POLICIES: dict[str, tuple[str, str | None]] = {
    "sites": (
        f"creator_id::text = {_USER}",
        "is_active",
    ),
    "site_products": (
        f"EXISTS (SELECT 1 FROM sites s WHERE s.id = site_id AND s.creator_id::text = {_USER})",
        "EXISTS (SELECT 1 FROM sites s WHERE s.id = site_id AND s.is_active)",
    ),
    "site_rsvps": (
        f"EXISTS (SELECT 1 FROM sites s WHERE s.id = site_id AND s.creator_id::text = {_USER})",
        None,
    ),
    "orders": (
        f"EXISTS (SELECT 1 FROM sites s WHERE s.id = site_id AND s.creator_id::text = {_USER})",
        None,
    ),
}


def _create_policies(table: str, owner: str, public_read: str | None) -> None:
    statements = [
        f"ALTER TABLE {table} ENABLE ROW LEVEL SECURITY",
        f"DROP POLICY IF EXISTS {table}_owner_access ON {table}",
        f"CREATE POLICY {table}_owner_access ON {table} USING ({_INTERNAL} OR {owner})",
    ]
    if public_read:
        statements.append(f"DROP POLICY IF EXISTS {table}_public_read ON {table}")
        statements.append(
            f"CREATE POLICY {table}_public_read ON {table} FOR SELECT USING ({public_read})"
        )
    body = "\n".join(f"            EXECUTE '{stmt}';" for stmt in statements)
    op.execute(
        f"""
        DO $$
        BEGIN
{body}
        EXCEPTION
            WHEN undefined_table THEN
                RAISE NOTICE 'Table {table} does not exist, skipping RLS';
        END
        $$;
        """
    )


def upgrade() -> None:
    for table, (owner, public_read) in _POLICIES.items():
        _create_policies(table, owner, public_read)


def downgrade() -> None:
    for table in _POLICIES:
        op.execute(f"DROP POLICY IF EXISTS {table}_public_read ON {table}")
        op.execute(f"DROP POLICY IF EXISTS {table}_owner_access ON {table}")
        op.execute(f"ALTER TABLE {table} DISABLE ROW LEVEL SECURITY")
