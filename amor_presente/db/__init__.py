"""Database layer: async engine, sessions and the row-level security scope."""

from amor_presente.db.client import close_db, get_db_session, init_db
from amor_presente.db.rls import acting_for_guests, rls_context, set_rls_context

__all__ = ["acting_for_guests", "close_db", "get_db_session", "init_db", "rls_context", "set_rls_context"]
