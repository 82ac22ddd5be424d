"""
Row-level security scope.

Authentication binds the caller here; `db.client.get_db_session` copies it
into every session as `app.user_id` and `app.is_internal`, which the
policies from alembic revision `002_rls_policies` read. Creators see their own
sites and what hangs off them; internal sessions see everything.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Iterator


@dataclass(frozen=True)
class RlsScope:
    user_id: str | None = None
    is_internal: bool = False


_scope: ContextVar[RlsScope] = ContextVar("rls_scope", default=RlsScope())


def current_scope() -> RlsScope:
    return _scope.get()


def set_rls_context(user_id: str | None, is_internal: bool = False) -> None:
    """Bind the caller for the rest of the request."""
    _scope.set(RlsScope(user_id, is_internal))


def get_rls_context() -> str | None:
    return _scope.get().user_id


def is_rls_internal() -> bool:
    return _scope.get().is_internal


@contextmanager
def rls_context(user_id: str | None, is_internal: bool = False) -> Iterator[RlsScope]:
    """Act as another principal inside the block; the previous scope comes back on exit."""
    token = _scope.set(RlsScope(user_id, is_internal))
    try:
        yield _scope.get()
    finally:
        _scope.reset(token)


def acting_for_guests():
    """
    Internal scope for writes made on a guest's behalf.

    Guests own no rows, yet their orders, RSVPs, webhook settlements and
    payment-success lookups land on a creator's site.
    """
    return rls_context(None, is_internal=True)
