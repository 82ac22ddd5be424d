"""Unit tests for RLS context propagation into database sessions."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from amor_presente.db import client as db_client
from amor_presente.db.rls import (
    RlsScope,
    acting_for_guests,
    current_scope,
    get_rls_context,
    is_rls_internal,
    rls_context,
    set_rls_context,
)

pytestmark = pytest.mark.unit


def test_rls_context_restores_previous_values():
    set_rls_context("user-1")
    with rls_context(None, is_internal=True):
        assert get_rls_context() is None
        assert is_rls_internal() is True
    assert get_rls_context() == "user-1"
    assert is_rls_internal() is False
    set_rls_context(None)


def test_acting_for_guests_is_internal_without_user():
    set_rls_context("creator-1")
    with acting_for_guests() as scope:
        assert scope == RlsScope(user_id=None, is_internal=True)
        assert current_scope() is scope
    assert current_scope() == RlsScope(user_id="creator-1")
    set_rls_context(None)


def _install_session(monkeypatch):
    session = MagicMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    monkeypatch.setattr(db_client, "_session_factory", lambda: session)
    return session


@pytest.mark.asyncio
async def test_session_sets_user_and_commits(monkeypatch):
    session = _install_session(monkeypatch)
    with rls_context("user-9"):
        async with db_client.get_db_session():
            pass

    sql = [str(call.args[0]) for call in session.execute.await_args_list]
    assert "app.user_id" in sql[0]
    assert session.execute.await_args_list[0].args[1] == {"user_id": "user-9"}
    assert not any("app.is_internal" in s for s in sql)
    session.commit.assert_awaited_once()
    session.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_internal_session_flag(monkeypatch):
    session = _install_session(monkeypatch)
    with acting_for_guests():
        async with db_client.get_db_session():
            pass

    sql = [str(call.args[0]) for call in session.execute.await_args_list]
    assert sql == ["SELECT set_config('app.is_internal', 'true', true)"]


@pytest.mark.asyncio
async def test_session_rolls_back_on_error(monkeypatch):
    session = _install_session(monkeypatch)
    with pytest.raises(RuntimeError):
        async with db_client.get_db_session():
            raise RuntimeError("fail")
    session.rollback.assert_awaited_once()
    session.commit.assert_not_awaited()
    session.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_session_requires_init(monkeypatch):
    monkeypatch.setattr(db_client, "_session_factory", None)
    with pytest.raises(RuntimeError):
        async with db_client.get_db_session():
            pass
