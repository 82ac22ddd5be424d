from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from amor_presente.auth import approval
from amor_presente.kernel.errors import NotFoundError
from tests.support.db import FakeResult, executed_sql, row, scripted_session

pytestmark = [pytest.mark.unit, pytest.mark.asyncio]


async def test_approve_sets_timestamp_and_notifies(monkeypatch):
    approved_at = datetime(2026, 10, 1, tzinfo=timezone.utc)
    updated = row(id="u1", name="Ana", email="ana@example.com", approval_status="approved", approved_at=approved_at)
    session, get_session = scripted_session(FakeResult(rows=[updated]))
    monkeypatch.setattr(approval, "get_db_session", get_session)
    send = AsyncMock(return_value=True)
    monkeypatch.setattr(approval, "send_resend_email", send)

    result = await approval.approve_user("u1")

    assert result == {"id": "u1", "approval_status": "approved", "approved_at": approved_at, "notified": True}
    assert "approved_at = NOW()" in executed_sql(session)[0]
    assert send.await_args.args[0].subject == "✅ Seu cadastro foi aprovado!"


async def test_reject_keeps_approved_at(monkeypatch):
    updated = row(id="u1", name="Ana", email="ana@example.com", approval_status="rejected", approved_at=None)
    session, get_session = scripted_session(FakeResult(rows=[updated]))
    monkeypatch.setattr(approval, "get_db_session", get_session)
    monkeypatch.setattr(approval, "send_resend_email", AsyncMock(side_effect=RuntimeError("resend down")))

    result = await approval.reject_user("u1")

    assert result["approval_status"] == "rejected"
    assert result["notified"] is False
    assert "approved_at" not in executed_sql(session)[0].split("RETURNING")[0]


async def test_unknown_user(monkeypatch):
    _, get_session = scripted_session(FakeResult(rows=[]))
    monkeypatch.setattr(approval, "get_db_session", get_session)
    with pytest.raises(NotFoundError):
        await approval.approve_user("missing")


async def test_list_pending(monkeypatch):
    pending = row(id="u2", name="Bia", email="bia@example.com", approval_status="pending", created_at=None)
    _, get_session = scripted_session(FakeResult(rows=[pending]))
    monkeypatch.setattr(approval, "get_db_session", get_session)
    assert await approval.list_pending_users() == [
        {"id": "u2", "name": "Bia", "email": "bia@example.com", "approval_status": "pending", "created_at": None}
    ]
