"""Unit tests for request authentication and the role dependencies."""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from fastapi import HTTPException

from amor_presente.auth import middleware
from amor_presente.auth.admin_accounts import create_admin_jwt
from amor_presente.auth.context import AuthContext, PrincipalType
from amor_presente.auth.guest_accounts import create_guest_jwt
from amor_presente.db.rls import get_rls_context, is_rls_internal

pytestmark = [pytest.mark.unit, pytest.mark.asyncio]


def _request(path: str = "/api/v1/sites", *, cookies=None, headers=None):
    return SimpleNamespace(
        url=SimpleNamespace(path=path),
        cookies=cookies or {},
        headers=headers or {},
    )


class TestGetAuthContext:
    async def test_missing_credentials(self):
        with pytest.raises(HTTPException) as exc:
            await middleware.get_auth_context(_request(), None)
        assert exc.value.status_code == 401
        assert exc.value.headers == {"WWW-Authenticate": "Bearer"}

    async def test_admin_cookie_on_admin_path(self):
        token = create_admin_jwt("a1", "admin@example.com")
        ctx = await middleware.get_auth_context(
            _request("/api/v1/admin/stats", cookies={"admin_session": token}),
            None,
        )
        assert ctx.principal_type == PrincipalType.ADMIN
        assert ctx.is_admin
        assert is_rls_internal() is True

    async def test_admin_cookie_ignored_outside_admin_paths(self):
        token = create_admin_jwt("a1", "admin@example.com")
        with pytest.raises(HTTPException) as exc:
            await middleware.get_auth_context(_request(cookies={"admin_session": token}), None)
        assert exc.value.status_code == 401

    async def test_admin_cookie_with_admin_client_header(self):
        token = create_admin_jwt("a1", "admin@example.com")
        ctx = await middleware.get_auth_context(
            _request(cookies={"admin_session": token}, headers={"X-Presente-Client": "admin"}),
            None,
        )
        assert ctx.principal_type == PrincipalType.ADMIN

    async def test_admin_bearer(self):
        token = create_admin_jwt("a1", "admin@example.com")
        ctx = await middleware.get_auth_context(_request(), f"Bearer {token}")
        assert ctx.subject_id == "a1"

    async def test_creator_bearer(self, monkeypatch):
        monkeypatch.setattr(middleware, "verify_supabase_jwt", lambda token: {"sub": "u1", "email": "ana@example.com"})
        monkeypatch.setattr(
            middleware,
            "get_profile",
            AsyncMock(return_value={"name": "Ana", "approval_status": "approved"}),
        )
        monkeypatch.setattr(middleware, "is_admin_email", AsyncMock(return_value=False))

        ctx = await middleware.get_auth_context(_request(), "Bearer supabase-token")

        assert ctx.principal_type == PrincipalType.CREATOR
        assert ctx.scopes == ["read", "write"]
        assert ctx.approval_status == "approved"
        assert not ctx.is_admin
        assert get_rls_context() == "u1"
        assert is_rls_internal() is False

    async def test_creator_without_profile_is_pending(self, monkeypatch):
        monkeypatch.setattr(middleware, "verify_supabase_jwt", lambda token: {"sub": "u1", "email": "x@example.com"})
        monkeypatch.setattr(middleware, "get_profile", AsyncMock(return_value=None))
        monkeypatch.setattr(middleware, "is_admin_email", AsyncMock(return_value=False))

        ctx = await middleware.get_auth_context(_request(), "Bearer supabase-token")
        assert ctx.approval_status == "pending"
        assert ctx.scopes == ["read"]

    async def test_creator_listed_as_admin(self, monkeypatch):
        monkeypatch.setattr(middleware, "verify_supabase_jwt", lambda token: {"sub": "u1", "email": "boss@example.com"})
        monkeypatch.setattr(middleware, "get_profile", AsyncMock(return_value=None))
        monkeypatch.setattr(middleware, "is_admin_email", AsyncMock(return_value=True))

        ctx = await middleware.get_auth_context(_request(), "Bearer supabase-token")
        assert ctx.is_creator
        assert ctx.is_admin
        assert ctx.is_internal

    async def test_guest_bearer(self, monkeypatch):
        monkeypatch.setattr(middleware, "verify_supabase_jwt", lambda token: None)
        token = create_guest_jwt(kind="site_user", user_id="su1", email="c@example.com", name="C", site_id="s1")

        ctx = await middleware.get_auth_context(_request(), f"Bearer {token}")
        assert ctx.principal_type == PrincipalType.SITE_USER
        assert ctx.site_id == "s1"
        assert ctx.scopes == ["rsvp"]

    async def test_invalid_bearer(self, monkeypatch):
        monkeypatch.setattr(middleware, "verify_supabase_jwt", lambda token: None)
        with pytest.raises(HTTPException) as exc:
            await middleware.get_auth_context(_request(), "Bearer garbage")
        assert exc.value.detail == "Invalid or expired session"

    async def test_optional_context(self, monkeypatch):
        assert await middleware.get_optional_auth_context(_request(), None) is None


def _ctx(principal, **kwargs):
    return AuthContext(principal_type=principal, subject_id="x", **kwargs)


class TestRoleDependencies:
    async def test_require_approved_creator(self):
        approved = _ctx(PrincipalType.CREATOR, scopes=["read", "write"], approval_status="approved")
        assert await middleware.require_approved_creator(approved) is approved

        pending = _ctx(PrincipalType.CREATOR, scopes=["read"], approval_status="pending")
        with pytest.raises(HTTPException) as exc:
            await middleware.require_approved_creator(pending)
        assert exc.value.status_code == 403
        assert exc.value.detail == "Seu cadastro ainda não foi aprovado"

    @pytest.mark.parametrize("status", ["pending", "rejected"])
    async def test_require_creator_write_blocks_unapproved(self, status):
        ctx = _ctx(PrincipalType.CREATOR, scopes=["read"], approval_status=status)
        with pytest.raises(HTTPException) as exc:
            await middleware.require_creator_write(ctx)
        assert exc.value.status_code == 403

    async def test_require_creator_write_allows_approved(self):
        approved = _ctx(PrincipalType.CREATOR, scopes=["read", "write"], approval_status="approved")
        assert await middleware.require_creator_write(approved) is approved

    async def test_admin_passes_creator_checks(self):
        admin = _ctx(PrincipalType.ADMIN, scopes=["admin", "internal"], is_internal=True)
        assert await middleware.require_creator_write(admin) is admin
        assert await middleware.require_approved_creator(admin) is admin
        assert await middleware.require_creator(admin) is admin
        assert await middleware.require_admin(admin) is admin

    async def test_guests_are_not_creators(self):
        guest = _ctx(PrincipalType.GUEST, scopes=["rsvp"])
        with pytest.raises(HTTPException):
            await middleware.require_creator(guest)
        with pytest.raises(HTTPException):
            await middleware.require_admin(guest)
        assert await middleware.require_guest(guest) is guest

    async def test_require_scope_factory(self):
        check = middleware.require_scope("write")
        with pytest.raises(HTTPException):
            await check(_ctx(PrincipalType.CREATOR, scopes=["read"]))
        ctx = _ctx(PrincipalType.CREATOR, scopes=["write"])
        assert await check(ctx) is ctx
