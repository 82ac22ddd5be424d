"""Unit tests for admin, guest and Supabase token handling."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from amor_presente.auth.admin_accounts import create_admin_jwt, verify_admin_jwt
from amor_presente.auth.creator_accounts import verify_supabase_jwt
from amor_presente.auth.guest_accounts import create_guest_jwt, verify_guest_jwt
from amor_presente.config import get_settings

pytestmark = pytest.mark.unit


def _supabase_token(**overrides) -> str:
    settings = get_settings()
    now = datetime.now(timezone.utc)
    claims = {
        "sub": "11111111-1111-1111-1111-111111111111",
        "email": "ana@example.com",
        "aud": settings.supabase_jwt_audience,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(hours=1)).timestamp()),
    }
    claims.update(overrides)
    return jwt.encode(claims, settings.supabase_jwt_secret, algorithm="HS256")


class TestAdminTokens:
    def test_round_trip(self):
        token = create_admin_jwt("admin-1", "Admin@Example.com")
        claims = verify_admin_jwt(token)
        assert claims is not None
        assert claims.sub == "admin-1"
        assert claims.email == "admin@example.com"
        assert claims.scopes == ["admin", "internal"]

    def test_guest_token_is_not_an_admin_token(self):
        token = create_guest_jwt(kind="guest", user_id="g1", email="g@example.com", name="G")
        assert verify_admin_jwt(token) is None

    def test_garbage(self):
        assert verify_admin_jwt("not-a-token") is None


class TestGuestTokens:
    def test_site_user_round_trip(self):
        token = create_guest_jwt(
            kind="site_user",
            user_id="su1",
            email="c@example.com",
            name="Convidado",
            site_id="site-1",
        )
        claims = verify_guest_jwt(token)
        assert claims is not None
        assert claims.kind == "site_user"
        assert claims.site_id == "site-1"

    def test_site_user_without_site_is_rejected(self):
        token = create_guest_jwt(kind="site_user", user_id="su1", email="c@example.com", name="C")
        assert verify_guest_jwt(token) is None

    def test_admin_token_is_not_a_guest_token(self):
        assert verify_guest_jwt(create_admin_jwt("a1", "a@example.com")) is None


class TestSupabaseTokens:
    def test_valid_token(self):
        claims = verify_supabase_jwt(_supabase_token())
        assert claims is not None
        assert claims["email"] == "ana@example.com"

    def test_expired_token(self):
        past = datetime.now(timezone.utc) - timedelta(hours=2)
        token = _supabase_token(iat=int(past.timestamp()), exp=int((past + timedelta(minutes=5)).timestamp()))
        assert verify_supabase_jwt(token) is None

    def test_wrong_audience(self):
        assert verify_supabase_jwt(_supabase_token(aud="anon")) is None

    def test_missing_subject(self):
        assert verify_supabase_jwt(_supabase_token(sub="")) is None
