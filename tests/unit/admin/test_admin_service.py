"""Unit tests for admin stats and platform settings."""

import pytest

from amor_presente.admin import service
from amor_presente.kernel.errors import ValidationError
from tests.support.db import FakeResult, executed_params, row, scripted_session

pytestmark = [pytest.mark.unit, pytest.mark.asyncio]


async def test_dashboard_stats(monkeypatch):
    _, get_session = scripted_session(
        FakeResult(
            rows=[row(sites=4, active_sites=3, profiles=10, pending_profiles=2, products=40, pending_orders=1)]
        )
    )
    monkeypatch.setattr(service, "get_db_session", get_session)

    assert await service.get_dashboard_stats() == {
        "sites": 4,
        "active_sites": 3,
        "profiles": 10,
        "pending_profiles": 2,
        "products": 40,
        "pending_orders": 1,
    }


async def test_settings_never_expose_secret(monkeypatch):
    _, get_session = scripted_session(
        FakeResult(rows=[row(stripe_public_key="pk_test_1", stripe_secret_key="sk_test_1234567890abcd", updated_at=None)])
    )
    monkeypatch.setattr(service, "get_db_session", get_session)

    result = await service.get_platform_settings()

    assert result["stripe_public_key"] == "pk_test_1"
    assert result["has_stripe_secret_key"] is True
    assert result["stripe_secret_key_hint"] == "sk_test…abcd"
    assert "stripe_secret_key" not in result


async def test_settings_when_missing(monkeypatch):
    _, get_session = scripted_session(FakeResult(rows=[]))
    monkeypatch.setattr(service, "get_db_session", get_session)

    result = await service.get_platform_settings()
    assert result["has_stripe_secret_key"] is False
    assert result["stripe_public_key"] is None


async def test_update_passes_none_and_empty_through(monkeypatch):
    session, get_session = scripted_session(
        FakeResult(),
        FakeResult(rows=[row(stripe_public_key=None, stripe_secret_key="sk_live_1234567890", updated_at=None)]),
    )
    monkeypatch.setattr(service, "get_db_session", get_session)

    result = await service.update_platform_settings(stripe_public_key="")

    assert executed_params(session)[0] == {"id": "platform", "public_key": "", "secret_key": None}
    assert result["has_stripe_secret_key"] is True


@pytest.mark.parametrize(
    "kwargs",
    [{"stripe_public_key": "sk_wrong"}, {"stripe_secret_key": "pk_wrong"}],
)
async def test_update_validates_prefixes(kwargs):
    with pytest.raises(ValidationError):
        await service.update_platform_settings(**kwargs)
