"""Unit tests for rate limiting and CORS origins."""

from types import SimpleNamespace

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from amor_presente.api.middleware import security
from amor_presente.api.middleware.security import RateLimitMiddleware

pytestmark = pytest.mark.unit


class TestRateLimiter:
    def limiter(self, per_minute=5, burst=3):
        return RateLimitMiddleware(FastAPI(), requests_per_minute=per_minute, burst_limit=burst)

    def test_burst_limit(self):
        limiter = self.limiter(per_minute=100, burst=3)
        results = [limiter._is_rate_limited("1.1.1.1", now=1000.0 + i * 0.1) for i in range(4)]

        assert [limited for limited, _ in results] == [False, False, False, True]
        assert results[-1][1] == 1

    def test_minute_limit_reports_retry_after(self):
        limiter = self.limiter(per_minute=3, burst=10)
        for i in range(3):
            assert limiter._is_rate_limited("1.1.1.1", now=1000.0 + i * 5) == (False, 0)

        limited, retry_after = limiter._is_rate_limited("1.1.1.1", now=1020.0)
        assert limited is True
        assert retry_after == 41

    def test_window_slides(self):
        limiter = self.limiter(per_minute=1, burst=10)
        assert limiter._is_rate_limited("1.1.1.1", now=1000.0)[0] is False
        assert limiter._is_rate_limited("1.1.1.1", now=1030.0)[0] is True
        assert limiter._is_rate_limited("1.1.1.1", now=1061.0)[0] is False

    def test_clients_are_independent(self):
        limiter = self.limiter(per_minute=1, burst=10)
        assert limiter._is_rate_limited("1.1.1.1", now=1000.0)[0] is False
        assert limiter._is_rate_limited("2.2.2.2", now=1000.0)[0] is False


def test_webhook_and_health_are_exempt():
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, requests_per_minute=1, burst_limit=1)

    @app.get("/health")
    async def health():
        return {"ok": True}

    @app.post("/api/v1/checkout/webhook")
    async def webhook():
        return {"ok": True}

    @app.get("/api/v1/layouts")
    async def layouts():
        return []

    client = TestClient(app)
    for _ in range(3):
        assert client.get("/health").status_code == 200
        assert client.post("/api/v1/checkout/webhook").status_code == 200

    assert client.get("/api/v1/layouts").status_code == 200
    limited = client.get("/api/v1/layouts")
    assert limited.status_code == 429
    assert limited.json()["code"] == "http.429"
    assert "Retry-After" in limited.headers


class TestCorsOrigins:
    def test_production_uses_configured_origins(self, monkeypatch):
        monkeypatch.setattr(
            security,
            "get_settings",
            lambda: SimpleNamespace(
                cors_origins=["https://amorepresente.com.br"],
                web_app_url="https://app.amorepresente.com.br/",
                environment="production",
            ),
        )
        assert security.get_cors_origins() == [
            "https://amorepresente.com.br",
            "https://app.amorepresente.com.br",
        ]

    def test_development_adds_local_servers(self, monkeypatch):
        monkeypatch.setattr(
            security,
            "get_settings",
            lambda: SimpleNamespace(cors_origins=[], web_app_url=None, environment="development"),
        )
        origins = security.get_cors_origins()
        assert "http://localhost:5173" in origins
        assert "http://127.0.0.1:8081" in origins
