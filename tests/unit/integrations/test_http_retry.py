"""Unit tests for outbound HTTP retries."""

import httpx
import pytest

from amor_presente.integrations.http import request_with_retry

pytestmark = [pytest.mark.unit, pytest.mark.asyncio]


def client_for(responses):
    calls = []

    def handler(request):
        calls.append(request)
        outcome = responses.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    return httpx.AsyncClient(transport=httpx.MockTransport(handler)), calls


async def test_retries_retryable_status():
    client, calls = client_for([httpx.Response(503), httpx.Response(200, json={"ok": True})])
    async with client:
        response = await request_with_retry(client, "GET", "https://svc.test/x", base_backoff=0, max_backoff=0)

    assert response.status_code == 200
    assert len(calls) == 2


async def test_honors_retry_after():
    client, calls = client_for([httpx.Response(429, headers={"Retry-After": "0"}), httpx.Response(204)])
    async with client:
        response = await request_with_retry(client, "POST", "https://svc.test/x")

    assert response.status_code == 204
    assert len(calls) == 2


async def test_returns_last_response_when_exhausted():
    client, calls = client_for([httpx.Response(500), httpx.Response(502)])
    async with client:
        response = await request_with_retry(
            client, "GET", "https://svc.test/x", max_attempts=2, base_backoff=0, max_backoff=0
        )

    assert response.status_code == 502
    assert len(calls) == 2


async def test_client_errors_are_not_retried():
    client, calls = client_for([httpx.Response(400)])
    async with client:
        response = await request_with_retry(client, "GET", "https://svc.test/x")

    assert response.status_code == 400
    assert len(calls) == 1


async def test_network_errors_reraise_after_last_attempt():
    client, calls = client_for([httpx.ConnectError("down"), httpx.ConnectError("still down")])
    async with client:
        with pytest.raises(httpx.ConnectError):
            await request_with_retry(
                client, "GET", "https://svc.test/x", max_attempts=2, base_backoff=0, max_backoff=0
            )
    assert len(calls) == 2
