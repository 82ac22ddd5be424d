"""
Supabase REST client (GoTrue auth + Storage).

Only the endpoints the service needs are wrapped. Client errors from
Supabase become `ValidationError`; anything else becomes `UpstreamError`.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from amor_presente.config import get_settings
from amor_presente.integrations.http import request_with_retry
from amor_presente.kernel.errors import UpstreamError, ValidationError

logger = structlog.get_logger()


def _base_url() -> str:
    return get_settings().supabase_url.rstrip("/")


def _headers(*, service_role: bool = False) -> dict[str, str]:
    settings = get_settings()
    key = settings.supabase_service_role_key if service_role else settings.supabase_anon_key
    return {
        "apikey": key,
        "Authorization": f"Bearer {key}",
    }


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        for key in ("msg", "error_description", "message", "error"):
            value = body.get(key)
            if value:
                return str(value)
    return f"HTTP {response.status_code}"


async def auth_request(
    path: str,
    payload: dict[str, Any],
    *,
    params: dict[str, str] | None = None,
) -> dict[str, Any]:
    """POST to `/auth/v1/{path}` with the anon key and return the JSON body."""
    settings = get_settings()
    url = f"{_base_url()}/auth/v1/{path.lstrip('/')}"
    try:
        async with httpx.AsyncClient(timeout=settings.supabase_timeout_seconds) as client:
            response = await request_with_retry(
                client,
                "POST",
                url,
                params=params,
                headers=_headers(),
                json=payload,
                max_attempts=3,
                service="supabase_auth",
            )
    except httpx.HTTPError as exc:
        logger.warning("Supabase auth request failed", path=path, error=str(exc))
        raise UpstreamError(message="Serviço de autenticação indisponível", code="supabase.unavailable") from exc

    if 400 <= response.status_code < 500:
        raise ValidationError(
            message=_error_message(response),
            code="supabase.auth_rejected",
            status_code=response.status_code if response.status_code in (400, 401, 422, 429) else 400,
        )
    if response.status_code >= 500:
        logger.warning(
            "Supabase auth error",
            path=path,
            status_code=response.status_code,
            body=response.text,
        )
        raise UpstreamError(message="Serviço de autenticação indisponível", code="supabase.auth_error")
    return response.json()


async def storage_upload(object_path: str, data: bytes, content_type: str) -> None:
    """Upload one object to the configured bucket with the service role key."""
    settings = get_settings()
    url = f"{_base_url()}/storage/v1/object/{settings.storage_bucket}/{object_path}"
    headers = {
        **_headers(service_role=True),
        "Content-Type": content_type,
        "x-upsert": "false",
    }
    try:
        async with httpx.AsyncClient(timeout=settings.supabase_timeout_seconds) as client:
            response = await request_with_retry(
                client,
                "POST",
                url,
                headers=headers,
                content=data,
                max_attempts=3,
                service="supabase_storage",
            )
    except httpx.HTTPError as exc:
        logger.warning("Supabase storage upload failed", path=object_path, error=str(exc))
        raise UpstreamError(message="Falha ao enviar imagem", code="storage.unavailable") from exc

    if response.status_code >= 400:
        logger.warning(
            "Supabase storage rejected upload",
            path=object_path,
            status_code=response.status_code,
            body=response.text,
        )
        raise UpstreamError(message="Falha ao enviar imagem", code="storage.upload_failed")


def public_object_url(object_path: str) -> str:
    settings = get_settings()
    return f"{_base_url()}/storage/v1/object/public/{settings.storage_bucket}/{object_path}"
