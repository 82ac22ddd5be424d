"""
Typed errors raised by services and rendered by `kernel.http.errors`.

Every error carries a stable dot-separated `code` the web app branches on and
a pt-BR `message` it can show as-is. `meta` is returned to the client;
`context` only reaches the logs (site ids, Stripe sessions, emails).
"""

from __future__ import annotations

import re
from typing import Any

_ERROR_CODE_RE = re.compile(r"^[a-z][a-z0-9_]*(\.[a-z][a-z0-9_]*)*$")


class PresenteError(Exception):
    status_code = 500
    default_code = "internal.error"
    default_message = "Erro interno"

    def __init__(
        self,
        *,
        code: str | None = None,
        message: str | None = None,
        status_code: int | None = None,
        meta: dict[str, Any] | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        code = code or self.default_code
        if not _ERROR_CODE_RE.fullmatch(code):
            raise ValueError(f"Invalid error code {code!r}: expected dot-separated lowercase tokens")
        self.code = code
        self.message = message or self.default_message
        super().__init__(self.message)
        if status_code is not None:
            self.status_code = int(status_code)
        self.meta = dict(meta or {})
        self.context = {key: value for key, value in (context or {}).items() if value is not None}

    def to_public_dict(self, *, request_id: str | None) -> dict[str, Any]:
        # `detail` keeps FastAPI's error shape.
        payload: dict[str, Any] = {"detail": self.message, "code": self.code}
        if request_id:
            payload["request_id"] = request_id
        if self.meta:
            payload["meta"] = self.meta
        return payload

    def log_fields(self) -> dict[str, Any]:
        return {"error_code": self.code, "status_code": self.status_code, **self.context}


class NotFoundError(PresenteError):
    status_code = 404
    default_code = "resource.not_found"
    default_message = "Não encontrado"


class SiteNotFoundError(NotFoundError):
    """Unknown, malformed, inactive or someone else's site. All answer the same 404."""

    default_code = "site.not_found"
    default_message = "Site não encontrado ou inativo"

    def __init__(self, site_id: str | None = None, *, message: str | None = None) -> None:
        super().__init__(message=message, context={"site_id": site_id})


class UnauthorizedError(PresenteError):
    status_code = 401
    default_code = "auth.unauthorized"
    default_message = "Não autenticado"


class ForbiddenError(PresenteError):
    status_code = 403
    default_code = "auth.forbidden"
    default_message = "Acesso negado"


class ConflictError(PresenteError):
    status_code = 409
    default_code = "request.conflict"
    default_message = "Registro já existe"


class ValidationError(PresenteError):
    status_code = 400
    default_code = "request.validation_error"
    default_message = "Dados inválidos"


class UpstreamError(PresenteError):
    """Supabase, Stripe or Resend failed or answered unexpectedly."""

    status_code = 502
    default_code = "upstream.error"
    default_message = "Falha ao comunicar com serviço externo"
