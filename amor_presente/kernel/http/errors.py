"""
JSON error responses.

Whatever raised it (a service error, an `HTTPException`, body validation or
a crash), an error leaves the API as `{"detail", "code", "request_id"}` so
the web app can branch on `code`.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException
from starlette.requests import Request
from starlette.responses import JSONResponse

from amor_presente.kernel.errors import PresenteError

logger = structlog.get_logger()


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def error_response(
    request: Request,
    status_code: int,
    *,
    detail: Any,
    code: str,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    payload: dict[str, Any] = {"detail": detail, "code": code}
    request_id = _request_id(request)
    if request_id:
        payload["request_id"] = request_id
    return JSONResponse(status_code=status_code, content=jsonable_encoder(payload), headers=headers)


async def handle_presente_error(request: Request, exc: PresenteError) -> JSONResponse:
    fields = {**exc.log_fields(), "path": request.url.path}
    if exc.status_code >= 500:
        logger.warning("Request failed", **fields)
    else:
        logger.debug("Request rejected", **fields)
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(exc.to_public_dict(request_id=_request_id(request))),
    )


async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:
    return error_response(
        request,
        exc.status_code,
        detail=exc.detail,
        code=f"http.{exc.status_code}",
        headers=dict(exc.headers or {}),
    )


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(request, 422, detail=exc.errors(), code="http.validation_error")


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception", path=request.url.path, request_id=_request_id(request))
    return error_response(request, 500, detail="Internal Server Error", code="internal.unhandled")


def register_exception_handlers(app: FastAPI) -> None:
    # Starlette's HTTPException also covers FastAPI's subclass and unknown routes.
    app.add_exception_handler(PresenteError, handle_presente_error)
    app.add_exception_handler(HTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
