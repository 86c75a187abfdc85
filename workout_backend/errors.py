# -*- coding: utf-8 -*-
"""Application error types and the central error formatter.

Every handler error ends up in one of the exception handlers installed by
``install_error_handlers`` and leaves the service with the same payload shape::

    {"error": str, "code": str, "requestId": str, "details": ..., "timestamp": str}
"""

from __future__ import annotations

import logging
import sqlite3
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import settings

logger = logging.getLogger(__name__)

_DEFAULT_MESSAGES: Dict[int, str] = {
    400: "Invalid request",
    401: "Authentication failed",
    403: "Access denied",
    404: "Not found",
    408: "Request timed out. Please try again.",
    409: "Conflict",
    503: "Service temporarily unavailable. Please try again.",
    500: "Internal server error",
}


class AppError(Exception):
    """Base class for errors with a stable HTTP status and machine-readable code."""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str | None = None,
        *,
        code: str | None = None,
        status_code: int | None = None,
        details: Any = None,
    ) -> None:
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code
        self.message = message or _DEFAULT_MESSAGES.get(self.status_code, _DEFAULT_MESSAGES[500])
        self.details = details
        super().__init__(self.message)

    @property
    def is_server_error(self) -> bool:
        return self.status_code >= 500


class ValidationFailed(AppError):
    status_code = 400
    code = "VALIDATION_ERROR"


class AuthError(AppError):
    status_code = 401
    code = "AUTH_ERROR"


class ForbiddenError(AppError):
    status_code = 403
    code = "FORBIDDEN"


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"


class ConflictError(AppError):
    status_code = 409
    code = "CONFLICT"


class PersistenceError(AppError):
    status_code = 503
    code = "PERSISTENCE_ERROR"


class UpstreamError(AppError):
    """The generation model failed, timed out, or returned unusable output.

    ``detail`` holds diagnostics (raw model text, parse exception, upstream
    status) for server logs only; it is never part of the response.
    """

    status_code = 503
    code = "AI_SERVICE_ERROR"

    def __init__(
        self,
        message: str | None = None,
        *,
        code: str | None = None,
        status_code: int | None = None,
        detail: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, code=code, status_code=status_code)
        self.detail: Dict[str, Any] = detail or {}


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _request_id(request: Request) -> str:
    return str(getattr(request.state, "request_id", "") or "")


def _user_id(request: Request) -> str:
    user = getattr(request.state, "user", None) or {}
    return str(user.get("id") or "anonymous")


def error_payload(
    *,
    message: str,
    code: str,
    request_id: str | None = None,
    details: Any = None,
    timestamp: str | None = None,
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "error": message,
        "code": code,
        "timestamp": timestamp or _utc_now(),
    }
    if request_id:
        payload["requestId"] = request_id
    if details is not None:
        payload["details"] = details
    return payload


def _respond(request: Request, status_code: int, payload: Dict[str, Any]) -> JSONResponse:
    headers = {}
    if payload.get("requestId"):
        headers["X-Request-ID"] = payload["requestId"]
    return JSONResponse(status_code=status_code, content=payload, headers=headers)


async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    request_id = _request_id(request)
    log_extra = {
        "request_id": request_id,
        "user_id": _user_id(request),
        "method": request.method,
        "path": request.url.path,
        "code": exc.code,
        "status": exc.status_code,
    }
    if isinstance(exc, UpstreamError):
        log_extra["upstream"] = exc.detail

    if exc.is_server_error:
        logger.error("Application error [%s] %s: %s", request_id, exc.code, exc.message, extra=log_extra)
        # Server-class errors keep internal detail out of the response; production
        # also replaces upstream messages with the generic one for the status.
        if isinstance(exc, UpstreamError) and not settings.is_production:
            message = exc.message
        else:
            message = _DEFAULT_MESSAGES.get(exc.status_code, _DEFAULT_MESSAGES[500])
        details = None
    else:
        logger.warning("Application error [%s] %s: %s", request_id, exc.code, exc.message, extra=log_extra)
        message = exc.message
        details = exc.details

    return _respond(
        request,
        exc.status_code,
        error_payload(message=message, code=exc.code, request_id=request_id, details=details),
    )


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    request_id = _request_id(request)
    details = [
        {
            "field": ".".join(str(p) for p in err.get("loc", ()) if p != "body"),
            "message": err.get("msg", ""),
            "code": err.get("type", ""),
        }
        for err in exc.errors()
    ]
    logger.warning(
        "Validation error [%s] %s %s: %s",
        request_id,
        request.method,
        request.url.path,
        details,
    )
    return _respond(
        request,
        400,
        error_payload(
            message="Invalid request parameters",
            code="VALIDATION_ERROR",
            request_id=request_id,
            details=details,
        ),
    )


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    request_id = _request_id(request)
    status_code = exc.status_code
    if status_code >= 500:
        logger.error("HTTP error [%s] %s %s: %s", request_id, request.method, request.url.path, exc.detail)
        message = _DEFAULT_MESSAGES.get(status_code, _DEFAULT_MESSAGES[500])
    else:
        logger.warning("HTTP error [%s] %s %s: %s", request_id, request.method, request.url.path, exc.detail)
        message = exc.detail if isinstance(exc.detail, str) else _DEFAULT_MESSAGES.get(status_code, "Request failed")
    return _respond(
        request,
        status_code,
        error_payload(message=message, code=f"HTTP_{status_code}", request_id=request_id),
    )


async def handle_persistence_error(request: Request, exc: sqlite3.Error) -> JSONResponse:
    logger.error("Persistence error [%s]: %s", _request_id(request), exc, exc_info=exc)
    return await handle_app_error(request, PersistenceError())


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    request_id = _request_id(request)
    logger.error(
        "Unhandled error [%s] %s %s",
        request_id,
        request.method,
        request.url.path,
        exc_info=exc,
    )
    details = None
    if settings.is_development:
        details = {"stack": "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))}
    return _respond(
        request,
        500,
        error_payload(
            message=_DEFAULT_MESSAGES[500],
            code="INTERNAL_ERROR",
            request_id=request_id,
            details=details,
        ),
    )


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, handle_app_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(sqlite3.Error, handle_persistence_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
