"""Global exception handlers for consistent, localized error responses.

Design:
- AppError subclasses -> mapped status (400, 401), message translated from code
- RequestValidationError -> 400 ``invalid_data`` (or ``json_parse_error``)
- 404 -> ``route_not_found`` with route suggestions
- Unexpected Exception -> generic 500 (safety net)

Every body carries ``error`` (localized message) and ``timestamp``. Headers
already set by a route's middleware chain (rate-limit headers in particular)
are carried onto the error response.
"""

import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from apiguard.core.config import settings
from apiguard.core.errors import AppError, AuthenticationAppError
from apiguard.core.i18n import resolve_language, translate
from apiguard.core.logging import get_request_id
from apiguard.core.middleware import SECURITY_HEADERS

logger = logging.getLogger(__name__)

ROUTE_SUGGESTIONS = [
    "GET /",
    "POST /auth/login",
    "GET /api/usuarios",
    "POST /api/usuarios",
    "GET /api/productos",
    "POST /api/productos",
    "GET /health",
]


def _request_lang(request: Request) -> str:
    return getattr(request.state, "lang", None) or resolve_language(
        request.headers.get("accept-language")
    )


def _request_timestamp(request: Request) -> str:
    return getattr(request.state, "timestamp", None) or datetime.now(timezone.utc).isoformat()


def _chain_headers(request: Request, extra: dict[str, str] | None = None) -> dict[str, str]:
    headers = dict(getattr(request.state, "chain_headers", None) or {})
    if extra:
        headers.update(extra)
    return headers


def _error_body(request: Request, key: str, **extra: Any) -> dict[str, Any]:
    body: dict[str, Any] = {
        "error": translate(_request_lang(request), key),
        "timestamp": _request_timestamp(request),
    }
    body.update(extra)
    return body


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors.

    - ValidationAppError -> 400 Bad Request
    - AuthenticationAppError -> 401 Unauthorized
    - any other AppError -> 400
    """
    status_code = 401 if isinstance(exc, AuthenticationAppError) else 400

    logger.warning(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "status_code": status_code,
            "has_details": bool(exc.details),
            "request_id": get_request_id(),
        },
    )

    body = _error_body(request, exc.code, code=exc.code)
    if exc.details:
        body["details"] = exc.details
    return JSONResponse(status_code=status_code, content=body, headers=_chain_headers(request))


def _is_json_decode_error(exc: RequestValidationError) -> bool:
    return any(err.get("type") == "json_invalid" for err in exc.errors())


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render body/query validation failures as 400 with per-field details."""

    if _is_json_decode_error(exc):
        logger.warning("request.json_parse_error", extra={"path": request.url.path})
        return JSONResponse(
            status_code=400,
            content=_error_body(request, "json_parse_error"),
            headers=_chain_headers(request),
        )

    details = [
        {
            "key": str(err["loc"][-1]) if err.get("loc") else None,
            "message": str(err.get("msg", "")).replace('"', "").replace("'", ""),
            "type": err.get("type"),
        }
        for err in exc.errors()
    ]
    logger.info(
        "request.validation_failed",
        extra={"path": request.url.path, "fields": [d["key"] for d in details]},
    )
    return JSONResponse(
        status_code=400,
        content=_error_body(request, "invalid_data", details=details),
        headers=_chain_headers(request),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Localize 404s; keep other HTTP errors in the same body shape."""

    if exc.status_code == 404:
        return JSONResponse(
            status_code=404,
            content=_error_body(request, "route_not_found", sugerencias=ROUTE_SUGGESTIONS),
            headers=_chain_headers(request),
        )

    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail, "timestamp": _request_timestamp(request)},
        headers=_chain_headers(request, getattr(exc, "headers", None)),
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors (safety net).

    The exception text is only exposed when APP_DEBUG is enabled. This
    response is produced outside the request context middleware, so the
    request id and security headers are set here.
    """
    request_id = getattr(request.state, "request_id", None) or get_request_id()
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
            "request_id": request_id,
        },
    )

    headers = dict(SECURITY_HEADERS)
    if request_id:
        headers[settings.log.request_id_header] = request_id

    lang = _request_lang(request)
    message = str(exc) if settings.app.debug else translate(lang, "internal_server_error")
    return JSONResponse(
        status_code=500,
        content=_error_body(request, "internal_server_error", mensaje=message),
        headers=_chain_headers(request, headers),
    )


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with the FastAPI app.

    Specific handlers are registered before the general fallback.
    """
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(RequestValidationError)(validation_exception_handler)
    app.exception_handler(StarletteHTTPException)(http_exception_handler)
    app.exception_handler(Exception)(general_exception_handler)
