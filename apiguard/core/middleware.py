"""HTTP middleware for request context and access logging.

The middleware:
- Accepts an incoming X-Request-ID header or generates a UUID
- Stores request_id in contextvars for log correlation
- Stamps ``request.state.timestamp`` (ISO-8601, UTC) and resolves
  ``request.state.lang`` from Accept-Language for localized messages
- Rejects bodies larger than APP_MAX_BODY_BYTES (by Content-Length) with 413
- Logs request start and completion (or failure) with status and duration
- Adds X-Request-ID, X-Request-Duration-ms and baseline security headers

Usage:
    app.middleware("http")(request_context_middleware)
"""

from __future__ import annotations

import logging
import time
import uuid
from datetime import datetime, timezone

from fastapi import Request, Response
from fastapi.responses import JSONResponse

from apiguard.core.config import settings
from apiguard.core.i18n import resolve_language, translate
from apiguard.core.logging import clear_request_id, set_request_id

logger = logging.getLogger("apiguard.access")


SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "Referrer-Policy": "no-referrer",
    "X-XSS-Protection": "0",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
}


def _declared_body_size(request: Request) -> int | None:
    raw = request.headers.get("content-length")
    if raw is None or not raw.isdigit():
        return None
    return int(raw)


async def request_context_middleware(request: Request, call_next) -> Response:
    """Attach request id, timestamp and language; log the exchange.

    Args:
        request: The incoming HTTP request object.
        call_next: The next middleware/route handler in the stack.

    Returns:
        Response: The downstream response with correlation, duration and
        security headers.
    """

    header_name = settings.log.request_id_header
    request_id = request.headers.get(header_name) or str(uuid.uuid4())
    set_request_id(request_id)

    request.state.request_id = request_id
    request.state.timestamp = datetime.now(timezone.utc).isoformat()
    request.state.lang = resolve_language(request.headers.get("accept-language"))
    client = request.client.host if request.client else "unknown"

    logger.info(
        "request.started",
        extra={
            "method": request.method,
            "path": request.url.path,
            "query": request.url.query,
            "client": client,
            "lang": request.state.lang,
        },
    )

    start = time.perf_counter()
    try:
        body_size = _declared_body_size(request)
        if body_size is not None and body_size > settings.app.max_body_bytes:
            response = JSONResponse(
                status_code=413,
                content={
                    "error": translate(request.state.lang, "payload_too_large"),
                    "timestamp": request.state.timestamp,
                },
            )
        else:
            response = await call_next(request)
    except Exception as exc:
        logger.error(
            "request.failed",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status": 500,
                "error_type": type(exc).__name__,
                "duration_ms": round((time.perf_counter() - start) * 1000, 2),
            },
        )
        raise
    else:
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "request.finished",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )
    finally:
        clear_request_id()

    response.headers[header_name] = request_id
    response.headers.setdefault("X-Request-Duration-ms", f"{duration_ms:.2f}")
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    return response
