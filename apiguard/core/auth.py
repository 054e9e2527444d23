"""Bearer token authentication and permission checks as chain middleware.

Both run inside the route chain (not as FastAPI dependencies) so they execute
before the response cache: a cached body is never served to an
unauthenticated caller.

Design principles:
- Configuration-driven: the accepted token comes from ``APP_AUTH_TOKEN``.
- Testable: ``parse_bearer_token`` is a pure function.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Mapping

from apiguard.core.chain import Exchange, Middleware, NextFn
from apiguard.core.config import settings
from apiguard.core.i18n import translate

logger = logging.getLogger(__name__)

DEMO_USER: dict[str, object] = {"id": 1, "nombre": "Admin", "role": "admin"}

# user id -> granted permissions
USER_PERMISSIONS: dict[int, list[str]] = {1: ["leer", "escribir", "admin"]}


def parse_bearer_token(authorization: str | None) -> str | None:
    """Extract the token from an ``Authorization: Bearer <token>`` header.

    Examples:
        >>> parse_bearer_token("Bearer abc")
        'abc'
        >>> parse_bearer_token("Basic abc") is None
        True
        >>> parse_bearer_token(None) is None
        True
    """
    if not authorization or not authorization.startswith("Bearer "):
        return None
    return authorization[len("Bearer "):]


def _deny(exchange: Exchange, status: int, key: str) -> None:
    exchange.emit(status, {"error": translate(exchange.lang, key), "timestamp": exchange.timestamp})


async def require_auth(exchange: Exchange, call_next: NextFn) -> None:
    """Middleware: accept the configured bearer token and attach the user.

    Responds 401 ``auth_required`` when the header is missing or malformed and
    401 ``invalid_token`` when the token does not match.
    """

    headers: Mapping[str, str] = exchange.request_headers
    token = parse_bearer_token(headers.get("authorization"))

    if token is None:
        logger.warning("auth.missing_token", extra={"path": exchange.path})
        _deny(exchange, 401, "auth_required")
        return

    if token != settings.app.auth_token:
        logger.warning(
            "auth.invalid_token",
            extra={
                "path": exchange.path,
                "token_hash": hashlib.sha256(token.encode()).hexdigest()[:16],
            },
        )
        _deny(exchange, 401, "invalid_token")
        return

    exchange.state.usuario = dict(DEMO_USER)
    await call_next()


def require_permission(permission: str) -> Middleware:
    """Create a middleware requiring ``permission`` for the authenticated user."""

    async def permission_middleware(exchange: Exchange, call_next: NextFn) -> None:
        usuario = getattr(exchange.state, "usuario", None)
        if not usuario:
            _deny(exchange, 401, "unauthorized_user")
            return

        granted = USER_PERMISSIONS.get(usuario.get("id"), [])
        if permission not in granted:
            logger.warning(
                "auth.permission_denied",
                extra={"user_id": usuario.get("id"), "permission": permission},
            )
            _deny(exchange, 403, "insufficient_permissions")
            return

        await call_next()

    return permission_middleware
