from __future__ import annotations

import logging

from fastapi import Request

from apiguard.adapters.rate_limit.base import RateLimitConfig
from apiguard.api.chain_route import ChainRouter
from apiguard.core.auth import DEMO_USER
from apiguard.core.config import settings
from apiguard.core.errors import AuthenticationAppError
from apiguard.core.rate_limit import rate_limiter
from apiguard.schemas.auth import LoginRequest, LoginResponse

logger = logging.getLogger(__name__)

# Strict quota against credential stuffing
LOGIN_RATE_LIMIT = RateLimitConfig(max_requests=3, window_seconds=60)

DEMO_EMAIL = "admin@example.com"
DEMO_PASSWORD = "admin123"


def build_router() -> ChainRouter:
    router = ChainRouter(tags=["Auth"])

    @router.chained(
        "/auth/login",
        methods=["POST"],
        middlewares=[rate_limiter(LOGIN_RATE_LIMIT)],
        response_model=LoginResponse,
    )
    async def login(payload: LoginRequest, request: Request) -> LoginResponse:
        """Exchange the demo credentials for a bearer token.

        Raises:
            AuthenticationAppError: 401 when the credentials do not match.
        """
        if payload.email != DEMO_EMAIL or payload.password != DEMO_PASSWORD:
            logger.warning("auth.login_failed")
            raise AuthenticationAppError(
                code="invalid_credentials",
                message="Invalid credentials",
            )

        logger.info("auth.login_succeeded", extra={"user_id": DEMO_USER["id"]})
        return LoginResponse(
            token=settings.app.auth_token,
            usuario=dict(DEMO_USER),
            timestamp=request.state.timestamp,
        )

    return router
