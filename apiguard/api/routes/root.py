from __future__ import annotations

from fastapi import Request

from apiguard.adapters.rate_limit.base import RateLimitConfig
from apiguard.api.chain_route import ChainRouter
from apiguard.core.rate_limit import rate_limiter

# Public landing route allows short bursts
ROOT_RATE_LIMIT = RateLimitConfig(max_requests=10, window_seconds=15)


def build_router() -> ChainRouter:
    router = ChainRouter(tags=["Info"])

    @router.chained("/", methods=["GET"], middlewares=[rate_limiter(ROOT_RATE_LIMIT)])
    async def api_info(request: Request) -> dict:
        """Describe the API and its middleware stack."""

        return {
            "nombre": "apiguard demo API",
            "version": "0.1.0",
            "middleware": ["request-context", "rate-limit", "auth", "cache", "i18n"],
            "endpoints": {
                "login": "POST /auth/login",
                "usuarios": ["GET /api/usuarios", "POST /api/usuarios"],
                "productos": ["GET /api/productos", "POST /api/productos"],
            },
            "timestamp": request.state.timestamp,
        }

    return router
