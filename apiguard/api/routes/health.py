from __future__ import annotations

from fastapi import APIRouter

from apiguard.core.response_cache import ResponseCache


def build_router(cache: ResponseCache) -> APIRouter:
    router = APIRouter(tags=["Health"])

    @router.get("/health")
    def health_check() -> dict:
        """Liveness probe used by load balancers and monitoring.

        Returns:
            dict: ``{"status": "ok"}``.
        """

        return {"status": "ok"}

    @router.get("/health/cache")
    def cache_stats() -> dict:
        """Expose response cache counters (never cached bodies)."""

        return {"status": "ok", "cache": cache.stats()}

    return router
