"""Application factory for the demo FastAPI app.

Centralizes app construction (CORS, gzip and request-context middleware,
handlers, routers). The response cache and the catalog store are created
here, or injected, so each app instance owns its own state and tests can
build isolated apps.
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from apiguard.api.routes import auth, health, productos, root, usuarios
from apiguard.core.config import settings
from apiguard.core.exception_handlers import setup_exception_handlers
from apiguard.core.logging import configure_logging
from apiguard.core.middleware import request_context_middleware
from apiguard.core.openapi import apply_openapi_customizations
from apiguard.core.response_cache import ResponseCache
from apiguard.services.catalog_store import CatalogStore


def create_app(
    *,
    cache: ResponseCache | None = None,
    store: CatalogStore | None = None,
    configure_logs: bool = True,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        cache: Response cache shared by the GET/POST routes; built from
            settings when omitted.
        store: Users/products store; seeded demo data when omitted.
        configure_logs: Whether to (re)configure the root logger.

    Returns:
        Configured FastAPI app.
    """
    if configure_logs:
        configure_logging(settings.log)

    cache = cache or ResponseCache(
        settings.app.cache_ttl_seconds,
        max_entries=settings.app.cache_max_entries,
    )
    store = store or CatalogStore()

    app = FastAPI(
        title="apiguard demo API",
        description=(
            "Demo API composing per-route middleware chains: fixed-window rate "
            "limiting, bearer auth, GET response caching with invalidation on "
            "writes, and localized (es/en) error messages."
        ),
        version="0.1.0",
    )
    app.state.response_cache = cache
    app.state.catalog_store = store

    # Last added runs first: CORS, then gzip, then request context
    app.middleware("http")(request_context_middleware)
    app.add_middleware(GZipMiddleware, minimum_size=settings.app.gzip_minimum_size)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.app.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[
            "X-RateLimit-Limit",
            "X-RateLimit-Remaining",
            "Retry-After",
            "X-Cache-Status",
            settings.log.request_id_header,
        ],
    )

    setup_exception_handlers(app)

    app.include_router(root.build_router())
    app.include_router(auth.build_router())
    app.include_router(usuarios.build_router(cache, store))
    app.include_router(productos.build_router(cache, store))
    app.include_router(health.build_router(cache))

    apply_openapi_customizations(app)

    return app
