from __future__ import annotations

from fastapi import Request

from apiguard.api.chain_route import ChainRouter
from apiguard.core.auth import require_auth, require_permission
from apiguard.core.i18n import translate
from apiguard.core.rate_limit import rate_limiter
from apiguard.core.response_cache import ResponseCache
from apiguard.schemas.producto import ProductoCreate
from apiguard.services.catalog_store import CatalogStore


def build_router(cache: ResponseCache, store: CatalogStore) -> ChainRouter:
    """Products routes: cached reads (optionally filtered), cache-invalidating writes."""

    router = ChainRouter(prefix="/api", tags=["Productos"])

    @router.chained(
        "/productos",
        methods=["GET"],
        middlewares=[rate_limiter(), require_auth, cache.cache_response],
    )
    async def list_productos(request: Request, categoria: str | None = None) -> dict:
        productos = store.list_productos(categoria)
        return {
            "productos": productos,
            "total": len(productos),
            "filtros": dict(request.query_params),
            "timestamp": request.state.timestamp,
        }

    @router.chained(
        "/productos",
        methods=["POST"],
        middlewares=[require_auth, require_permission("escribir"), cache.invalidate_cache],
        status_code=201,
    )
    async def create_producto(payload: ProductoCreate, request: Request) -> dict:
        producto = store.add_producto(payload, created_at=request.state.timestamp)
        return {
            "mensaje": translate(request.state.lang, "product_created"),
            "producto": producto,
            "timestamp": request.state.timestamp,
        }

    return router
