from __future__ import annotations

from fastapi import Request

from apiguard.api.chain_route import ChainRouter
from apiguard.core.auth import require_auth, require_permission
from apiguard.core.i18n import translate
from apiguard.core.rate_limit import rate_limiter
from apiguard.core.response_cache import ResponseCache
from apiguard.schemas.usuario import UsuarioCreate
from apiguard.services.catalog_store import CatalogStore


def build_router(cache: ResponseCache, store: CatalogStore) -> ChainRouter:
    """Users routes: cached reads, cache-invalidating writes."""

    router = ChainRouter(prefix="/api", tags=["Usuarios"])

    @router.chained(
        "/usuarios",
        methods=["GET"],
        middlewares=[rate_limiter(), require_auth, cache.cache_response],
    )
    async def list_usuarios(request: Request) -> dict:
        usuarios = store.list_usuarios()
        return {"usuarios": usuarios, "total": len(usuarios), "timestamp": request.state.timestamp}

    @router.chained(
        "/usuarios",
        methods=["POST"],
        middlewares=[require_auth, require_permission("escribir"), cache.invalidate_cache],
        status_code=201,
    )
    async def create_usuario(payload: UsuarioCreate, request: Request) -> dict:
        usuario = store.add_usuario(payload, created_at=request.state.timestamp)
        return {
            "mensaje": translate(request.state.lang, "user_created"),
            "usuario": usuario,
            "timestamp": request.state.timestamp,
        }

    return router
