"""FastAPI binding for the middleware chain.

Routes registered through :class:`ChainRouter.chained` get an ``APIRoute``
subclass whose handler runs the route's chain around FastAPI's own endpoint
handler. The endpoint's JSON output is emitted into the exchange, so chain
middleware (the response cache in particular) see exactly what the endpoint
produced, and the exchange's headers end up on the final response. When the
endpoint raises, the headers are left on ``request.state.chain_headers`` for
the exception handlers.

Usage:
    router = ChainRouter()

    @router.chained("/items", methods=["GET"], middlewares=[rate_limiter(), cache.cache_response])
    async def list_items() -> dict:
        ...
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Sequence

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute, APIRouter

from apiguard.core.chain import Exchange, Middleware, run_chain
from apiguard.core.i18n import resolve_language

# Headers recomputed by the final JSONResponse
_SKIPPED_HEADERS = {"content-length", "content-type"}


def exchange_from_request(request: Request) -> Exchange:
    """Build a chain exchange from a Starlette request.

    Language and timestamp come from ``request.state`` when the request
    context middleware already resolved them.
    """

    lang = getattr(request.state, "lang", None) or resolve_language(
        request.headers.get("accept-language")
    )
    timestamp = getattr(request.state, "timestamp", None) or datetime.now(timezone.utc).isoformat()

    return Exchange(
        method=request.method,
        path=request.url.path,
        query_string=request.url.query,
        client=request.client.host if request.client else "unknown",
        request_headers=request.headers,
        lang=lang,
        timestamp=timestamp,
        state=request.state,
    )


def _decode_json_body(response: Response) -> Any:
    if not response.body:
        return None
    return json.loads(response.body)


def _is_json(response: Response) -> bool:
    media_type = response.headers.get("content-type", response.media_type or "")
    return hasattr(response, "body") and "json" in media_type


class ChainedRoute(APIRoute):
    """APIRoute running ``middlewares`` ahead of the endpoint."""

    chain_middlewares: Sequence[Middleware] = ()

    def get_route_handler(self) -> Callable:
        endpoint_handler = super().get_route_handler()
        middlewares = tuple(self.chain_middlewares)

        async def chained_route_handler(request: Request) -> Response:
            exchange = exchange_from_request(request)
            # Exception handlers merge these onto error responses
            request.state.chain_headers = exchange.headers
            produced: dict[str, Response] = {}

            async def run_endpoint(ex: Exchange) -> None:
                response = await endpoint_handler(request)
                produced["response"] = response
                if not _is_json(response):
                    return
                for name, value in response.headers.items():
                    if name.lower() not in _SKIPPED_HEADERS:
                        ex.headers.setdefault(name, value)
                ex.emit(response.status_code, _decode_json_body(response))

            await run_chain(middlewares, run_endpoint, exchange)

            endpoint_response = produced.get("response")
            if not exchange.sent:
                if endpoint_response is None:
                    raise RuntimeError(
                        f"{exchange.method} {exchange.path}: chain ended without a response"
                    )
                # Non-JSON endpoint output is passed through untouched
                for name, value in exchange.headers.items():
                    endpoint_response.headers[name] = value
                return endpoint_response

            return JSONResponse(
                content=exchange.body,
                status_code=exchange.status,
                headers=exchange.headers,
                background=endpoint_response.background if endpoint_response else None,
            )

        return chained_route_handler


def chained_route(middlewares: Iterable[Middleware]) -> type[ChainedRoute]:
    """Create a ChainedRoute subclass bound to ``middlewares``."""

    return type("ChainedRoute", (ChainedRoute,), {"chain_middlewares": tuple(middlewares)})


class ChainRouter(APIRouter):
    """APIRouter with a decorator for routes that carry a middleware chain."""

    def chained(
        self,
        path: str,
        *,
        methods: Sequence[str],
        middlewares: Iterable[Middleware] = (),
        **kwargs: Any,
    ) -> Callable[[Callable], Callable]:
        def decorator(func: Callable) -> Callable:
            self.add_api_route(
                path,
                func,
                methods=list(methods),
                route_class_override=chained_route(middlewares),
                **kwargs,
            )
            return func

        return decorator
