"""OpenAPI metadata and customization utilities.

Adds to the generated schema:
- a Bearer security scheme (``Authorization: Bearer <token>``) required on
  the ``/api`` routes only
- tags metadata for the demo routers
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

TAGS_METADATA = [
    {"name": "Info", "description": "API description (rate limited 10 req / 15 s)."},
    {"name": "Auth", "description": "Login (rate limited 3 req / 60 s)."},
    {"name": "Usuarios", "description": "Users: cached reads, writes invalidate the cache."},
    {"name": "Productos", "description": "Products: cached reads, writes invalidate the cache."},
    {"name": "Health", "description": "Liveness and cache statistics."},
]


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to add tags and bearer security."""

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        if app.openapi_schema:
            return app.openapi_schema

        schema = original_openapi()

        security_schemes = schema.setdefault("components", {}).setdefault("securitySchemes", {})
        security_schemes.setdefault(
            "BearerAuth",
            {
                "type": "http",
                "scheme": "bearer",
                "description": "Token returned by POST /auth/login.",
            },
        )

        tags = schema.setdefault("tags", [])
        existing = {t.get("name") for t in tags}
        tags.extend(t for t in TAGS_METADATA if t["name"] not in existing)

        for path, methods in schema.get("paths", {}).items():
            if not path.startswith("/api/"):
                continue
            for operation in methods.values():
                if isinstance(operation, dict):
                    operation["security"] = [{"BearerAuth": []}]

        app.openapi_schema = schema
        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
