"""Localized user-facing messages.

Messages use ``%s`` placeholders that are filled positionally by
:func:`translate`.
"""

from __future__ import annotations

from apiguard.core.config import settings

MESSAGES: dict[str, dict[str, str]] = {
    "es": {
        "auth_required": "Token de autenticación requerido",
        "invalid_token": "Token inválido",
        "unauthorized_user": "Usuario no autenticado",
        "insufficient_permissions": "Permisos insuficientes",
        "missing_fields": "Campos requeridos faltantes",
        "invalid_data": "Datos de petición inválidos",
        "json_parse_error": "JSON inválido en el body de la petición",
        "internal_server_error": "Error interno del servidor",
        "rate_limit_exceeded": "Límite de peticiones excedido, intente en %s segundos",
        "route_not_found": "Ruta no encontrada",
        "invalid_credentials": "Credenciales inválidas",
        "user_created": "Usuario creado exitosamente",
        "product_created": "Producto creado exitosamente",
        "payload_too_large": "El body de la petición excede el tamaño máximo permitido",
    },
    "en": {
        "auth_required": "Authentication token required",
        "invalid_token": "Invalid token",
        "unauthorized_user": "User not authenticated",
        "insufficient_permissions": "Insufficient permissions",
        "missing_fields": "Required fields are missing",
        "invalid_data": "Invalid request data",
        "json_parse_error": "Invalid JSON in the request body",
        "internal_server_error": "Internal server error",
        "rate_limit_exceeded": "Rate limit exceeded, try again in %s seconds",
        "route_not_found": "Route not found",
        "invalid_credentials": "Invalid credentials",
        "user_created": "User successfully created",
        "product_created": "Product successfully created",
        "payload_too_large": "Request body exceeds the maximum allowed size",
    },
}

FALLBACK_LANGUAGE = "es"


def resolve_language(accept_language: str | None) -> str:
    """Pick the response language from an Accept-Language header.

    Only the first tag is considered (``"en-US,es;q=0.8"`` -> ``"en-us"``,
    then its primary subtag ``"en"``). Unsupported or missing values fall
    back to the configured default language.

    Args:
        accept_language: Raw header value, possibly None.

    Returns:
        A language code present in MESSAGES.
    """

    default = settings.app.default_language
    if default not in MESSAGES:
        default = FALLBACK_LANGUAGE

    if not accept_language:
        return default

    tag = accept_language.split(",")[0].split(";")[0].strip().lower()
    if tag in MESSAGES:
        return tag

    primary = tag.split("-")[0]
    return primary if primary in MESSAGES else default


def translate(lang: str, key: str, *replacements: object) -> str:
    """Return the message for ``key`` in ``lang`` with placeholders filled.

    Unknown languages fall back to Spanish; unknown keys return the key itself.
    """

    catalogue = MESSAGES.get(lang, MESSAGES[FALLBACK_LANGUAGE])
    message = catalogue.get(key) or MESSAGES[FALLBACK_LANGUAGE].get(key) or key
    for replacement in replacements:
        message = message.replace("%s", str(replacement), 1)
    return message
