"""In-memory users/products store backing the demo routes.

State lives for the process lifetime only. A lock keeps id assignment
consistent when sync endpoints run in the threadpool. Records are kept as
``Usuario``/``Producto`` models and handed out as plain dicts, ready for
JSON responses.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

from apiguard.schemas.producto import Producto, ProductoCreate
from apiguard.schemas.usuario import Usuario, UsuarioCreate

logger = logging.getLogger(__name__)

SEED_USUARIOS: list[dict[str, Any]] = [
    {"id": 1, "nombre": "Juan Pérez", "email": "juan@example.com", "activo": True},
    {"id": 2, "nombre": "María García", "email": "maria@example.com", "activo": True},
    {"id": 3, "nombre": "Carlos López", "email": "carlos@example.com", "activo": False},
]

SEED_PRODUCTOS: list[dict[str, Any]] = [
    {"id": 1, "nombre": "Laptop", "precio": 999.99, "categoria": "electronica", "stock": 10},
    {"id": 2, "nombre": "Mouse", "precio": 25.5, "categoria": "electronica", "stock": 50},
    {"id": 3, "nombre": "Escritorio", "precio": 150.0, "categoria": "muebles", "stock": 5},
]


def _dump(record: Usuario | Producto) -> dict[str, Any]:
    # Seed records have no creation date; leave the key out instead of null
    return record.model_dump(exclude_none=True)


class CatalogStore:
    """Users and products kept in plain lists."""

    def __init__(
        self,
        usuarios: list[dict[str, Any]] | None = None,
        productos: list[dict[str, Any]] | None = None,
    ) -> None:
        self._usuarios = [
            Usuario.model_validate(u) for u in (SEED_USUARIOS if usuarios is None else usuarios)
        ]
        self._productos = [
            Producto.model_validate(p) for p in (SEED_PRODUCTOS if productos is None else productos)
        ]
        self._lock = threading.Lock()

    def list_usuarios(self) -> list[dict[str, Any]]:
        with self._lock:
            return [_dump(u) for u in self._usuarios]

    def add_usuario(self, data: UsuarioCreate, created_at: str | None) -> dict[str, Any]:
        with self._lock:
            usuario = Usuario(
                id=len(self._usuarios) + 1,
                nombre=data.nombre,
                email=str(data.email),
                activo=True if data.activo is None else data.activo,
                fechaCreacion=created_at,
            )
            self._usuarios.append(usuario)

        logger.info("catalog.usuario_created", extra={"usuario_id": usuario.id})
        return _dump(usuario)

    def list_productos(self, categoria: str | None = None) -> list[dict[str, Any]]:
        with self._lock:
            productos = list(self._productos)
        if categoria:
            productos = [p for p in productos if p.categoria.lower() == categoria.lower()]
        return [_dump(p) for p in productos]

    def add_producto(self, data: ProductoCreate, created_at: str | None) -> dict[str, Any]:
        with self._lock:
            producto = Producto(
                id=len(self._productos) + 1,
                nombre=data.nombre,
                precio=data.precio,
                categoria=data.categoria,
                stock=data.stock or 0,
                fechaCreacion=created_at,
            )
            self._productos.append(producto)

        logger.info("catalog.producto_created", extra={"producto_id": producto.id})
        return _dump(producto)
