"""Tests for the in-memory users/products store."""

from apiguard.schemas.producto import ProductoCreate
from apiguard.schemas.usuario import UsuarioCreate
from apiguard.services.catalog_store import CatalogStore


def test_seed_records_have_no_creation_date() -> None:
    store = CatalogStore()

    usuarios = store.list_usuarios()
    assert [u["id"] for u in usuarios] == [1, 2, 3]
    assert "fechaCreacion" not in usuarios[0]


def test_add_producto_fills_defaults() -> None:
    store = CatalogStore()

    producto = store.add_producto(
        ProductoCreate(nombre="Silla", precio=49.9, categoria="muebles"),
        created_at="2024-01-01T00:00:00+00:00",
    )

    assert producto == {
        "id": 4,
        "nombre": "Silla",
        "precio": 49.9,
        "categoria": "muebles",
        "stock": 0,
        "fechaCreacion": "2024-01-01T00:00:00+00:00",
    }
    assert [p["id"] for p in store.list_productos("MUEBLES")] == [3, 4]


def test_add_usuario_defaults_to_active() -> None:
    store = CatalogStore(usuarios=[])

    usuario = store.add_usuario(UsuarioCreate(nombre="Ana Ruiz", email="ana@example.com"), None)

    assert usuario == {"id": 1, "nombre": "Ana Ruiz", "email": "ana@example.com", "activo": True}


def test_returned_records_are_copies() -> None:
    store = CatalogStore()

    store.list_productos()[0]["nombre"] = "changed"

    assert store.list_productos()[0]["nombre"] == "Laptop"
