"""Pydantic schemas for products."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ProductoCreate(BaseModel):
    """Payload for POST /api/productos."""

    nombre: str = Field(..., min_length=3, description="Product name (min. 3 characters).")
    precio: float = Field(..., gt=0, description="Unit price, strictly positive.")
    categoria: str = Field(..., min_length=1, description="Product category.")
    stock: int | None = Field(None, ge=0, description="Units in stock (defaults to 0).")


class Producto(BaseModel):
    """Stored product record."""

    id: int
    nombre: str
    precio: float
    categoria: str
    stock: int = 0
    fechaCreacion: str | None = None
