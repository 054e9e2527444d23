"""Pydantic schemas for users."""

from __future__ import annotations

from pydantic import BaseModel, EmailStr, Field


class UsuarioCreate(BaseModel):
    """Payload for POST /api/usuarios."""

    nombre: str = Field(..., min_length=3, description="Display name (min. 3 characters).")
    email: EmailStr = Field(..., description="Contact e-mail address.")
    activo: bool | None = Field(None, description="Whether the user is active (defaults to true).")


class Usuario(BaseModel):
    """Stored user record."""

    id: int
    nombre: str
    email: str
    activo: bool = True
    fechaCreacion: str | None = None
