"""Pydantic schemas for the login endpoint."""

from __future__ import annotations

from pydantic import BaseModel, EmailStr, Field


class LoginRequest(BaseModel):
    """Credentials posted to /auth/login."""

    email: EmailStr = Field(..., description="Account e-mail address.")
    password: str = Field(..., min_length=6, description="Account password (min. 6 characters).")


class LoginResponse(BaseModel):
    token: str = Field(..., description="Bearer token for protected routes.")
    usuario: dict = Field(..., description="Authenticated user profile.")
    timestamp: str | None = None
