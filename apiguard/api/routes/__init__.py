from __future__ import annotations

from apiguard.api.routes import auth, health, productos, root, usuarios

__all__ = ["auth", "health", "productos", "root", "usuarios"]
