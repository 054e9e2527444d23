"""Application-level exception types.

Error codes double as i18n message keys, so handlers can render a localized
message for any AppError without a separate lookup table.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context returned to clients."""

    hint: str
    field: str
    context: dict[str, Any]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code (also an i18n key).
        message: Fallback human-readable message.
        details: Optional structured details.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when request data fails domain validation."""


class AuthenticationAppError(AppError):
    """Raised when credentials are missing or wrong."""
