"""Response store interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any


@dataclass
class CacheEntry:
    """A cached response body and the UNIX time it stops being servable."""

    response_body: Any
    expires_at: float


class AbstractResponseStore(ABC):
    """Interface for response stores keyed by request target."""

    @abstractmethod
    def get(self, key: str, now: float | None = None) -> CacheEntry | None:
        """Return the entry for ``key`` if ``now < expires_at``, else None."""
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, body: Any, now: float | None = None) -> CacheEntry:
        """Store ``body`` under ``key``, overwriting any previous entry."""
        raise NotImplementedError

    @abstractmethod
    def clear(self) -> int:
        """Remove every entry; return how many were dropped."""
        raise NotImplementedError

    @abstractmethod
    def stats(self) -> dict[str, int | float | None]:
        raise NotImplementedError
