"""Response cache storage adapters.

The cache middleware depends on AbstractResponseStore only, so the in-memory
store can be replaced by a shared backend with the same semantics.
"""

from apiguard.adapters.cache.base import AbstractResponseStore, CacheEntry
from apiguard.adapters.cache.in_memory import InMemoryTTLStore

__all__ = ["AbstractResponseStore", "CacheEntry", "InMemoryTTLStore"]
