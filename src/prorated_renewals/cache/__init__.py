"""
Cache Module.

Memory, redis and null backends behind a fail-open service, plus
event-driven invalidation.
"""

from prorated_renewals.cache.backends import (
    MemoryCacheBackend,
    NullCacheBackend,
    RedisCacheBackend,
    create_backend,
)
from prorated_renewals.cache.interfaces import CacheBackend
from prorated_renewals.cache.keys import CacheKey
from prorated_renewals.cache.manager import CacheEvent, CacheInvalidationManager
from prorated_renewals.cache.service import CacheMetrics, ProrationCache

__all__ = [
    "CacheBackend",
    "MemoryCacheBackend",
    "RedisCacheBackend",
    "NullCacheBackend",
    "create_backend",
    "CacheKey",
    "CacheMetrics",
    "ProrationCache",
    "CacheEvent",
    "CacheInvalidationManager",
]
