"""
Fail-open cache service for proration lookups.

Every backend error is logged and counted, then treated as a miss so the
price rendering path never sees it.
"""

from collections.abc import Callable
from dataclasses import asdict, dataclass, fields
from typing import Any, TypeVar

import structlog

from prorated_renewals.cache.backends import create_backend
from prorated_renewals.cache.interfaces import CacheBackend
from prorated_renewals.cache.keys import CacheKey
from prorated_renewals.settings import Settings

logger = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass
class CacheMetrics:
    """
    Counters for the proration cache.

    ``errors`` counts backend failures of any operation; ``fail_open_reads``
    are the failed reads among them, each answered by recomputing.
    ``recomputes`` counts values computed after a miss and ``fallbacks``
    counts results replaced by a safe default (one-day cycle, zero amount).
    """

    hits: int = 0
    misses: int = 0
    sets: int = 0
    deletes: int = 0
    errors: int = 0
    fail_open_reads: int = 0
    recomputes: int = 0
    fallbacks: int = 0

    @property
    def hit_rate(self) -> float:
        """Percentage of lookups answered from the cache."""
        lookups = self.hits + self.misses + self.fail_open_reads
        return self.hits / lookups * 100 if lookups else 0.0

    def get_stats(self) -> dict[str, Any]:
        return {**asdict(self), "hit_rate": self.hit_rate}

    def reset(self) -> None:
        for counter in fields(self):
            setattr(self, counter.name, 0)


class ProrationCache:
    """
    Read-through cache around a :class:`CacheBackend`.

    Features:
    - get/set/delete that never raise
    - ``get_or_compute`` read-through for flag lookups
    - pattern invalidation
    - metrics collection
    """

    def __init__(
        self,
        backend: CacheBackend,
        keys: CacheKey | None = None,
        flag_ttl: int = 3600,
        cycle_ttl: int = 3600,
        amount_ttl: int = 1800,
    ) -> None:
        self.backend = backend
        self.keys = keys or CacheKey()
        self.flag_ttl = flag_ttl
        self.cycle_ttl = cycle_ttl
        self.amount_ttl = amount_ttl
        self.metrics = CacheMetrics()

    @classmethod
    def from_settings(cls, config: Settings, backend: CacheBackend | None = None) -> "ProrationCache":
        """Build the cache selected by the settings."""
        return cls(
            backend if backend is not None else create_backend(config),
            keys=CacheKey(config.cache.key_prefix),
            flag_ttl=config.cache.flag_ttl,
            cycle_ttl=config.cache.cycle_ttl,
            amount_ttl=config.cache.amount_ttl,
        )

    def get(self, key: str) -> Any | None:
        """Get value from cache; errors read as a miss."""
        try:
            value = self.backend.get(key)
        except Exception as e:
            self.metrics.errors += 1
            self.metrics.fail_open_reads += 1
            logger.warning("Cache get error", key=key, error=str(e))
            return None

        if value is None:
            self.metrics.misses += 1
            logger.debug("Cache miss", key=key)
            return None

        self.metrics.hits += 1
        logger.debug("Cache hit", key=key)
        return value

    def set(self, key: str, value: Any, ttl: int) -> bool:
        """Set value in cache; returns False when the backend failed."""
        try:
            stored = self.backend.set(key, value, ttl)
        except Exception as e:
            self.metrics.errors += 1
            logger.warning("Cache set error", key=key, error=str(e))
            return False

        self.metrics.sets += 1
        logger.debug("Cache set", key=key, ttl=ttl)
        return stored

    def delete(self, key: str) -> bool:
        """Delete a key; returns False when missing or the backend failed."""
        try:
            deleted = self.backend.delete(key)
        except Exception as e:
            self.metrics.errors += 1
            logger.error("Cache delete error", key=key, error=str(e))
            return False

        if deleted:
            self.metrics.deletes += 1
        return deleted

    def invalidate_pattern(self, pattern: str) -> int:
        """Invalidate all cache keys matching pattern."""
        try:
            count = self.backend.delete_pattern(pattern)
        except Exception as e:
            self.metrics.errors += 1
            logger.error("Cache invalidation error", pattern=pattern, error=str(e))
            return 0

        self.metrics.deletes += count
        logger.info("Cache invalidation", pattern=pattern, count=count)
        return count

    def get_or_compute(self, key: str, compute: Callable[[], T], ttl: int) -> T:
        """Return the cached value for ``key``, computing and storing it on a miss."""
        cached = self.get(key)
        if cached is not None:
            return cached  # type: ignore[no-any-return]

        value = compute()
        self.metrics.recomputes += 1
        if value is not None:
            self.set(key, value, ttl)
        return value

    def get_metrics(self) -> dict[str, Any]:
        """Get cache metrics and statistics."""
        return self.metrics.get_stats()
