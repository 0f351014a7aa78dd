"""
Cache backends using cachetools and redis-py directly.
"""

import fnmatch
import pickle
import time
from collections.abc import Callable, MutableMapping
from typing import Any

import redis
import structlog
from cachetools import TTLCache

from prorated_renewals.cache.interfaces import CacheBackend
from prorated_renewals.exceptions import CacheConnectionError, CacheError
from prorated_renewals.settings import Settings

logger = structlog.get_logger(__name__)


class MemoryCacheBackend(CacheBackend):
    """
    In-process cache with per-entry TTLs.

    cachetools' TTLCache has a single TTL per cache, so each entry also
    records its own deadline and expired entries read as misses.
    """

    def __init__(
        self,
        max_size: int = 1000,
        max_ttl: int = 3600,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._timer = timer
        self._cache: MutableMapping[str, tuple[float, Any]] = TTLCache(
            maxsize=max_size, ttl=max_ttl, timer=timer
        )

    def get(self, key: str) -> Any | None:
        entry = self._cache.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if expires_at <= self._timer():
            self._cache.pop(key, None)
            return None
        return value

    def set(self, key: str, value: Any, ttl: int) -> bool:
        self._cache[key] = (self._timer() + ttl, value)
        return True

    def delete(self, key: str) -> bool:
        return self._cache.pop(key, None) is not None

    def delete_pattern(self, pattern: str) -> int:
        keys = [k for k in list(self._cache.keys()) if fnmatch.fnmatchcase(k, pattern)]
        for k in keys:
            self._cache.pop(k, None)
        return len(keys)

    def clear(self) -> bool:
        self._cache.clear()
        return True

    def __len__(self) -> int:
        return len(self._cache)


class RedisCacheBackend(CacheBackend):
    """
    Redis cache storing pickled values with SETEX.

    ``clear`` only removes keys under ``prefix``; the database may be shared.
    """

    def __init__(self, client: redis.Redis, prefix: str = "prorate") -> None:
        self._client = client
        self.prefix = prefix

    @classmethod
    def from_url(cls, url: str, prefix: str = "prorate") -> "RedisCacheBackend":
        return cls(redis.Redis.from_url(url, decode_responses=False), prefix=prefix)

    def get(self, key: str) -> Any | None:
        try:
            value = self._client.get(key)
        except redis.ConnectionError as e:
            raise CacheConnectionError(str(e), key=key) from e
        except redis.RedisError as e:
            raise CacheError(str(e), key=key) from e
        if value is None:
            return None
        try:
            return pickle.loads(value)  # nosec B301 - values are written by this backend only
        except (pickle.UnpicklingError, EOFError, TypeError) as e:
            raise CacheError(f"Corrupt cache entry: {e}", key=key) from e

    def set(self, key: str, value: Any, ttl: int) -> bool:
        try:
            return bool(self._client.setex(key, ttl, pickle.dumps(value)))
        except redis.ConnectionError as e:
            raise CacheConnectionError(str(e), key=key) from e
        except redis.RedisError as e:
            raise CacheError(str(e), key=key) from e

    def delete(self, key: str) -> bool:
        try:
            return bool(self._client.delete(key))
        except redis.ConnectionError as e:
            raise CacheConnectionError(str(e), key=key) from e
        except redis.RedisError as e:
            raise CacheError(str(e), key=key) from e

    def delete_pattern(self, pattern: str) -> int:
        try:
            keys = list(self._client.scan_iter(match=pattern))
            if not keys:
                return 0
            return int(self._client.delete(*keys))
        except redis.ConnectionError as e:
            raise CacheConnectionError(str(e), key=pattern) from e
        except redis.RedisError as e:
            raise CacheError(str(e), key=pattern) from e

    def clear(self) -> bool:
        self.delete_pattern(f"{self.prefix}:*")
        return True


class NullCacheBackend(CacheBackend):
    """Backend that never stores anything; every lookup is a miss."""

    def get(self, key: str) -> Any | None:
        return None

    def set(self, key: str, value: Any, ttl: int) -> bool:
        return False

    def delete(self, key: str) -> bool:
        return False

    def delete_pattern(self, pattern: str) -> int:
        return 0

    def clear(self) -> bool:
        return True


def create_backend(config: Settings) -> CacheBackend:
    """Build the backend selected by ``cache.backend``."""
    cache_config = config.cache
    if cache_config.backend == "redis":
        logger.info("Using redis cache backend", url=cache_config.redis_url)
        return RedisCacheBackend.from_url(cache_config.redis_url, prefix=cache_config.key_prefix)
    if cache_config.backend == "null":
        return NullCacheBackend()
    max_ttl = max(cache_config.flag_ttl, cache_config.cycle_ttl, cache_config.amount_ttl)
    return MemoryCacheBackend(max_size=cache_config.max_size, max_ttl=max_ttl)
