"""Cache backend interfaces."""

from abc import ABC, abstractmethod
from typing import Any


class CacheBackend(ABC):
    """Abstract base class for cache backends.

    ``get`` returns ``None`` on a miss, so ``None`` itself is never cached.
    Backends raise :class:`~prorated_renewals.exceptions.CacheError` when the
    underlying store fails.
    """

    @abstractmethod
    def get(self, key: str) -> Any | None:
        """Get value from cache."""
        pass

    @abstractmethod
    def set(self, key: str, value: Any, ttl: int) -> bool:
        """Set value in cache with a TTL in seconds."""
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Delete key from cache."""
        pass

    @abstractmethod
    def delete_pattern(self, pattern: str) -> int:
        """Delete all keys matching a glob pattern, returning the count."""
        pass

    @abstractmethod
    def clear(self) -> bool:
        """Clear all keys from cache."""
        pass
