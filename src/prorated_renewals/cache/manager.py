"""
Cache invalidation for catalog events.

The catalog update path calls :meth:`CacheInvalidationManager.handle_event`
explicitly; each event maps to a handler that lists the keys and patterns
to clear.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any

import structlog

from prorated_renewals.cache.keys import CacheKey
from prorated_renewals.cache.service import ProrationCache

logger = structlog.get_logger(__name__)


class CacheEvent(str, Enum):
    """Catalog events that affect cached proration data."""

    PRODUCT_UPDATED = "product_updated"
    VARIATION_SAVED = "variation_saved"
    META_UPDATED = "meta_updated"
    CYCLE_LENGTHS_CHANGED = "cycle_lengths_changed"


class InvalidationHandler(ABC):
    """Base handler for cache invalidation."""

    @abstractmethod
    def get_targets(
        self, keys: CacheKey, entity_id: int | None = None, **kwargs: Any
    ) -> tuple[list[str], list[str]]:
        """
        Return ``(keys, patterns)`` to invalidate for this event.

        Args:
            keys: Key generator of the cache being invalidated
            entity_id: Product or variation ID (optional)
            **kwargs: Additional context (meta_key, etc.)
        """
        raise NotImplementedError


class ProductChangedHandler(InvalidationHandler):
    """Product or variation saved: clear its flag and its amounts."""

    def get_targets(
        self, keys: CacheKey, entity_id: int | None = None, **kwargs: Any
    ) -> tuple[list[str], list[str]]:
        if entity_id is None:
            return [], []
        return [keys.flag(entity_id)], [keys.product_amounts_pattern(entity_id)]


class MetaUpdatedHandler(InvalidationHandler):
    """Meta written: only the proration flag key matters."""

    def __init__(self, flag_meta_key: str) -> None:
        self.flag_meta_key = flag_meta_key

    def get_targets(
        self, keys: CacheKey, entity_id: int | None = None, **kwargs: Any
    ) -> tuple[list[str], list[str]]:
        if kwargs.get("meta_key") != self.flag_meta_key:
            return [], []
        return ProductChangedHandler().get_targets(keys, entity_id)


class CycleLengthsChangedHandler(InvalidationHandler):
    """Billing cycle authority changed: drop every cached cycle length."""

    def get_targets(
        self, keys: CacheKey, entity_id: int | None = None, **kwargs: Any
    ) -> tuple[list[str], list[str]]:
        return [], [keys.cycle_pattern()]


class CacheInvalidationManager:
    """Dispatches catalog events to invalidation handlers."""

    def __init__(self, cache: ProrationCache, flag_meta_key: str = "_enable_proration") -> None:
        self.cache = cache
        self._handlers: dict[CacheEvent, InvalidationHandler] = {
            CacheEvent.PRODUCT_UPDATED: ProductChangedHandler(),
            CacheEvent.VARIATION_SAVED: ProductChangedHandler(),
            CacheEvent.META_UPDATED: MetaUpdatedHandler(flag_meta_key),
            CacheEvent.CYCLE_LENGTHS_CHANGED: CycleLengthsChangedHandler(),
        }

    def handle_event(self, event: CacheEvent, entity_id: int | None = None, **kwargs: Any) -> int:
        """
        Invalidate cache entries affected by an event.

        Args:
            event: Type of catalog event
            entity_id: ID of affected product or variation
            **kwargs: Additional event context

        Returns:
            Number of cache entries cleared
        """
        handler = self._handlers.get(event)
        if not handler:
            logger.warning("No handler for cache event", cache_event=str(event))
            return 0

        keys, patterns = handler.get_targets(self.cache.keys, entity_id, **kwargs)
        cleared = sum(1 for key in keys if self.cache.delete(key))
        for pattern in patterns:
            cleared += self.cache.invalidate_pattern(pattern)

        logger.info(
            "Cache invalidation completed",
            cache_event=event.value,
            entity_id=entity_id,
            total_keys_cleared=cleared,
        )
        return cleared
