"""
Per-product proration opt-in flag.

The flag lives in the host catalog's product meta store. Reads are cached;
writes go through :meth:`ProrationFlagService.save` so the cache is
invalidated from the update path.
"""

from typing import Any, Protocol

import structlog

from prorated_renewals.cache.backends import NullCacheBackend
from prorated_renewals.cache.manager import CacheEvent, CacheInvalidationManager
from prorated_renewals.cache.service import ProrationCache
from prorated_renewals.calculator import to_decimal

logger = structlog.get_logger(__name__)


class ProductMetaStore(Protocol):
    """Product meta storage owned by the host catalog."""

    def get_meta(self, object_id: int, key: str) -> str | None: ...

    def set_meta(self, object_id: int, key: str, value: str) -> None: ...


class InMemoryProductMetaStore:
    """Dict-backed meta store for tests and embedding."""

    def __init__(self, initial: dict[int, dict[str, str]] | None = None) -> None:
        self._meta: dict[int, dict[str, str]] = {
            object_id: dict(values) for object_id, values in (initial or {}).items()
        }

    def get_meta(self, object_id: int, key: str) -> str | None:
        return self._meta.get(object_id, {}).get(key)

    def set_meta(self, object_id: int, key: str, value: str) -> None:
        self._meta.setdefault(object_id, {})[key] = value


def to_product_id(value: Any) -> int | None:
    """Positive integral product ID, else None."""
    number = to_decimal(value)
    if number is None or number <= 0 or number != number.to_integral_value():
        return None
    return int(number)


def is_checked(value: Any) -> bool:
    """Posted checkbox state; absent, empty and ``"0"`` values are unchecked."""
    if isinstance(value, str):
        return value not in ("", "0")
    return bool(value)


class ProrationFlagService:
    """Reads and writes the per-product proration opt-in flag."""

    def __init__(
        self,
        store: ProductMetaStore,
        cache: ProrationCache | None = None,
        meta_key: str = "_enable_proration",
        enabled_value: str = "yes",
        disabled_value: str = "no",
    ) -> None:
        self.store = store
        self.cache = cache or ProrationCache(NullCacheBackend())
        self.meta_key = meta_key
        self.enabled_value = enabled_value
        self.disabled_value = disabled_value
        self.invalidator = CacheInvalidationManager(self.cache, flag_meta_key=meta_key)

    def is_proration_enabled(self, product_id: Any) -> bool:
        """True only when the product's flag is exactly the enabled value."""
        object_id = to_product_id(product_id)
        if object_id is None:
            return False

        return bool(
            self.cache.get_or_compute(
                self.cache.keys.flag(object_id),
                lambda: self.store.get_meta(object_id, self.meta_key) == self.enabled_value,
                self.cache.flag_ttl,
            )
        )

    def save(self, product_id: int, enabled: bool, *, variation: bool = False) -> None:
        """
        Persist the flag from a product or variation edit form.

        An unchecked (absent) checkbox arrives as ``enabled=False`` and is
        written as the disabled value, never left unset.
        """
        value = self.enabled_value if enabled else self.disabled_value
        self.store.set_meta(product_id, self.meta_key, value)
        logger.info(
            "Proration flag saved", product_id=product_id, enabled=enabled, variation=variation
        )
        self.invalidator.handle_event(
            CacheEvent.META_UPDATED, product_id, meta_key=self.meta_key
        )

    def save_variations(self, submitted: dict[int, Any], variation_ids: dict[int, int]) -> None:
        """
        Persist flags for a variable product's variations.

        Args:
            submitted: Checkbox values posted per variation loop index
            variation_ids: Variation ID per loop index
        """
        for loop, variation_id in variation_ids.items():
            self.save(variation_id, is_checked(submitted.get(loop)), variation=True)

    def product_updated(self, product_id: int) -> None:
        """Product saved in the catalog."""
        self.invalidator.handle_event(CacheEvent.PRODUCT_UPDATED, product_id)

    def variation_saved(self, variation_id: int) -> None:
        """Variation saved in the catalog."""
        self.invalidator.handle_event(CacheEvent.VARIATION_SAVED, variation_id)

    def meta_updated(self, object_id: int, meta_key: str) -> None:
        """Any meta written in the catalog; only the flag key invalidates."""
        self.invalidator.handle_event(CacheEvent.META_UPDATED, object_id, meta_key=meta_key)


__all__ = [
    "ProductMetaStore",
    "InMemoryProductMetaStore",
    "ProrationFlagService",
    "to_product_id",
    "is_checked",
]
