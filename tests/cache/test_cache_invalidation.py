"""
Tests for CacheInvalidationManager.

Tests event dispatch, handler targets and what each event clears.
"""

from decimal import Decimal

import pytest

from prorated_renewals.cache.keys import CacheKey
from prorated_renewals.cache.manager import (
    CacheEvent,
    CacheInvalidationManager,
    CycleLengthsChangedHandler,
    MetaUpdatedHandler,
    ProductChangedHandler,
)


@pytest.fixture
def populated_cache(cache):
    cache.set("prorate:flag:5", True, ttl=3600)
    cache.set("prorate:flag:6", True, ttl=3600)
    cache.set("prorate:calc:5:month:1:10:30:2", Decimal("9.86"), ttl=1800)
    cache.set("prorate:calc:5:year:1:10:30:2", Decimal("0.82"), ttl=1800)
    cache.set("prorate:calc:6:month:1:10:30:2", Decimal("9.86"), ttl=1800)
    cache.set("prorate:days:month:1", Decimal("30.4375"), ttl=3600)
    return cache


@pytest.fixture
def manager(populated_cache):
    return CacheInvalidationManager(populated_cache)


class TestHandlers:
    """Test handler targets."""

    def test_product_changed_targets(self):
        keys, patterns = ProductChangedHandler().get_targets(CacheKey(), 5)
        assert keys == ["prorate:flag:5"]
        assert patterns == ["prorate:calc:5:*"]

    def test_product_changed_without_id(self):
        assert ProductChangedHandler().get_targets(CacheKey()) == ([], [])

    def test_meta_handler_ignores_other_keys(self):
        handler = MetaUpdatedHandler("_enable_proration")
        assert handler.get_targets(CacheKey(), 5, meta_key="_price") == ([], [])
        assert handler.get_targets(CacheKey(), 5, meta_key="_enable_proration") == (
            ["prorate:flag:5"],
            ["prorate:calc:5:*"],
        )

    def test_cycle_handler(self):
        assert CycleLengthsChangedHandler().get_targets(CacheKey("x")) == ([], ["x:days:*"])


class TestCacheInvalidationManager:
    """Test event handling."""

    def test_product_updated(self, manager, populated_cache):
        cleared = manager.handle_event(CacheEvent.PRODUCT_UPDATED, 5)

        assert cleared == 3
        assert populated_cache.get("prorate:flag:5") is None
        assert populated_cache.get("prorate:calc:5:month:1:10:30:2") is None
        assert populated_cache.get("prorate:flag:6") is True
        assert populated_cache.get("prorate:calc:6:month:1:10:30:2") == Decimal("9.86")

    def test_variation_saved(self, manager, populated_cache):
        manager.handle_event(CacheEvent.VARIATION_SAVED, 6)
        assert populated_cache.get("prorate:flag:6") is None
        assert populated_cache.get("prorate:flag:5") is True

    def test_meta_updated_for_flag_key(self, manager, populated_cache):
        manager.handle_event(CacheEvent.META_UPDATED, 5, meta_key="_enable_proration")
        assert populated_cache.get("prorate:flag:5") is None

    def test_meta_updated_for_other_key(self, manager, populated_cache):
        assert manager.handle_event(CacheEvent.META_UPDATED, 5, meta_key="_sku") == 0
        assert populated_cache.get("prorate:flag:5") is True

    def test_custom_flag_meta_key(self, populated_cache):
        manager = CacheInvalidationManager(populated_cache, flag_meta_key="_prorate")
        assert manager.handle_event(CacheEvent.META_UPDATED, 5, meta_key="_enable_proration") == 0
        assert manager.handle_event(CacheEvent.META_UPDATED, 5, meta_key="_prorate") == 3

    def test_cycle_lengths_changed(self, manager, populated_cache):
        assert manager.handle_event(CacheEvent.CYCLE_LENGTHS_CHANGED) == 1
        assert populated_cache.get("prorate:days:month:1") is None
        assert populated_cache.get("prorate:flag:5") is True

    def test_unknown_event(self, manager):
        assert manager.handle_event("not_an_event") == 0  # type: ignore[arg-type]
