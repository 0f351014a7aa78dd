"""
Integration tests wiring every component from settings.
"""

from datetime import UTC, datetime
from decimal import Decimal

import pytest

from prorated_renewals import (
    InMemoryProductMetaStore,
    PriceRenderContext,
    SubscriptionProduct,
    build_components,
)
from prorated_renewals.cache.backends import MemoryCacheBackend, NullCacheBackend, RedisCacheBackend
from prorated_renewals.settings import Settings


@pytest.fixture
def store():
    return InMemoryProductMetaStore({1: {"_enable_proration": "yes"}})


@pytest.mark.integration
class TestBuildComponents:
    """Test component wiring."""

    def test_components_share_cache(self, store, test_settings):
        components = build_components(store, test_settings)
        assert isinstance(components.cache.backend, MemoryCacheBackend)
        assert components.calculator.cache is components.cache
        assert components.flags.cache is components.cache
        assert components.formatter.calculator is components.calculator
        assert components.policy.flags is components.flags

    def test_backend_override(self, store, test_settings):
        components = build_components(store, test_settings, backend=NullCacheBackend())
        assert isinstance(components.cache.backend, NullCacheBackend)

    def test_settings_flow_through(self, store):
        config = Settings(  # type: ignore[call-arg]
            _env_file=None,
            currency={"code": "EUR", "locale": "en_IE"},
            proration={"due_today_suffix": " + {amount} today"},
        )
        components = build_components(store, config)
        product = SubscriptionProduct(id=1, period="month", price=Decimal("30"), sync_day=1)

        result = components.formatter.append_due_today(
            "€30.00 / month", product, PriceRenderContext(), now=datetime(2024, 3, 22, tzinfo=UTC)
        )

        assert result == "€30.00 / month + €9.86 today"

    def test_end_to_end_with_redis(self, store, test_settings):
        fakeredis = pytest.importorskip("fakeredis")
        backend_client = fakeredis.FakeRedis()

        components = build_components(store, test_settings, backend=RedisCacheBackend(backend_client))
        product = SubscriptionProduct(id=1, period="month", price=Decimal("30.00"), sync_day=1)
        now = datetime(2024, 3, 22, tzinfo=UTC)

        result = components.formatter.append_due_today(
            "$30.00 / month", product, PriceRenderContext(), now=now
        )
        assert result == "$30.00 / month, $9.86 due today"
        assert backend_client.exists("prorate:flag:1")
        assert backend_client.exists("prorate:days:month:1")
        assert backend_client.exists("prorate:calc:1:month:1:10:30:2")

        # Turning proration off clears the flag and amounts
        components.flags.save(1, False)
        assert not backend_client.exists("prorate:flag:1")
        assert not backend_client.exists("prorate:calc:1:month:1:10:30:2")

        result = components.formatter.append_due_today(
            "$30.00 / month", product, PriceRenderContext(), now=now
        )
        assert result == "$30.00 / month"
        assert components.policy.prorated_trial_length(product, 10) == 0
        assert components.policy.first_payment_date(
            product, datetime(2024, 4, 1, tzinfo=UTC), now
        ) == datetime(2024, 4, 22, tzinfo=UTC)
