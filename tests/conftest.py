"""
Global pytest configuration and fixtures for prorated renewals tests.
"""

import os
from decimal import Decimal

import pytest

# Keep tests independent of any local .env or exported settings
for _name in list(os.environ):
    if _name.upper().startswith(("CACHE__", "CURRENCY__", "PRORATION__", "OBSERVABILITY__")):
        del os.environ[_name]

from prorated_renewals.cache.backends import MemoryCacheBackend  # noqa: E402
from prorated_renewals.cache.service import ProrationCache  # noqa: E402
from prorated_renewals.calculator import ProrationCalculator  # noqa: E402
from prorated_renewals.catalog import InMemoryProductMetaStore, ProrationFlagService  # noqa: E402
from prorated_renewals.models import SubscriptionProduct  # noqa: E402
from prorated_renewals.money_utils import MoneyHandler  # noqa: E402
from prorated_renewals.settings import Settings  # noqa: E402


class FakeClock:
    """Manually advanced monotonic clock for TTL tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def test_settings():
    """Settings with defaults only (no .env file)."""
    return Settings(_env_file=None)  # type: ignore[call-arg]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_backend(clock):
    return MemoryCacheBackend(max_size=100, max_ttl=3600, timer=clock)


@pytest.fixture
def cache(memory_backend):
    return ProrationCache(memory_backend)


@pytest.fixture
def money():
    return MoneyHandler(currency="USD", locale="en_US")


@pytest.fixture
def calculator(money, cache):
    return ProrationCalculator(money=money, cache=cache)


@pytest.fixture
def meta_store():
    return InMemoryProductMetaStore(
        {
            101: {"_enable_proration": "yes"},
            102: {"_enable_proration": "no"},
            103: {"_other_meta": "yes"},
        }
    )


@pytest.fixture
def flags(meta_store, cache):
    return ProrationFlagService(meta_store, cache=cache)


@pytest.fixture
def monthly_product():
    """Opted-in monthly product synced to the 1st."""
    return SubscriptionProduct(
        id=101, period="month", interval=1, price=Decimal("30.00"), sync_day=1
    )


# Pytest configuration
def pytest_configure(config):
    """Configure pytest."""
    config.addinivalue_line("markers", "unit: Unit test")
    config.addinivalue_line("markers", "integration: Integration test")
