"""
Wiring of the proration components from settings.
"""

from dataclasses import dataclass

from prorated_renewals.billing_cycle import BillingCycleAuthority, SubscriptionCycleAuthority
from prorated_renewals.cache.interfaces import CacheBackend
from prorated_renewals.cache.service import ProrationCache
from prorated_renewals.calculator import ProrationCalculator
from prorated_renewals.catalog import ProductMetaStore, ProrationFlagService
from prorated_renewals.money_utils import MoneyHandler
from prorated_renewals.price_string import DueTodayPriceFormatter
from prorated_renewals.renewals import BillingModePolicy, RenewalSchedule, SyncedRenewalSchedule
from prorated_renewals.settings import Settings, get_settings


@dataclass
class ProrationComponents:
    """Bundle of collaborating proration services sharing one cache."""

    cache: ProrationCache
    money: MoneyHandler
    calculator: ProrationCalculator
    flags: ProrationFlagService
    policy: BillingModePolicy
    formatter: DueTodayPriceFormatter


def build_components(
    store: ProductMetaStore,
    config: Settings | None = None,
    *,
    authority: BillingCycleAuthority | None = None,
    schedule: RenewalSchedule | None = None,
    backend: CacheBackend | None = None,
) -> ProrationComponents:
    """
    Build the proration services for a host catalog.

    Args:
        store: Host product meta store holding the opt-in flags
        config: Settings, defaults to the global settings
        authority: Billing cycle authority, defaults to the platform averages
        schedule: Renewal schedule, defaults to synchronised renewals
        backend: Cache backend overriding ``cache.backend``
    """
    config = config or get_settings()
    cache = ProrationCache.from_settings(config, backend=backend)
    money = MoneyHandler.from_settings(config)
    calculator = ProrationCalculator(
        authority=authority or SubscriptionCycleAuthority(), money=money, cache=cache
    )
    flags = ProrationFlagService(
        store,
        cache=cache,
        meta_key=config.proration.meta_key,
        enabled_value=config.proration.enabled_value,
        disabled_value=config.proration.disabled_value,
    )
    formatter = DueTodayPriceFormatter(
        calculator,
        flags,
        schedule=schedule or SyncedRenewalSchedule(),
        money=money,
        suffix=config.proration.due_today_suffix,
    )
    return ProrationComponents(
        cache=cache,
        money=money,
        calculator=calculator,
        flags=flags,
        policy=BillingModePolicy(flags),
        formatter=formatter,
    )
