"""
Prorated first renewals for subscription products.

Provides:
- Proration of the first, partial billing cycle
- The per-product opt-in flag
- Renewal policy for opted-in and regular products
- The ", $X due today" price string suffix
"""

from prorated_renewals.billing_cycle import BillingPeriod, SubscriptionCycleAuthority
from prorated_renewals.calculator import ProrationCalculator, compute_prorated_amount
from prorated_renewals.catalog import InMemoryProductMetaStore, ProrationFlagService
from prorated_renewals.dependencies import ProrationComponents, build_components
from prorated_renewals.exceptions import (
    CacheConnectionError,
    CacheError,
    ProrationConfigurationError,
    ProrationError,
)
from prorated_renewals.logging import get_logger, setup_logging
from prorated_renewals.models import DueToday, SubscriptionProduct
from prorated_renewals.price_string import DueTodayPriceFormatter, PriceRenderContext
from prorated_renewals.renewals import (
    BillingModePolicy,
    SyncedRenewalSchedule,
    trial_days_until,
)

__version__ = "1.0.0"

__all__ = [
    "BillingPeriod",
    "SubscriptionCycleAuthority",
    "ProrationCalculator",
    "compute_prorated_amount",
    "InMemoryProductMetaStore",
    "ProrationFlagService",
    "ProrationComponents",
    "build_components",
    "ProrationError",
    "ProrationConfigurationError",
    "CacheError",
    "CacheConnectionError",
    "DueToday",
    "SubscriptionProduct",
    "DueTodayPriceFormatter",
    "PriceRenderContext",
    "BillingModePolicy",
    "SyncedRenewalSchedule",
    "trial_days_until",
    "get_logger",
    "setup_logging",
]
