"""
Proration calculator.

Computes the amount due today for the first, partial billing cycle of a
subscription. Every path degrades to a safe default instead of raising,
because results are rendered inline in price strings.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

import structlog

from prorated_renewals.billing_cycle import (
    PRORATABLE_PERIODS,
    BillingCycleAuthority,
    SubscriptionCycleAuthority,
    period_value,
)
from prorated_renewals.cache.backends import NullCacheBackend
from prorated_renewals.cache.service import ProrationCache
from prorated_renewals.money_utils import MoneyHandler

logger = structlog.get_logger(__name__)

ZERO = Decimal(0)
ONE = Decimal(1)


def to_decimal(value: Any) -> Decimal | None:
    """Finite Decimal for a numeric value or numeric string, else None."""
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError, TypeError):
        return None
    if not number.is_finite():
        return None
    return number


def to_interval(value: Any) -> int | None:
    """Positive integral interval, else None."""
    number = to_decimal(value)
    if number is None or number <= 0 or number != number.to_integral_value():
        return None
    return int(number)


def compute_prorated_amount(
    regular_price: Decimal, trial_days: Decimal, cycle_days: Decimal, decimals: int
) -> Decimal:
    """
    Prorate ``regular_price`` over ``trial_days`` of a ``cycle_days`` cycle.

    The factor is clamped to 1 and the rounded amount is clamped to the
    regular price, so the result always lies in ``[0, regular_price]``.
    """
    if regular_price <= 0 or trial_days <= 0 or cycle_days <= 0:
        return ZERO
    factor = min(ONE, trial_days / cycle_days)
    amount = (regular_price * factor).quantize(ONE.scaleb(-decimals), rounding=ROUND_HALF_UP)
    return min(amount, regular_price)


class ProrationCalculator:
    """
    Cached proration calculator.

    Args:
        authority: Billing platform's cycle-length function
        money: Active currency configuration (supplies price decimals)
        cache: Read-through cache; defaults to one that never stores
    """

    def __init__(
        self,
        authority: BillingCycleAuthority | None = None,
        money: MoneyHandler | None = None,
        cache: ProrationCache | None = None,
    ) -> None:
        self.authority = authority or SubscriptionCycleAuthority()
        self.money = money or MoneyHandler()
        self.cache = cache or ProrationCache(NullCacheBackend())

    def days_in_cycle(self, period: Any, interval: Any = 1) -> Decimal:
        """
        Average days in one billing cycle, always > 0.

        Unknown periods and non-positive intervals return 1.
        """
        value = period_value(period)
        count = to_interval(interval)
        if value not in PRORATABLE_PERIODS or count is None:
            return ONE

        key = self.cache.keys.days_in_cycle(value, count)
        cached = self.cache.get(key)
        if cached is not None:
            return Decimal(cached)

        try:
            raw = self.authority.days_in_cycle(value, count)
        except Exception as e:
            logger.warning(
                "Billing cycle authority failed", period=value, interval=count, error=str(e)
            )
            self.cache.metrics.fallbacks += 1
            return ONE

        days = to_decimal(raw)
        if days is None or days <= 0:
            logger.debug("Non-positive cycle length, using 1", period=value, raw=repr(raw))
            self.cache.metrics.fallbacks += 1
            days = ONE

        self.cache.metrics.recomputes += 1
        self.cache.set(key, days, self.cache.cycle_ttl)
        return days

    def prorated_amount(
        self,
        period: Any,
        interval: Any,
        trial_days: Any,
        regular_price: Any,
        *,
        product_id: int | None = None,
    ) -> Decimal:
        """
        Amount due today for ``trial_days`` of the first cycle.

        Args:
            period: Billing period (week, month, year)
            interval: Bill every N periods
            trial_days: Days until the first renewal
            regular_price: Regular recurring price
            product_id: Product the amount is cached under

        Returns:
            Amount in ``[0, regular_price]``; 0 for invalid inputs
        """
        trial = to_decimal(trial_days)
        price = to_decimal(regular_price)
        count = to_interval(interval)
        if trial is None or trial <= 0 or price is None or price <= 0 or count is None:
            return ZERO

        value = period_value(period)
        decimals = self.money.price_decimals()
        key = self.cache.keys.prorated_amount(
            product_id, str(value), count, trial, price, decimals
        )
        cached = self.cache.get(key)
        if cached is not None:
            return Decimal(cached)

        cycle = self.days_in_cycle(value, count)
        if cycle <= 0:
            return ZERO

        try:
            amount = compute_prorated_amount(price, trial, cycle, decimals)
        except ArithmeticError as e:
            logger.warning("Proration arithmetic failed", key=key, error=str(e))
            self.cache.metrics.fallbacks += 1
            return ZERO

        self.cache.metrics.recomputes += 1
        self.cache.set(key, amount, self.cache.amount_ttl)
        logger.debug(
            "Computed prorated amount",
            product_id=product_id,
            period=value,
            interval=count,
            trial_days=trial,
            amount=amount,
        )
        return amount


__all__ = [
    "ProrationCalculator",
    "compute_prorated_amount",
    "to_decimal",
    "to_interval",
]
