"""
Billing cycle arithmetic.

Cycle lengths use the subscription platform's fixed averages so that a
prorated charge reconciles with what the platform bills on renewal:
a month is 30.4375 days and a year is 365.25 days.
"""

import calendar
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Protocol

from dateutil.relativedelta import relativedelta


class BillingPeriod(str, Enum):
    """Subscription billing periods."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


# Periods a first renewal can be prorated over
PRORATABLE_PERIODS: frozenset[str] = frozenset(
    {BillingPeriod.WEEK.value, BillingPeriod.MONTH.value, BillingPeriod.YEAR.value}
)

DAYS_PER_PERIOD: dict[str, Decimal] = {
    BillingPeriod.DAY.value: Decimal("1"),
    BillingPeriod.WEEK.value: Decimal("7"),
    BillingPeriod.MONTH.value: Decimal("30.4375"),
    BillingPeriod.YEAR.value: Decimal("365.25"),
}


class BillingCycleAuthority(Protocol):
    """Canonical cycle-length function of the billing platform."""

    def days_in_cycle(self, period: str, interval: int) -> Decimal | float | int | None: ...


class SubscriptionCycleAuthority:
    """Default authority: the platform's average days per period times interval.

    Unknown periods yield 0, which callers floor to a safe value.
    """

    def days_in_cycle(self, period: str, interval: int) -> Decimal:
        per_period = DAYS_PER_PERIOD.get(period_value(period) or "")
        if per_period is None:
            return Decimal(0)
        return per_period * Decimal(interval)


def period_value(period: "BillingPeriod | str | None") -> str | None:
    """Plain string value of a period, or None."""
    if period is None:
        return None
    if isinstance(period, BillingPeriod):
        return period.value
    if isinstance(period, str):
        return period
    return None


def add_interval(interval: int, period: BillingPeriod | str, from_date: datetime) -> datetime:
    """
    Add ``interval`` periods to ``from_date`` using calendar arithmetic.

    Month arithmetic keeps month ends on month ends: adding one month to
    Feb 28 (non-leap) gives Mar 31, and Jan 31 gives the last day of Feb.
    """
    value = period_value(period)
    if value == BillingPeriod.DAY.value:
        return from_date + timedelta(days=interval)
    if value == BillingPeriod.WEEK.value:
        return from_date + timedelta(weeks=interval)
    if value == BillingPeriod.MONTH.value:
        result = from_date + relativedelta(months=interval)
        if _is_month_end(from_date):
            last_day = calendar.monthrange(result.year, result.month)[1]
            result = result.replace(day=last_day)
        return result
    if value == BillingPeriod.YEAR.value:
        return from_date + relativedelta(years=interval)
    raise ValueError(f"Unknown billing period: {period!r}")


def _is_month_end(moment: datetime) -> bool:
    return moment.day == calendar.monthrange(moment.year, moment.month)[1]


__all__ = [
    "BillingPeriod",
    "PRORATABLE_PERIODS",
    "DAYS_PER_PERIOD",
    "BillingCycleAuthority",
    "SubscriptionCycleAuthority",
    "period_value",
    "add_interval",
]
