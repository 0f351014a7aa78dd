"""
First-renewal policy.

Proration and "full cycle, then renew" are mutually exclusive billing
modes: opted-in products get a prorated first charge up to a synchronised
renewal date, every other product pays the full price and renews one full
interval after it starts.
"""

import calendar
from datetime import UTC, datetime, timedelta
from typing import Protocol

import structlog

from prorated_renewals.billing_cycle import BillingPeriod, add_interval, period_value
from prorated_renewals.catalog import ProrationFlagService
from prorated_renewals.models import SubscriptionProduct

logger = structlog.get_logger(__name__)

DAY = timedelta(days=1)


def to_utc(moment: datetime) -> datetime:
    """Normalize to an aware UTC datetime; naive values are taken as UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC)


def trial_days_until(first_renewal: datetime, now: datetime) -> int:
    """Whole days until ``first_renewal``, rounded up; <= 0 means nothing is due today."""
    delta = to_utc(first_renewal) - to_utc(now)
    day_us = DAY // timedelta(microseconds=1)
    delta_us = delta // timedelta(microseconds=1)
    return -(-delta_us // day_us)


class RenewalSchedule(Protocol):
    """Computes the first renewal of a product started at ``start``."""

    def first_payment_date(
        self, product: SubscriptionProduct, start: datetime
    ) -> datetime | None: ...


class SyncedRenewalSchedule:
    """
    Renewals synchronised to a fixed day of the period.

    The first renewal is the next sync day strictly after ``start``, at
    00:00 UTC. Day-of-month values past the end of a month are clamped to
    its last day. Products without a sync day have no synchronised renewal.
    """

    def first_payment_date(self, product: SubscriptionProduct, start: datetime) -> datetime | None:
        if not product.is_synced or product.sync_day is None:
            return None

        start = to_utc(start)
        midnight = start.replace(hour=0, minute=0, second=0, microsecond=0)
        period = period_value(product.period)

        if period == BillingPeriod.WEEK.value:
            days_ahead = (product.sync_day - start.isoweekday()) % 7 or 7
            return midnight + timedelta(days=days_ahead)

        if period == BillingPeriod.MONTH.value:
            candidate = _clamped(midnight, midnight.year, midnight.month, product.sync_day)
            if candidate <= start:
                year, month = _next_month(midnight.year, midnight.month)
                candidate = _clamped(midnight, year, month, product.sync_day)
            return candidate

        if period == BillingPeriod.YEAR.value and product.sync_month is not None:
            candidate = _clamped(midnight, midnight.year, product.sync_month, product.sync_day)
            if candidate <= start:
                candidate = _clamped(midnight, midnight.year + 1, product.sync_month, product.sync_day)
            return candidate

        logger.debug("No synchronised renewal for period", product_id=product.id, period=period)
        return None


def _next_month(year: int, month: int) -> tuple[int, int]:
    return (year + 1, 1) if month == 12 else (year, month + 1)


def _clamped(base: datetime, year: int, month: int, day: int) -> datetime:
    last_day = calendar.monthrange(year, month)[1]
    return base.replace(year=year, month=month, day=min(max(day, 1), last_day))


class BillingModePolicy:
    """Applies the opt-in flag to the platform's renewal computations."""

    def __init__(self, flags: ProrationFlagService) -> None:
        self.flags = flags

    def prorated_trial_length(self, product: SubscriptionProduct, trial_length: int) -> int:
        """Prorated trial length, forced to 0 for products that have not opted in."""
        if not self.flags.is_proration_enabled(product.id):
            return 0
        return trial_length

    def first_payment_date(
        self,
        product: SubscriptionProduct,
        first_payment: datetime,
        from_date: datetime,
    ) -> datetime:
        """
        First renewal date for ``product``.

        Products that have not opted in renew one full interval after
        ``from_date``; opted-in products keep the platform's synced date.
        """
        if self.flags.is_proration_enabled(product.id):
            return first_payment
        try:
            return add_interval(product.interval, product.period, to_utc(from_date))
        except ValueError as e:
            logger.warning(
                "Cannot add billing interval, keeping first payment date",
                product_id=product.id,
                period=period_value(product.period),
                error=str(e),
            )
            return first_payment


__all__ = [
    "to_utc",
    "trial_days_until",
    "RenewalSchedule",
    "SyncedRenewalSchedule",
    "BillingModePolicy",
]
