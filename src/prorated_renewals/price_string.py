"""
Due-today suffix for subscription price strings.

Appends ", $X due today" to an already formatted price description for
products that opted in to proration.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime

import structlog

from prorated_renewals.billing_cycle import PRORATABLE_PERIODS, period_value
from prorated_renewals.calculator import ProrationCalculator
from prorated_renewals.catalog import ProrationFlagService, to_product_id
from prorated_renewals.money_utils import MoneyHandler
from prorated_renewals.models import DueToday, SubscriptionProduct
from prorated_renewals.renewals import RenewalSchedule, SyncedRenewalSchedule, trial_days_until

logger = structlog.get_logger(__name__)


@dataclass
class PriceRenderContext:
    """Memo table scoped to one rendering pass, keyed by (product_id, period)."""

    memo: dict[tuple[int, str], DueToday] = field(default_factory=dict)

    def get(self, product_id: int, period: str) -> DueToday | None:
        return self.memo.get((product_id, period))

    def remember(self, product_id: int, period: str, due: DueToday) -> DueToday:
        self.memo[(product_id, period)] = due
        return due


class DueTodayPriceFormatter:
    """Appends the prorated amount due today to subscription price strings."""

    def __init__(
        self,
        calculator: ProrationCalculator,
        flags: ProrationFlagService,
        schedule: RenewalSchedule | None = None,
        money: MoneyHandler | None = None,
        suffix: str = ", {amount} due today",
    ) -> None:
        self.calculator = calculator
        self.flags = flags
        self.schedule = schedule or SyncedRenewalSchedule()
        self.money = money or calculator.money
        self.suffix = suffix

    def due_today(
        self,
        product: SubscriptionProduct,
        context: PriceRenderContext,
        now: datetime | None = None,
    ) -> DueToday | None:
        """
        Amount due today for an opted-in product, memoized in ``context``.

        Returns None when the product is not eligible for a due-today amount.
        """
        if not product.is_subscription:
            return None
        product_id = to_product_id(product.id)
        if product_id is None or not self.flags.is_proration_enabled(product_id):
            return None
        period = period_value(product.period)
        if period not in PRORATABLE_PERIODS:
            return None

        cached = context.get(product_id, period)
        if cached is not None:
            return cached

        now = now or datetime.now(UTC)
        first_renewal = self.schedule.first_payment_date(product, now)
        if first_renewal is None:
            return context.remember(product_id, period, DueToday.nothing_due())

        trial_days = trial_days_until(first_renewal, now)
        if trial_days <= 0 or product.price <= 0:
            return context.remember(product_id, period, DueToday.nothing_due())

        amount = self.calculator.prorated_amount(
            period, product.interval, trial_days, product.price, product_id=product_id
        )
        return context.remember(product_id, period, DueToday(trial_days=trial_days, amount=amount))

    def append_due_today(
        self,
        price_string: str,
        product: SubscriptionProduct,
        context: PriceRenderContext,
        now: datetime | None = None,
    ) -> str:
        """Return ``price_string`` with the due-today suffix when one applies."""
        due = self.due_today(product, context, now)
        if due is None or due.trial_days <= 0:
            return price_string
        return price_string + self.suffix.format(amount=self.money.format_amount(due.amount))


__all__ = ["PriceRenderContext", "DueTodayPriceFormatter"]
