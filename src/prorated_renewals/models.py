"""
Proration data models.
"""

from dataclasses import dataclass
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from prorated_renewals.billing_cycle import BillingPeriod


class SubscriptionProduct(BaseModel):
    """Subscription product (or variation) as seen by the price string."""

    model_config = ConfigDict(use_enum_values=True)

    id: int = Field(..., description="Product or variation ID")
    period: BillingPeriod | str = Field(BillingPeriod.MONTH.value, description="Billing period")
    interval: int = Field(1, description="Bill every N periods")
    price: Decimal = Field(Decimal("0"), description="Regular recurring price")
    is_subscription: bool = Field(True, description="Whether the product is a subscription")

    # Renewal synchronisation
    sync_day: int | None = Field(
        None,
        description="ISO weekday (1-7) for weekly, day of month (1-31) for monthly or yearly",
    )
    sync_month: int | None = Field(None, ge=1, le=12, description="Month for yearly sync")

    @model_validator(mode="after")
    def _check_sync(self) -> "SubscriptionProduct":
        if self.period == BillingPeriod.YEAR.value and self.sync_day is not None:
            if self.sync_month is None:
                raise ValueError("Yearly sync requires sync_month")
        return self

    @property
    def is_synced(self) -> bool:
        return self.sync_day is not None


@dataclass(frozen=True)
class DueToday:
    """Memoized due-today computation for one product and period."""

    trial_days: int
    amount: Decimal

    @classmethod
    def nothing_due(cls) -> "DueToday":
        return cls(trial_days=0, amount=Decimal(0))


__all__ = ["SubscriptionProduct", "DueToday"]
