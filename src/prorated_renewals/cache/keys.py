"""Cache key generator for proration lookups."""

from decimal import Decimal


class CacheKey:
    """Cache key generator.

    Keys are namespaced by a configurable prefix so several stores can share
    one redis database.
    """

    def __init__(self, prefix: str = "prorate") -> None:
        self.prefix = prefix

    def flag(self, product_id: int) -> str:
        """Generate cache key for a product's opt-in flag."""
        return f"{self.prefix}:flag:{product_id}"

    def days_in_cycle(self, period: str, interval: int) -> str:
        """Generate cache key for a cycle length."""
        return f"{self.prefix}:days:{period}:{interval}"

    def prorated_amount(
        self,
        product_id: int | None,
        period: str,
        interval: int,
        trial_days: Decimal,
        regular_price: Decimal,
        decimals: int,
    ) -> str:
        """Generate cache key for a prorated amount at full price precision."""
        return (
            f"{self.prefix}:calc:{product_id if product_id is not None else 'none'}:"
            f"{period}:{interval}:{trial_days.normalize():f}:"
            f"{regular_price.normalize():f}:{decimals}"
        )

    def product_amounts_pattern(self, product_id: int) -> str:
        """Pattern matching every cached amount of a product."""
        return f"{self.prefix}:calc:{product_id}:*"

    def cycle_pattern(self) -> str:
        """Pattern matching every cached cycle length."""
        return f"{self.prefix}:days:*"
