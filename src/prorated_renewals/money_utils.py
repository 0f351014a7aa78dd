"""
Money and currency utilities using py-moneyed and Babel.

Provides the active currency's price precision, half-up rounding to that
precision and locale-aware formatting of due-today amounts.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Any

import structlog
from babel import Locale
from babel.core import UnknownLocaleError
from babel.numbers import format_currency, get_currency_precision
from moneyed import Currency, Money, get_currency
from moneyed.classes import CurrencyDoesNotExist

from prorated_renewals.exceptions import ProrationConfigurationError
from prorated_renewals.settings import Settings

logger = structlog.get_logger(__name__)

# Default locale for formatting
DEFAULT_LOCALE = "en_US"


class MoneyHandler:
    """Active currency configuration: precision, rounding and formatting."""

    def __init__(
        self,
        currency: str = "USD",
        locale: str = DEFAULT_LOCALE,
        decimal_places: int | None = None,
    ) -> None:
        self.currency = self._validate_currency(currency)
        self.locale = self._validate_locale(locale)
        if decimal_places is not None and decimal_places < 0:
            raise ProrationConfigurationError(
                f"Decimal places must be non-negative, got {decimal_places}",
                setting="currency.decimal_places",
            )
        self._decimal_places = decimal_places

    @classmethod
    def from_settings(cls, config: Settings) -> "MoneyHandler":
        """Build a handler from the currency section of the settings."""
        return cls(
            currency=config.currency.code,
            locale=config.currency.locale,
            decimal_places=config.currency.decimal_places,
        )

    def _validate_currency(self, currency_code: str) -> Currency:
        """Validate and return Currency object."""
        try:
            return get_currency(currency_code.upper())
        except CurrencyDoesNotExist:
            raise ProrationConfigurationError(
                f"Invalid currency code: {currency_code}", setting="currency.code"
            )

    def _validate_locale(self, locale_code: str) -> str:
        """Validate locale code, falling back to the default locale."""
        try:
            Locale.parse(locale_code)
            return locale_code
        except (UnknownLocaleError, ValueError):
            logger.warning("Unknown locale, using default", locale=locale_code)
            return DEFAULT_LOCALE

    def price_decimals(self) -> int:
        """Decimal places prices are rounded to."""
        if self._decimal_places is not None:
            return self._decimal_places
        return get_currency_precision(self.currency.code)

    def quantize(self, amount: Decimal) -> Decimal:
        """Round half-up to the configured price decimals."""
        exponent = Decimal(1).scaleb(-self.price_decimals())
        return amount.quantize(exponent, rounding=ROUND_HALF_UP)

    def create_money(self, amount: int | float | Decimal | str) -> Money:
        """Create Money in the active currency."""
        if isinstance(amount, str):
            decimal_amount = Decimal(amount)
        else:
            decimal_amount = Decimal(str(amount))

        return Money(amount=decimal_amount, currency=self.currency)

    def format_money(self, money: Money, **kwargs: Any) -> str:
        """Format Money object with locale-aware formatting."""
        try:
            if self._decimal_places is None:
                return format_currency(
                    number=money.amount,
                    currency=money.currency.code,
                    locale=self.locale,
                    **kwargs,
                )
            # An explicit override needs a pattern with that many fraction digits
            fraction = "." + "0" * self._decimal_places if self._decimal_places else ""
            return format_currency(
                number=money.amount,
                currency=money.currency.code,
                format=f"¤#,##0{fraction}",
                locale=self.locale,
                currency_digits=False,
                **kwargs,
            )
        except (TypeError, ValueError):
            # Fallback to simple formatting if locale issues
            return f"{money.currency.code} {money.amount:.{self.price_decimals()}f}"

    def format_amount(self, amount: Decimal) -> str:
        """Format a bare amount in the active currency."""
        return self.format_money(self.create_money(self.quantize(amount)))


__all__ = [
    "DEFAULT_LOCALE",
    "MoneyHandler",
]
