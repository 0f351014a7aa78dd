"""Tests for money_utils module."""

from decimal import Decimal

import pytest
from moneyed import Money

from prorated_renewals.exceptions import ProrationConfigurationError
from prorated_renewals.money_utils import MoneyHandler


@pytest.mark.unit
class TestMoneyHandler:
    """Test MoneyHandler class."""

    def test_initialization_defaults(self):
        handler = MoneyHandler()
        assert handler.currency.code == "USD"
        assert handler.locale == "en_US"

    def test_lowercase_currency(self):
        assert MoneyHandler(currency="eur").currency.code == "EUR"

    def test_invalid_currency_raises(self):
        with pytest.raises(ProrationConfigurationError) as exc_info:
            MoneyHandler(currency="INVALID")
        assert "Invalid currency code" in str(exc_info.value)
        assert exc_info.value.context == {"setting": "currency.code"}

    def test_negative_decimal_places_raise(self):
        with pytest.raises(ProrationConfigurationError):
            MoneyHandler(decimal_places=-1)

    def test_invalid_locale_falls_back(self):
        assert MoneyHandler(locale="invalid_locale").locale == "en_US"

    @pytest.mark.parametrize(
        ("currency", "expected"),
        [("USD", 2), ("EUR", 2), ("JPY", 0), ("KWD", 3)],
    )
    def test_price_decimals_from_currency(self, currency, expected):
        assert MoneyHandler(currency=currency).price_decimals() == expected

    def test_price_decimals_override(self):
        assert MoneyHandler(currency="USD", decimal_places=4).price_decimals() == 4

    def test_quantize_half_up(self):
        handler = MoneyHandler()
        assert handler.quantize(Decimal("2.675")) == Decimal("2.68")
        assert handler.quantize(Decimal("2.665")) == Decimal("2.67")
        assert handler.quantize(Decimal("2.664")) == Decimal("2.66")

    def test_create_money(self):
        money = MoneyHandler().create_money("9.86")
        assert money == Money("9.86", "USD")

    def test_format_amount(self):
        assert MoneyHandler().format_amount(Decimal("9.856")) == "$9.86"
        assert MoneyHandler().format_amount(Decimal("1234.5")) == "$1,234.50"

    def test_format_amount_with_override(self):
        handler = MoneyHandler(currency="USD", decimal_places=3)
        assert handler.format_amount(Decimal("9.8563")) == "$9.856"

    def test_format_amount_without_decimals(self):
        handler = MoneyHandler(currency="USD", decimal_places=0)
        assert handler.format_amount(Decimal("9.5")) == "$10"

    def test_format_amount_other_locale(self):
        formatted = MoneyHandler(currency="EUR", locale="de_DE").format_amount(Decimal("9.86"))
        assert "9,86" in formatted
        assert "€" in formatted


@pytest.mark.unit
class TestMoneyHandlerFromSettings:
    """Test building handlers from settings."""

    def test_from_settings(self, test_settings):
        test_settings.currency.code = "GBP"
        test_settings.currency.locale = "en_GB"
        handler = MoneyHandler.from_settings(test_settings)
        assert handler.currency.code == "GBP"
        assert handler.format_amount(Decimal("5")) == "£5.00"
