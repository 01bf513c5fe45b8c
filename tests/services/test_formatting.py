# tests/services/test_formatting.py
"""Tests for display formatting."""

from decimal import Decimal

import pytest

from portfolio_engine.services.formatting import (
    format_currency,
    format_percent,
    format_quantity,
    price_precision,
    quantity_places,
)


class TestFormatQuantity:

    @pytest.mark.parametrize("value,expected", [
        ("1", 4),
        ("1234.5", 4),
        ("0.999", 6),
        ("0.001", 6),
        ("0.000999", 8),
        ("0", 8),
    ])
    def test_quantity_places(self, value, expected):
        assert quantity_places(Decimal(value)) == expected

    @pytest.mark.parametrize("value,expected", [
        ("1.5", "1.5000"),
        ("2.123456", "2.1235"),
        ("0.0123456789", "0.012346"),
        ("0.00012345678", "0.00012346"),
    ])
    def test_format_quantity(self, value, expected):
        assert format_quantity(Decimal(value)) == expected


class TestFormatCurrency:

    @pytest.mark.parametrize("value,expected", [
        ("1234.5", "$1,234.50"),
        ("0", "$0.00"),
        ("0.005", "$0.01"),
        ("1234567.891", "$1,234,567.89"),
        ("-12", "-$12.00"),
    ])
    def test_format_currency(self, value, expected):
        assert format_currency(Decimal(value)) == expected

    def test_custom_symbol(self):
        assert format_currency(Decimal("10"), symbol="€") == "€10.00"


class TestFormatPercent:

    def test_positive_is_signed(self):
        assert format_percent(Decimal("26.666")) == "+26.67%"

    def test_zero_is_signed(self):
        assert format_percent(Decimal("0")) == "+0.00%"

    def test_negative(self):
        assert format_percent(Decimal("-3.5")) == "-3.50%"

    def test_unsigned(self):
        assert format_percent(Decimal("12"), signed=False) == "12.00%"


class TestPricePrecision:

    @pytest.mark.parametrize("value,expected", [
        ("64000", 2),
        ("100", 2),
        ("99.99", 4),
        ("1", 4),
        ("0.5", 6),
        ("0.01", 6),
        ("0.00001234", 8),
    ])
    def test_price_precision(self, value, expected):
        assert price_precision(Decimal(value)) == expected
