"""Tests for money utilities"""
from decimal import Decimal

import pytest

from storefront.errors import ValidationError
from storefront.services.money import (
    format_money,
    normalize_price,
    round_money,
    to_decimal,
    to_float,
)


class TestToDecimal:

    def test_float_goes_through_str(self):
        assert to_decimal(0.1) == Decimal("0.1")

    def test_invalid_is_zero(self):
        assert to_decimal(None) == Decimal("0")
        assert to_decimal("abc") == Decimal("0")


class TestNormalizePrice:

    @pytest.mark.parametrize("value, expected", [
        (11.99, Decimal("11.99")),
        ("14.99", Decimal("14.99")),
        (" 9.50 ", Decimal("9.50")),
        (0, Decimal("0")),
        (Decimal("3.25"), Decimal("3.25")),
    ])
    def test_valid(self, value, expected):
        assert normalize_price(value) == expected

    @pytest.mark.parametrize("value", [None, True, "", "free", "-1", -0.01, "NaN", "Infinity", [1]])
    def test_invalid(self, value):
        with pytest.raises(ValidationError):
            normalize_price(value)


def test_round_money_half_up():
    assert round_money("2.715") == Decimal("2.72")
    assert round_money("2.7176") == Decimal("2.72")


def test_to_float():
    assert to_float(Decimal("41.69")) == 41.69


def test_format_money():
    assert format_money(Decimal("1234.5")) == "$1,234.50"
    assert format_money("3", symbol="€") == "€3.00"
