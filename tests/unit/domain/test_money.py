"""Unit tests for money helpers"""

import pytest
from decimal import Decimal

from src.domain.money import format_money, money_sum, to_money


class TestToMoney:

    def test_quantizes_to_cents(self):
        assert to_money("10") == Decimal("10.00")
        assert to_money(Decimal("3.333")) == Decimal("3.33")
        assert to_money("0.005") == Decimal("0.01")

    def test_float_goes_through_str(self):
        assert to_money(0.1) == Decimal("0.10")
        assert to_money(0.1) + to_money(0.2) == Decimal("0.30")

    def test_rejects_garbage(self):
        with pytest.raises(ValueError):
            to_money("abc")

    def test_rejects_non_finite(self):
        with pytest.raises(ValueError):
            to_money(float("nan"))
        with pytest.raises(ValueError):
            to_money("Infinity")


def test_money_sum_is_exact():
    assert money_sum(["0.10"] * 10) == Decimal("1.00")
    assert money_sum([]) == Decimal("0.00")


def test_format_money():
    assert format_money(Decimal("1234")) == "$1,234.00"
    assert format_money("50.5") == "$50.50"
