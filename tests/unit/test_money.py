"""Unit tests for money helpers"""

import pytest
from decimal import Decimal
from loan_engine.utils.money import MAX_AMOUNT, MAX_RATE, bounded_decimal, to_money, to_rate


def test_to_money_rounds_half_up():
    assert to_money(Decimal("0.005")) == Decimal("0.01")
    assert to_money(Decimal("2.344")) == Decimal("2.34")
    assert to_money(1.1) == Decimal("1.10")


def test_to_rate_keeps_four_places():
    assert to_rate(Decimal("5.123456")) == Decimal("5.1235")
    assert to_rate("7") == Decimal("7.0000")


@pytest.mark.parametrize("value", ["100", Decimal("-25.5"), 3, 0.1, Decimal("999999999999.99")])
def test_bounded_decimal_accepts_finite_values(value):
    assert bounded_decimal(value, MAX_AMOUNT) is not None


@pytest.mark.parametrize(
    "value",
    [Decimal("NaN"), Decimal("Infinity"), Decimal("-Infinity"), "abc", None, Decimal("1e12"), Decimal("-1e20")],
)
def test_bounded_decimal_rejects_unstorable_values(value):
    assert bounded_decimal(value, MAX_AMOUNT) is None


def test_rate_limit_matches_column_scale():
    assert bounded_decimal(Decimal("99999.9999"), MAX_RATE) is not None
    assert bounded_decimal(Decimal("100000"), MAX_RATE) is None
