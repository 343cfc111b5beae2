from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from utils import (
    cents_to_dollars,
    cents_to_dollars_float,
    dollars_to_cents,
    format_currency,
    line_total_cents,
    percent,
    resolve_date_range,
    shift_month,
    to_naive,
    validate_amount,
)


@pytest.mark.parametrize(
    "amount,expected",
    [(10.50, 1050), ("10.50", 1050), (Decimal("0.015"), 2), (7, 700), (10.555, 1056)],
)
def test_dollars_to_cents(amount, expected):
    assert dollars_to_cents(amount) == expected


def test_dollars_to_cents_rejects_bool():
    with pytest.raises(ValueError):
        dollars_to_cents(True)


def test_cents_to_dollars():
    assert cents_to_dollars(1050) == Decimal("10.5")
    assert cents_to_dollars_float(199) == 1.99
    assert cents_to_dollars_float(None) is None


def test_format_currency():
    assert format_currency(1050) == "$10.50"
    assert format_currency(-1050) == "-$10.50"
    assert format_currency(1050, "EUR") == "10.50 EUR"


def test_validate_amount():
    assert validate_amount("12.34") == 1234
    assert validate_amount(0, allow_zero=True) == 0
    with pytest.raises(ValueError, match="greater than zero"):
        validate_amount(0)
    with pytest.raises(ValueError, match="negative"):
        validate_amount(-1)
    with pytest.raises(ValueError, match="maximum"):
        validate_amount(10_000_000)
    with pytest.raises(ValueError, match="Invalid amount"):
        validate_amount("abc")


def test_line_total_and_percent():
    assert line_total_cents(2.5, 199) == 498
    assert line_total_cents(3, 250) == 750
    assert percent(50, 200) == 25.0
    assert percent(10, 0) == 0.0


def test_to_naive():
    naive = datetime(2024, 1, 1, 12, 0)
    assert to_naive(naive) is naive
    assert to_naive(None) is None
    aware = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert to_naive(aware).tzinfo is None


def test_resolve_date_range_defaults_to_last_30_days():
    start, end = resolve_date_range(None, None)
    assert end - start == timedelta(days=30)


def test_resolve_date_range_rejects_inverted_range():
    with pytest.raises(ValueError):
        resolve_date_range(datetime(2024, 2, 1), datetime(2024, 1, 1))


def test_shift_month():
    assert shift_month(2024, 1, -1) == (2023, 12)
    assert shift_month(2024, 11, 3) == (2025, 2)
    assert shift_month(2024, 6, 0) == (2024, 6)
