"""
Money and date helpers. Amounts are stored in cents to avoid floating-point precision issues.
"""

from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Tuple, Union
from uuid import uuid4

MAX_AMOUNT_CENTS = 999999999


def dollars_to_cents(amount: Union[float, str, Decimal, int]) -> int:
    """
    Convert dollars to cents.

    Args:
        amount: Amount in dollars (can be float, string, Decimal or whole-dollar int)

    Returns:
        Amount in cents as integer

    Examples:
        >>> dollars_to_cents(10.50)
        1050
        >>> dollars_to_cents("10.50")
        1050
        >>> dollars_to_cents(10.555)
        1056  # Rounds to nearest cent
    """
    if isinstance(amount, bool):
        raise ValueError(f"Invalid amount type: {type(amount)}")
    if isinstance(amount, str):
        amount = Decimal(amount)
    elif isinstance(amount, float):
        amount = Decimal(str(amount))
    elif isinstance(amount, int):
        amount = Decimal(amount)
    elif not isinstance(amount, Decimal):
        raise ValueError(f"Invalid amount type: {type(amount)}")

    cents = (amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(cents)


def cents_to_dollars(amount_cents: int) -> Decimal:
    """
    Convert cents to dollars as Decimal for precise calculations.

    Examples:
        >>> cents_to_dollars(1050)
        Decimal('10.5')
    """
    return Decimal(amount_cents) / 100


def cents_to_dollars_float(amount_cents: Optional[int]) -> Optional[float]:
    """Convert cents to dollars as float for JSON responses. None passes through."""
    if amount_cents is None:
        return None
    return float(cents_to_dollars(amount_cents))


def format_currency(amount_cents: int, currency: str = "USD") -> str:
    """
    Format cents as currency string.

    Examples:
        >>> format_currency(1050)
        '$10.50'
        >>> format_currency(-1050)
        '-$10.50'
        >>> format_currency(1050, "EUR")
        '10.50 EUR'
    """
    dollars = abs(cents_to_dollars(amount_cents))
    sign = "-" if amount_cents < 0 else ""
    if currency == "USD":
        return f"{sign}${dollars:.2f}"
    return f"{sign}{dollars:.2f} {currency}"


def validate_amount(amount: Union[float, str, Decimal, int], allow_zero: bool = False) -> int:
    """
    Validate an amount in dollars and return it in cents.

    Args:
        amount: Amount in dollars
        allow_zero: Whether a zero amount is acceptable

    Returns:
        Amount in cents

    Raises:
        ValueError: If amount is invalid
    """
    try:
        cents = dollars_to_cents(amount)
    except (ArithmeticError, TypeError, ValueError) as e:
        raise ValueError(f"Invalid amount: {e}")

    if cents < 0:
        raise ValueError("Amount cannot be negative")
    if cents == 0 and not allow_zero:
        raise ValueError("Amount must be greater than zero")
    if cents > MAX_AMOUNT_CENTS:
        raise ValueError("Amount exceeds maximum limit")
    return cents


def line_total_cents(quantity: float, unit_price_cents: int) -> int:
    """
    Multiply a quantity by a unit price, rounding to the nearest cent.

    Examples:
        >>> line_total_cents(2.5, 199)
        498
    """
    total = Decimal(str(quantity)) * Decimal(unit_price_cents)
    return int(total.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def percent(part: int, whole: int) -> float:
    """Share of ``part`` in ``whole`` as a percentage, 0 when ``whole`` is not positive."""
    if whole <= 0:
        return 0.0
    return round(part / whole * 100, 2)


def to_naive(value: Optional[datetime]) -> Optional[datetime]:
    """Convert an aware datetime to naive local time; naive values pass through."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def resolve_date_range(
    start_date: Optional[datetime],
    end_date: Optional[datetime],
    default_days: int = 30,
) -> Tuple[datetime, datetime]:
    """Fill in a missing range with the last ``default_days`` days ending now."""
    end = to_naive(end_date) or datetime.now()
    start = to_naive(start_date) or end - timedelta(days=default_days)
    if start > end:
        raise ValueError("start_date must be before end_date")
    return start, end


def month_key(value: datetime) -> str:
    """Bucket key for monthly aggregation, e.g. '2024-03'."""
    return f"{value.year:04d}-{value.month:02d}"


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    """Move a (year, month) pair by ``delta`` months."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def new_id() -> str:
    """Generate a primary key for a new row."""
    return str(uuid4())


def isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None
