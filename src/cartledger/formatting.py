"""Money formatting for display output."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Any


def to_decimal(value: Any) -> Decimal:
    """Coerce an int/float/str/Decimal to Decimal without float noise."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def number_format(
    value: Any,
    decimals: int = 2,
    decimal_point: str = ".",
    thousands_sep: str = ",",
) -> str:
    """Format a number with grouped thousands, rounding half away from zero.

    >>> number_format(1234567.891)
    '1,234,567.89'
    >>> number_format(1234.5, 2, ",", ".")
    '1.234,50'
    """
    decimals = max(0, int(decimals))
    amount = to_decimal(value).quantize(
        Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP,
    )
    if amount == 0:
        amount = abs(amount)  # no "-0.00"
    text = f"{amount:,.{decimals}f}"
    whole, _, frac = text.partition(".")
    whole = whole.replace(",", thousands_sep)
    return f"{whole}{decimal_point}{frac}" if decimals else whole
