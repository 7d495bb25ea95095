from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from sqlalchemy import BigInteger
from sqlalchemy.types import TypeDecorator

CENT = Decimal("0.01")

# Largest amount that fits the signed BIGINT minor-unit column
MAX_MONEY = Decimal(2**63 - 1) * CENT


class Money(TypeDecorator):
    """
    Fixed-precision money column.

    Stored as an integer count of minor units (1/100) so arithmetic in SQL
    stays exact; exposed to Python as a Decimal quantized to two places.
    """

    impl = BigInteger
    cache_ok = True

    def process_bind_param(self, value: Any, dialect) -> Optional[int]:
        if value is None:
            return None
        amount = to_decimal(value)
        return int((amount / CENT).to_integral_value())

    def process_result_value(self, value: Any, dialect) -> Optional[Decimal]:
        if value is None:
            return None
        return (Decimal(int(value)) * CENT).quantize(CENT)


def to_decimal(value: Any) -> Decimal:
    """
    Convert JSON input into an exact Decimal.

    Floats go through their shortest decimal text so 0.1 becomes Decimal("0.1")
    rather than the binary expansion. Raises ValueError on anything else.
    """
    if isinstance(value, bool):
        raise ValueError("boolean is not a monetary amount")
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, float):
        amount = Decimal(repr(value))
    elif isinstance(value, str):
        try:
            amount = Decimal(value.strip())
        except InvalidOperation:
            raise ValueError(f"not a decimal amount: {value!r}")
    else:
        raise ValueError(f"not a decimal amount: {value!r}")

    if not amount.is_finite():
        raise ValueError("amount must be finite")
    return amount


def money_str(value: Optional[Decimal]) -> Optional[str]:
    """Wire form of a money value: decimal string with two fraction digits."""
    if value is None:
        return None
    return str(Decimal(value).quantize(CENT))
