"""
Pricing — subtotal, tax and grand total.

Pure functions over Decimal. One rounding rule everywhere: two decimal
places, ROUND_HALF_UP. Tax and grand total are rounded independently; the
subtotal is already in cents, so tax + subtotal == grand_total exactly.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Protocol

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


class Priced(Protocol):
    @property
    def unit_price(self) -> Decimal: ...

    @property
    def quantity(self) -> int: ...


@dataclass(frozen=True, slots=True)
class Totals:
    subtotal: Decimal
    tax: Decimal
    grand_total: Decimal
    tax_rate: Decimal


def round2(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def to_money(value: Decimal | float | int | str) -> Decimal:
    """Decimal from any numeric input; floats go through str() to keep 0.1 as 0.1."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def subtotal(lines: Iterable[Priced]) -> Decimal:
    return round2(sum((line.unit_price * line.quantity for line in lines), ZERO))


def tax(amount: Decimal, rate: Decimal) -> Decimal:
    return round2(amount * rate)


def grand_total(amount: Decimal, tax_amount: Decimal) -> Decimal:
    return round2(amount + tax_amount)


def compute_totals(lines: Iterable[Priced], rate: Decimal) -> Totals:
    """
    Example:
        compute_totals(cart.snapshot().lines, Decimal("0.21"))
        # Totals(subtotal=35.00, tax=7.35, grand_total=42.35, ...)
    """
    sub = subtotal(lines)
    tax_amount = tax(sub, rate)
    return Totals(
        subtotal=sub,
        tax=tax_amount,
        grand_total=grand_total(sub, tax_amount),
        tax_rate=rate,
    )


__all__ = (
    "Priced",
    "Totals",
    "round2",
    "to_money",
    "subtotal",
    "tax",
    "grand_total",
    "compute_totals",
)
