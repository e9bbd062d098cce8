"""
Cart types — lines and snapshots.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from decimal import Decimal

from storefront import pricing

# ═══════════════════════════════════════════════════════════════════════════════
# CartLine — One Product In The Cart
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CartLine:
    """
    One distinct product with its quantity.

    unit_price and name are copied from the product when the line is first
    added and never refreshed. stock follows the product every time it is
    added again. quantity is always >= 1.
    """

    product_id: int
    name: str
    unit_price: Decimal
    quantity: int
    stock: int
    extra: Mapping[str, object] = field(default_factory=dict, compare=False)

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    def with_quantity(self, quantity: int, *, stock: int | None = None) -> CartLine:
        return CartLine(
            product_id=self.product_id,
            name=self.name,
            unit_price=self.unit_price,
            quantity=quantity,
            stock=self.stock if stock is None else stock,
            extra=self.extra,
        )


# ═══════════════════════════════════════════════════════════════════════════════
# CartSnapshot — Immutable View For Readers
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CartSnapshot:
    """Immutable copy of the cart plus derived totals."""

    lines: tuple[CartLine, ...]
    subtotal: Decimal
    item_count: int

    @classmethod
    def of(cls, lines: tuple[CartLine, ...]) -> CartSnapshot:
        return cls(
            lines=lines,
            subtotal=pricing.subtotal(lines),
            item_count=sum(line.quantity for line in lines),
        )

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def line_for(self, product_id: int) -> CartLine | None:
        for line in self.lines:
            if line.product_id == product_id:
                return line
        return None

    def __iter__(self) -> Iterator[CartLine]:
        return iter(self.lines)

    def __len__(self) -> int:
        return len(self.lines)


type CartListener = Callable[[CartSnapshot], None]
"""Called synchronously with the new snapshot after every mutation."""


__all__ = ("CartLine", "CartSnapshot", "CartListener")
