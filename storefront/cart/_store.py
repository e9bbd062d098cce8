"""
Cart store — the single owner of the cart lines.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from decimal import Decimal

from storefront.config import DEFAULT_CART_KEY
from storefront.pricing import to_money
from storefront.repo import Product
from storefront.cart._types import CartLine, CartSnapshot, CartListener
from storefront.cart._storage import CartStorage, CorruptCart, decode_lines, encode_lines

logger = logging.getLogger(__name__)

_PRODUCT_FIELDS = {"id_key", "name", "price", "stock"}


class CartStore:
    """
    Authoritative, mutable list of cart lines.

    Only this object mutates the cart. Readers take a snapshot(); UI code
    subscribes to be told about every change. With a storage the full cart
    is written after each mutation and restored on construction; stored
    data that cannot be read yields an empty cart.

    Example:
        cart = CartStore(FileStorage("~/.storefront"))
        cart.add_item(product, 2)
        cart.update_quantity(product.id_key, 0)   # removes the line
        snapshot = cart.snapshot()
    """

    def __init__(
        self,
        storage: CartStorage | None = None,
        *,
        key: str = DEFAULT_CART_KEY,
    ) -> None:
        self._storage = storage
        self._key = key
        self._listeners: list[CartListener] = []
        # dict keeps insertion order
        self._lines: dict[int, CartLine] = {
            line.product_id: line for line in self._restore()
        }

    # ───────────────────────────────────────────────────────────────────────────
    # Mutations
    # ───────────────────────────────────────────────────────────────────────────

    def add_item(self, product: Product, quantity: int = 1) -> None:
        """
        Add quantity of product. Quantities below 1 are treated as 1.

        An existing line keeps its original price snapshot and grows; its
        stock is taken from the product passed in.
        """
        quantity = max(quantity, 1)
        existing = self._lines.get(product.id_key)
        if existing is not None:
            self._lines[product.id_key] = existing.with_quantity(
                existing.quantity + quantity, stock=product.stock
            )
        else:
            self._lines[product.id_key] = CartLine(
                product_id=product.id_key,
                name=product.name,
                unit_price=to_money(product.price),
                quantity=quantity,
                stock=product.stock,
                extra=product.model_dump(mode="json", exclude=_PRODUCT_FIELDS),
            )
        self._changed()

    def remove_item(self, product_id: int) -> None:
        if self._lines.pop(product_id, None) is not None:
            self._changed()

    def update_quantity(self, product_id: int, quantity: int) -> None:
        """Set quantity. Below 1 removes the line. No stock bound here."""
        if quantity < 1:
            self.remove_item(product_id)
            return
        existing = self._lines.get(product_id)
        if existing is None or existing.quantity == quantity:
            return
        self._lines[product_id] = existing.with_quantity(quantity)
        self._changed()

    def clear(self) -> None:
        self._lines.clear()
        self._changed()

    # ───────────────────────────────────────────────────────────────────────────
    # Reads
    # ───────────────────────────────────────────────────────────────────────────

    def snapshot(self) -> CartSnapshot:
        return CartSnapshot.of(tuple(self._lines.values()))

    @property
    def lines(self) -> tuple[CartLine, ...]:
        return tuple(self._lines.values())

    @property
    def subtotal(self) -> Decimal:
        return self.snapshot().subtotal

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    def get(self, product_id: int) -> CartLine | None:
        return self._lines.get(product_id)

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._lines

    def __iter__(self) -> Iterator[CartLine]:
        return iter(self.lines)

    def __len__(self) -> int:
        return len(self._lines)

    # ───────────────────────────────────────────────────────────────────────────
    # Observation
    # ───────────────────────────────────────────────────────────────────────────

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        """Register listener; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ───────────────────────────────────────────────────────────────────────────
    # Persistence
    # ───────────────────────────────────────────────────────────────────────────

    def _restore(self) -> tuple[CartLine, ...]:
        if self._storage is None:
            return ()
        try:
            data = self._storage.read(self._key)
            if data is None:
                return ()
            return decode_lines(data)
        except (CorruptCart, OSError) as exc:
            logger.warning("Stored cart %r unreadable, starting empty: %s", self._key, exc)
            return ()

    def _persist(self, snapshot: CartSnapshot) -> None:
        if self._storage is None:
            return
        try:
            self._storage.write(self._key, encode_lines(snapshot.lines))
        except OSError as exc:
            # Memory stays authoritative
            logger.warning("Could not persist cart %r: %s", self._key, exc)

    def _changed(self) -> None:
        snapshot = self.snapshot()
        self._persist(snapshot)
        for listener in tuple(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Cart listener %r failed", listener)


__all__ = ("CartStore",)
