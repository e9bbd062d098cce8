"""
Checkout validation — everything that must hold before the first creation.
"""

from __future__ import annotations

from kungfu import LazyCoroResult, Result, Ok, Error
from combinators import parallel as C_parallel

from storefront.cart import CartLine, CartSnapshot
from storefront.repo import Product, RepoError, Repository
from storefront.checkout._types import (
    AddressWithoutClient,
    CheckoutDraft,
    CheckoutForm,
    EmptyCart,
    ExistingAddress,
    ExistingClient,
    InsufficientStock,
    MissingField,
    NewAddress,
    NewClient,
    ProductUnavailable,
    StockUnverified,
    ValidationIssue,
)


def _blank(value: str) -> bool:
    return not value.strip()


def validate_form(form: CheckoutForm) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []

    match form.client:
        case NewClient(name=name, lastname=lastname, email=email):
            for label, value in (("First name", name), ("Last name", lastname), ("Email", email)):
                if _blank(value):
                    issues.append(MissingField(label))
        case ExistingClient():
            pass

    match form.address:
        case NewAddress(street=street, city=city):
            for label, value in (("Street", street), ("City", city)):
                if _blank(value):
                    issues.append(MissingField(label))
        case ExistingAddress():
            if not isinstance(form.client, ExistingClient):
                issues.append(AddressWithoutClient())

    if form.payment_type.is_card:
        card = form.card
        if card is None:
            issues.append(MissingField("Card details"))
        else:
            for label, value in (
                ("Card number", card.number),
                ("Card expiry", card.expiry),
                ("Card CVV", card.cvv),
            ):
                if _blank(value):
                    issues.append(MissingField(label))

    return issues


def check_snapshot_stock(snapshot: CartSnapshot) -> list[ValidationIssue]:
    """Stock as it was when each product went into the cart. No I/O."""
    return [
        InsufficientStock(line.product_id, line.name, line.quantity, line.stock)
        for line in snapshot.lines
        if line.quantity > line.stock
    ]


def validate_draft(draft: CheckoutDraft) -> list[ValidationIssue]:
    """All local checks. An empty cart short-circuits the rest."""
    if draft.snapshot.is_empty:
        return [EmptyCart()]
    return [*validate_form(draft.form), *check_snapshot_stock(draft.snapshot)]


async def check_live_stock(
    products: Repository[Product],
    snapshot: CartSnapshot,
) -> list[ValidationIssue]:
    """
    Re-read every product and compare against its current stock.

    All products are fetched concurrently; every problem is reported, not
    only the first. Reads only: nothing is created here.
    """

    def probe(line: CartLine) -> LazyCoroResult[ValidationIssue | None, RepoError]:
        async def impl() -> Result[ValidationIssue | None, RepoError]:
            result = await products.get_one(line.product_id)
            match result:
                case Ok(product) if line.quantity > product.stock:
                    return Ok(InsufficientStock(
                        line.product_id, line.name, line.quantity, product.stock
                    ))
                case Ok(_):
                    return Ok(None)
                case Error(e) if e.is_not_found:
                    return Ok(ProductUnavailable(line.product_id, line.name))
                case Error(e):
                    return Ok(StockUnverified(line.product_id, line.name, e.message))
        return LazyCoroResult(impl)

    if not snapshot.lines:
        return []

    result = await C_parallel(*[probe(line) for line in snapshot.lines])
    match result:
        case Ok(found):
            return [issue for issue in found if issue is not None]
        case Error(e):
            # probes map every failure to an issue
            raise RuntimeError(f"stock probe failed unexpectedly: {e}")


__all__ = (
    "validate_form",
    "check_snapshot_stock",
    "validate_draft",
    "check_live_stock",
)
