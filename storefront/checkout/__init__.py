"""
Checkout — place an order from the cart.

    from storefront import checkout as CO

    checkout = CO.Checkout(api, cart, tax_rate=settings.tax_rate)
    form = CO.CheckoutForm(
        client=CO.NewClient("Ana", "García", "ana@example.com"),
        address=CO.NewAddress("Av. Siempre Viva 742", "Mendoza"),
        payment_type=PaymentType.CASH,
    )
    match await checkout.submit(form):
        case Ok(receipt): ...
        case Error(e): print(e.message)
"""

from __future__ import annotations

from storefront.checkout._types import (
    Stage,
    Phase,
    NewClient,
    ExistingClient,
    NewAddress,
    ExistingAddress,
    CardDetails,
    ClientChoice,
    AddressChoice,
    CheckoutForm,
    CheckoutDraft,
    EmptyCart,
    CheckoutInProgress,
    MissingField,
    AddressWithoutClient,
    InsufficientStock,
    ProductUnavailable,
    StockUnverified,
    ValidationIssue,
    ValidationError,
    RemoteCreationError,
    CheckoutError,
    CheckoutReceipt,
)
from storefront.checkout._machine import PhaseObserver, InvalidTransition, CheckoutMachine
from storefront.checkout._validate import (
    validate_form,
    check_snapshot_stock,
    validate_draft,
    check_live_stock,
)
from storefront.checkout._orchestrator import Checkout, make_bill_number

__all__ = (
    "Stage",
    "Phase",
    "NewClient",
    "ExistingClient",
    "NewAddress",
    "ExistingAddress",
    "CardDetails",
    "ClientChoice",
    "AddressChoice",
    "CheckoutForm",
    "CheckoutDraft",
    "EmptyCart",
    "CheckoutInProgress",
    "MissingField",
    "AddressWithoutClient",
    "InsufficientStock",
    "ProductUnavailable",
    "StockUnverified",
    "ValidationIssue",
    "ValidationError",
    "RemoteCreationError",
    "CheckoutError",
    "CheckoutReceipt",
    "PhaseObserver",
    "InvalidTransition",
    "CheckoutMachine",
    "validate_form",
    "check_snapshot_stock",
    "validate_draft",
    "check_live_stock",
    "Checkout",
    "make_bill_number",
)
