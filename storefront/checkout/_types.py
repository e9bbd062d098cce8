"""
Checkout types — inputs, phases, errors, receipt.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from storefront.cart import CartSnapshot
from storefront.pricing import Totals, compute_totals
from storefront.repo import DeliveryMethod, PaymentType, RepoError
from storefront.saga import Created, SagaError

# ═══════════════════════════════════════════════════════════════════════════════
# Stages And Phases
# ═══════════════════════════════════════════════════════════════════════════════


class Stage(Enum):
    """Remote creation step. The value is what users and logs see."""

    CLIENT = "client"
    ADDRESS = "address"
    BILL = "bill"
    ORDER = "order"
    LINE_ITEMS = "line-items"

    @property
    def label(self) -> str:
        return _STAGE_LABELS[self]


_STAGE_LABELS = {
    Stage.CLIENT: "customer record",
    Stage.ADDRESS: "delivery address",
    Stage.BILL: "bill",
    Stage.ORDER: "order",
    Stage.LINE_ITEMS: "order items",
}


class Phase(Enum):
    """
    Checkout state.

    Lifecycle:
        IDLE → VALIDATING_STOCK → CREATING_CLIENT → CREATING_ADDRESS
             → CREATING_BILL → CREATING_ORDER → CREATING_LINES → SUCCEEDED
        any non-terminal phase → FAILED
    """

    IDLE = 0
    VALIDATING_STOCK = 1
    CREATING_CLIENT = 2
    CREATING_ADDRESS = 3
    CREATING_BILL = 4
    CREATING_ORDER = 5
    CREATING_LINES = 6
    SUCCEEDED = 7
    FAILED = 8

    @property
    def is_terminal(self) -> bool:
        return self in (Phase.SUCCEEDED, Phase.FAILED)


# ═══════════════════════════════════════════════════════════════════════════════
# Form Inputs
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class NewClient:
    name: str
    lastname: str
    email: str
    telephone: str = "0000000000"


@dataclass(frozen=True, slots=True)
class ExistingClient:
    id_key: int


@dataclass(frozen=True, slots=True)
class NewAddress:
    street: str
    city: str
    number: str = "S/N"


@dataclass(frozen=True, slots=True)
class ExistingAddress:
    id_key: int


@dataclass(frozen=True, slots=True)
class CardDetails:
    """Checked for presence only; never sent to the backend."""

    number: str = field(repr=False)
    expiry: str
    cvv: str = field(repr=False)


type ClientChoice = NewClient | ExistingClient
type AddressChoice = NewAddress | ExistingAddress


@dataclass(frozen=True, slots=True)
class CheckoutForm:
    """What the customer entered on the checkout page."""

    client: ClientChoice
    address: AddressChoice
    payment_type: PaymentType = PaymentType.CREDIT
    delivery_method: DeliveryMethod = DeliveryMethod.HOME_DELIVERY
    card: CardDetails | None = None


@dataclass(frozen=True, slots=True)
class CheckoutDraft:
    """
    Everything one checkout attempt works from.

    Built once per attempt and discarded afterwards. The snapshot is
    frozen, so cart edits during the attempt do not leak in.
    """

    form: CheckoutForm
    snapshot: CartSnapshot
    totals: Totals

    @classmethod
    def prepare(
        cls, form: CheckoutForm, snapshot: CartSnapshot, tax_rate: Decimal
    ) -> CheckoutDraft:
        return cls(form, snapshot, compute_totals(snapshot.lines, tax_rate))


# ═══════════════════════════════════════════════════════════════════════════════
# Validation Issues
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class EmptyCart:
    @property
    def message(self) -> str:
        return "Your cart is empty."


@dataclass(frozen=True, slots=True)
class CheckoutInProgress:
    @property
    def message(self) -> str:
        return "This order is already being placed."


@dataclass(frozen=True, slots=True)
class MissingField:
    name: str

    @property
    def message(self) -> str:
        return f"{self.name} is required."


@dataclass(frozen=True, slots=True)
class AddressWithoutClient:
    @property
    def message(self) -> str:
        return "A saved address can only be used with a registered customer."


@dataclass(frozen=True, slots=True)
class InsufficientStock:
    product_id: int
    name: str
    requested: int
    available: int

    @property
    def message(self) -> str:
        return f"{self.name}: only {self.available} left, {self.requested} requested."


@dataclass(frozen=True, slots=True)
class ProductUnavailable:
    product_id: int
    name: str

    @property
    def message(self) -> str:
        return f"{self.name} is no longer available."


@dataclass(frozen=True, slots=True)
class StockUnverified:
    product_id: int
    name: str
    reason: str

    @property
    def message(self) -> str:
        return f"Could not check stock for {self.name}: {self.reason}"


type ValidationIssue = (
    EmptyCart
    | CheckoutInProgress
    | MissingField
    | AddressWithoutClient
    | InsufficientStock
    | ProductUnavailable
    | StockUnverified
)

# ═══════════════════════════════════════════════════════════════════════════════
# Checkout Errors
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class ValidationError:
    """Checkout refused before any record was created."""

    issues: tuple[ValidationIssue, ...]

    @property
    def message(self) -> str:
        return "Cannot place the order. " + " ".join(i.message for i in self.issues)

    @property
    def stock_issues(self) -> tuple[InsufficientStock, ...]:
        return tuple(i for i in self.issues if isinstance(i, InsufficientStock))


@dataclass(frozen=True, slots=True)
class RemoteCreationError:
    """
    A creation step failed; later steps were not attempted.

    created names the records that were already made and now exist on
    their own. Nothing is rolled back; the cart is unchanged.
    """

    stage: Stage
    cause: RepoError
    created: tuple[Created, ...] = ()

    @classmethod
    def from_saga(cls, error: SagaError[RepoError]) -> RemoteCreationError:
        return cls(stage=Stage(error.stage), cause=error.error, created=error.created)

    @property
    def message(self) -> str:
        return f"Could not create the {self.stage.label}: {self.cause.message}"

    @property
    def orphaned(self) -> bool:
        return bool(self.created)


type CheckoutError = ValidationError | RemoteCreationError


# ═══════════════════════════════════════════════════════════════════════════════
# Receipt
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CheckoutReceipt:
    order_id: int
    client_id: int
    address_id: int
    bill_id: int
    bill_number: str
    line_ids: tuple[int, ...]
    totals: Totals


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
)
