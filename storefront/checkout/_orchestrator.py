"""
Checkout orchestrator — turns a cart into backend records.

Sequence, each step needing the id from the one before:

    client → address → bill → order → order lines (concurrent)

The backend offers no multi-entity transaction. A failure stops the
sequence, reports the stage and leaves already created records in place;
the cart is cleared only after the very last step succeeded.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from datetime import datetime
from decimal import Decimal

from kungfu import Result, Ok, Error

from storefront import saga as S
from storefront.cart import CartStore
from storefront.config import DEFAULT_TAX_RATE, Settings
from storefront.repo import (
    Address,
    AddressInput,
    BillInput,
    Client,
    ClientInput,
    Entity,
    OrderDetailInput,
    OrderInput,
    OrderStatus,
    RepoError,
    ShopApi,
)
from storefront.profile import owned_address
from storefront.checkout._machine import CheckoutMachine, PhaseObserver
from storefront.checkout._types import (
    AddressChoice,
    CheckoutDraft,
    CheckoutError,
    CheckoutForm,
    CheckoutInProgress,
    CheckoutReceipt,
    ClientChoice,
    ExistingAddress,
    ExistingClient,
    InsufficientStock,
    NewAddress,
    NewClient,
    Phase,
    RemoteCreationError,
    Stage,
    ValidationError,
)
from storefront.checkout._validate import check_live_stock, validate_draft

logger = logging.getLogger(__name__)

type Clock = Callable[[], datetime]
type BillNumbers = Callable[[datetime], str]


def make_bill_number(now: datetime) -> str:
    """Display number, unique enough: FAC-<epoch millis>-<0..999>."""
    return f"FAC-{int(now.timestamp() * 1000)}-{random.randrange(1000)}"


def _by_id(entity: Entity) -> int:
    return entity.id_key


class Checkout:
    """
    Places orders for one cart.

    Example:
        checkout = Checkout(api, cart, tax_rate=Decimal("0.21"))
        match await checkout.submit(form):
            case Ok(receipt):
                show_order(receipt.order_id)
            case Error(e):
                toast(e.message)   # cart is untouched, user may resubmit
    """

    def __init__(
        self,
        api: ShopApi,
        cart: CartStore,
        *,
        tax_rate: Decimal = DEFAULT_TAX_RATE,
        refresh_stock: bool = True,
        clock: Clock = datetime.now,
        bill_numbers: BillNumbers = make_bill_number,
        observer: PhaseObserver | None = None,
    ) -> None:
        self._api = api
        self._cart = cart
        self._tax_rate = tax_rate
        self._refresh_stock = refresh_stock
        self._clock = clock
        self._bill_numbers = bill_numbers
        self._observer = observer
        self._submitting = False
        self.last_machine: CheckoutMachine | None = None

    @classmethod
    def from_settings(
        cls,
        api: ShopApi,
        cart: CartStore,
        settings: Settings,
        *,
        observer: PhaseObserver | None = None,
    ) -> Checkout:
        return cls(
            api,
            cart,
            tax_rate=settings.tax_rate,
            refresh_stock=settings.refresh_stock,
            observer=observer,
        )

    def preview(self, form: CheckoutForm) -> CheckoutDraft:
        """Draft for display: current cart and totals, nothing sent."""
        return CheckoutDraft.prepare(form, self._cart.snapshot(), self._tax_rate)

    async def submit(self, form: CheckoutForm) -> Result[CheckoutReceipt, CheckoutError]:
        """
        Run one checkout attempt.

        Never retries and never raises for expected failures: the result is
        Ok(receipt) or Error(ValidationError | RemoteCreationError).
        """
        if self._submitting:
            return Error(ValidationError((CheckoutInProgress(),)))

        self._submitting = True
        try:
            return await self._attempt(form)
        finally:
            self._submitting = False

    async def _attempt(self, form: CheckoutForm) -> Result[CheckoutReceipt, CheckoutError]:
        machine = CheckoutMachine(self._observer)
        self.last_machine = machine
        draft = self.preview(form)

        machine.advance(Phase.VALIDATING_STOCK)
        issues = validate_draft(draft)
        if self._refresh_stock and all(isinstance(i, InsufficientStock) for i in issues):
            # Cart stock may be stale; the backend's figures replace it
            issues = await check_live_stock(self._api.products, draft.snapshot)
        if issues:
            machine.fail()
            error = ValidationError(tuple(issues))
            logger.info("Checkout refused: %s", error.message)
            return Error(error)

        result = await self._create(draft, machine)
        match result:
            case Ok(receipt):
                machine.advance(Phase.SUCCEEDED)
                self._cart.clear()
                logger.info(
                    "Checkout complete: order %s, bill %s, %d lines, total %s",
                    receipt.order_id,
                    receipt.bill_number,
                    len(receipt.line_ids),
                    receipt.totals.grand_total,
                )
                return Ok(receipt)
            case Error(saga_error):
                failure = RemoteCreationError.from_saga(saga_error)
                machine.fail(failure.stage)
                logger.warning(
                    "Checkout failed at %s: %s; left behind: %s",
                    failure.stage.value,
                    failure.cause,
                    ", ".join(f"{c.stage}#{c.id_key}" for c in failure.created) or "nothing",
                )
                return Error(failure)

    async def _create(
        self, draft: CheckoutDraft, machine: CheckoutMachine
    ) -> Result[CheckoutReceipt, S.SagaError[RepoError]]:
        saga = S.Saga()
        form = draft.form
        now = self._clock()

        machine.advance(Phase.CREATING_CLIENT)
        match await saga.run(self._client_step(form.client)):
            case Error(e):
                return Error(e)
            case Ok(client):
                client_id = client.id_key

        machine.advance(Phase.CREATING_ADDRESS)
        match await saga.run(self._address_step(form.address, client_id)):
            case Error(e):
                return Error(e)
            case Ok(address):
                address_id = address.id_key

        # Totals come from the snapshot, not from current remote prices
        totals = draft.totals

        machine.advance(Phase.CREATING_BILL)
        bill_payload = BillInput(
            bill_number=self._bill_numbers(now),
            date=now.date(),
            total=totals.grand_total,
            payment_type=form.payment_type,
            client_id=client_id,
        )
        match await saga.run(
            S.step(Stage.BILL.value, self._api.bills.create(bill_payload), id_of=_by_id)
        ):
            case Error(e):
                return Error(e)
            case Ok(bill):
                pass

        machine.advance(Phase.CREATING_ORDER)
        order_payload = OrderInput(
            date=now.date(),
            total=totals.grand_total,
            delivery_method=form.delivery_method,
            status=OrderStatus.PENDING,
            client_id=client_id,
            bill_id=bill.id_key,
        )
        match await saga.run(
            S.step(Stage.ORDER.value, self._api.orders.create(order_payload), id_of=_by_id)
        ):
            case Error(e):
                return Error(e)
            case Ok(order):
                pass

        machine.advance(Phase.CREATING_LINES)
        line_steps = tuple(
            S.step(
                Stage.LINE_ITEMS.value,
                self._api.order_details.create(
                    OrderDetailInput(
                        order_id=order.id_key,
                        product_id=line.product_id,
                        quantity=line.quantity,
                        price=line.unit_price,
                    )
                ),
                id_of=_by_id,
            )
            for line in draft.snapshot.lines
        )
        match await saga.run_all(Stage.LINE_ITEMS.value, line_steps):
            case Error(e):
                return Error(e)
            case Ok(details):
                pass

        return Ok(CheckoutReceipt(
            order_id=order.id_key,
            client_id=client_id,
            address_id=address_id,
            bill_id=bill.id_key,
            bill_number=bill.bill_number,
            line_ids=tuple(d.id_key for d in details),
            totals=totals,
        ))

    def _client_step(self, choice: ClientChoice) -> S.SagaStep[Client, RepoError]:
        match choice:
            case NewClient():
                payload = ClientInput(
                    name=choice.name.strip(),
                    lastname=choice.lastname.strip(),
                    email=choice.email.strip(),
                    telephone=choice.telephone,
                )
                return S.step(Stage.CLIENT.value, self._api.clients.create(payload), id_of=_by_id)
            case ExistingClient(id_key=id_key):
                # Looked up, not created: nothing to record in the ledger
                return S.step(Stage.CLIENT.value, self._api.clients.get_one(id_key))

    def _address_step(
        self, choice: AddressChoice, client_id: int
    ) -> S.SagaStep[Address, RepoError]:
        match choice:
            case NewAddress():
                payload = AddressInput(
                    street=choice.street.strip(),
                    city=choice.city.strip(),
                    number=choice.number,
                    client_id=client_id,
                )
                return S.step(
                    Stage.ADDRESS.value, self._api.addresses.create(payload), id_of=_by_id
                )
            case ExistingAddress(id_key=id_key):
                return S.step(
                    Stage.ADDRESS.value, owned_address(self._api, id_key, client_id)
                )


__all__ = ("Checkout", "make_bill_number", "Clock", "BillNumbers")
