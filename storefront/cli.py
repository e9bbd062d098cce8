"""
Command line storefront.

Each command is a thin composition of the same building blocks:

┌─────────────────────────────────────────────────────────────────────────┐
│  COMMAND      USES                                   TALKS TO BACKEND   │
├─────────────────────────────────────────────────────────────────────────┤
│  products     products repository                    yes                │
│  cart         CartStore + FileStorage                only `cart add`    │
│  checkout     Checkout (validation, saga, machine)   yes                │
│  orders       profile.client_orders                  yes                │
│  address      profile address book                   yes                │
│  client       profile.update_client                  yes                │
└─────────────────────────────────────────────────────────────────────────┘

Exit codes: 0 success, 1 the request failed, 2 bad usage or configuration.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum

from kungfu import Ok, Error

from storefront import checkout as CO
from storefront.cart import CartStore, FileStorage
from storefront.config import ConfigError, Settings, load_settings
from storefront.pricing import compute_totals
from storefront.profile import (
    ClientProfile,
    add_address,
    client_orders,
    remove_address,
    update_address,
    update_client,
)
from storefront.repo import Address, DeliveryMethod, PaymentType, ShopApi

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2

type Connect = Callable[[Settings], ShopApi]


@dataclass(frozen=True, slots=True)
class _Context:
    settings: Settings
    cart: CartStore
    connect: Connect


# ═══════════════════════════════════════════════════════════════════════════════
# Display
# ═══════════════════════════════════════════════════════════════════════════════


def _fail(message: str) -> int:
    print(f"  ✗ {message}")
    return EXIT_FAILED


def _print_cart(ctx: _Context) -> None:
    snapshot = ctx.cart.snapshot()
    if snapshot.is_empty:
        print("  Cart is empty.")
        return
    for line in snapshot.lines:
        print(
            f"  [{line.product_id:>5}] {line.name:24} "
            f"{line.quantity:>3} x ${line.unit_price:>8.2f} = ${line.line_total:>9.2f}"
        )
    totals = compute_totals(snapshot.lines, ctx.settings.tax_rate)
    print(f"  {'Items:':12} {snapshot.item_count}")
    print(f"  {'Subtotal:':12} ${totals.subtotal:>9.2f}")
    print(f"  {'Tax:':12} ${totals.tax:>9.2f}")
    print(f"  {'Total:':12} ${totals.grand_total:>9.2f}")


def _print_address(address: Address) -> None:
    print(f"  [{address.id_key:>5}] {address.street} {address.number or 'S/N'}, {address.city}")


# ═══════════════════════════════════════════════════════════════════════════════
# Commands
# ═══════════════════════════════════════════════════════════════════════════════


async def cmd_products(args: argparse.Namespace, ctx: _Context) -> int:
    async with ctx.connect(ctx.settings) as api:
        result = await api.products.list_all()

    match result:
        case Ok(products):
            shown = [
                p for p in products
                if args.category is None or p.category_id == args.category
            ]
            if not shown:
                print("  No products.")
            for p in shown:
                print(f"  [{p.id_key:>5}] {p.name:24} ${p.price:>8.2f}  stock {p.stock}")
            return EXIT_OK
        case Error(e):
            return _fail(e.message)


async def cmd_cart(args: argparse.Namespace, ctx: _Context) -> int:
    cart = ctx.cart
    match args.action:
        case "show":
            _print_cart(ctx)
        case "add":
            async with ctx.connect(ctx.settings) as api:
                result = await api.products.get_one(args.product_id)
            match result:
                case Ok(product):
                    cart.add_item(product, args.quantity)
                    print(f"  ✓ Added {product.name}")
                case Error(e) if e.is_not_found:
                    return _fail(f"Product {args.product_id} does not exist.")
                case Error(e):
                    return _fail(e.message)
        case "remove":
            cart.remove_item(args.product_id)
        case "set":
            if args.product_id not in cart:
                return _fail(f"Product {args.product_id} is not in the cart.")
            cart.update_quantity(args.product_id, args.quantity)
        case "clear":
            cart.clear()
    return EXIT_OK


def _checkout_form(args: argparse.Namespace) -> CO.CheckoutForm:
    client: CO.ClientChoice
    if args.client_id is not None:
        client = CO.ExistingClient(args.client_id)
    else:
        client = CO.NewClient(args.name or "", args.lastname or "", args.email or "")

    address: CO.AddressChoice
    if args.address_id is not None:
        address = CO.ExistingAddress(args.address_id)
    else:
        address = CO.NewAddress(args.street or "", args.city or "", number=args.number)

    card = None
    if args.card_number or args.card_expiry or args.card_cvv:
        card = CO.CardDetails(
            number=args.card_number or "",
            expiry=args.card_expiry or "",
            cvv=args.card_cvv or "",
        )

    return CO.CheckoutForm(
        client=client,
        address=address,
        payment_type=args.payment,
        delivery_method=args.delivery,
        card=card,
    )


async def cmd_checkout(args: argparse.Namespace, ctx: _Context) -> int:
    form = _checkout_form(args)
    async with ctx.connect(ctx.settings) as api:
        checkout = CO.Checkout.from_settings(api, ctx.cart, ctx.settings)
        result = await checkout.submit(form)

    match result:
        case Ok(receipt):
            print(f"  ✓ Order {receipt.order_id} placed, bill {receipt.bill_number}")
            print(f"  {'Subtotal:':12} ${receipt.totals.subtotal:>9.2f}")
            print(f"  {'Tax:':12} ${receipt.totals.tax:>9.2f}")
            print(f"  {'Total:':12} ${receipt.totals.grand_total:>9.2f}")
            return EXIT_OK
        case Error(CO.ValidationError() as e):
            print("  ✗ Cannot place the order:")
            for issue in e.issues:
                print(f"    • {issue.message}")
            return EXIT_FAILED
        case Error(CO.RemoteCreationError() as e):
            _fail(e.message)
            for created in e.created:
                print(f"    left behind: {created.stage} #{created.id_key}")
            print("  Your cart was kept; you can try again.")
            return EXIT_FAILED
        case Error(e):
            return _fail(e.message)


async def cmd_orders(args: argparse.Namespace, ctx: _Context) -> int:
    async with ctx.connect(ctx.settings) as api:
        result = await client_orders(api, args.client_id)

    match result:
        case Ok(profile):
            client = profile.client
            print(f"  {client.name} {client.lastname} <{client.email}>")
            if not profile.orders:
                print("  No orders yet.")
            for order in profile.orders:
                bill = profile.bill_for(order)
                number = bill.bill_number if bill is not None else "-"
                print(
                    f"  #{order.id_key:<6} {order.date.isoformat()}  "
                    f"${order.total:>9.2f}  {order.status.name.lower():12} {number}"
                )
            return EXIT_OK
        case Error(e) if e.is_not_found:
            return _fail(f"Client {args.client_id} does not exist.")
        case Error(e):
            return _fail(e.message)


async def cmd_address(args: argparse.Namespace, ctx: _Context) -> int:
    async with ctx.connect(ctx.settings) as api:
        match args.action:
            case "list":
                result = await client_orders(api, args.client_id)
            case "add":
                result = await add_address(
                    api, args.client_id, args.street, args.city, number=args.number
                )
            case "edit":
                result = await update_address(
                    api,
                    args.client_id,
                    args.address_id,
                    street=args.street,
                    city=args.city,
                    number=args.number,
                )
            case "remove":
                result = await remove_address(api, args.client_id, args.address_id)

    match result:
        case Ok(ClientProfile() as profile):
            if not profile.addresses:
                print("  No addresses.")
            for address in profile.addresses:
                _print_address(address)
        case Ok(None):
            print(f"  ✓ Address {args.address_id} removed")
        case Ok(address):
            print("  ✓ Address saved")
            _print_address(address)
        case Error(e) if e.is_not_found:
            return _fail(f"Not found: {e.message}")
        case Error(e):
            return _fail(e.message)
    return EXIT_OK


async def cmd_client(args: argparse.Namespace, ctx: _Context) -> int:
    async with ctx.connect(ctx.settings) as api:
        result = await update_client(
            api,
            args.client_id,
            name=args.name,
            lastname=args.lastname,
            email=args.email,
            telephone=args.telephone,
        )

    match result:
        case Ok(client):
            print(f"  ✓ {client.name} {client.lastname} <{client.email}>")
            return EXIT_OK
        case Error(e) if e.is_not_found:
            return _fail(f"Client {args.client_id} does not exist.")
        case Error(e):
            return _fail(e.message)


# ═══════════════════════════════════════════════════════════════════════════════
# Parsing
# ═══════════════════════════════════════════════════════════════════════════════


def _enum_arg[E: IntEnum](enum: type[E]) -> Callable[[str], E]:
    """Parse 'bank-transfer' / 'BANK_TRANSFER' into the enum member."""
    def parse(value: str) -> E:
        try:
            return enum[value.strip().upper().replace("-", "_")]
        except KeyError:
            names = ", ".join(m.name.lower().replace("_", "-") for m in enum)
            raise argparse.ArgumentTypeError(f"choose from: {names}") from None
    return parse


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="storefront", description="Shop from the terminal.")
    commands = parser.add_subparsers(dest="command", required=True)

    products = commands.add_parser("products", help="list the catalog")
    products.add_argument("--category", type=int, default=None)
    products.set_defaults(handler=cmd_products)

    cart = commands.add_parser("cart", help="show or edit the cart")
    actions = cart.add_subparsers(dest="action", required=True)
    actions.add_parser("show")
    add = actions.add_parser("add")
    add.add_argument("product_id", type=int)
    add.add_argument("-q", "--quantity", type=int, default=1)
    remove = actions.add_parser("remove")
    remove.add_argument("product_id", type=int)
    set_ = actions.add_parser("set")
    set_.add_argument("product_id", type=int)
    set_.add_argument("quantity", type=int)
    actions.add_parser("clear")
    cart.set_defaults(handler=cmd_cart)

    checkout = commands.add_parser("checkout", help="place an order from the cart")
    checkout.add_argument("--client-id", type=int, default=None)
    checkout.add_argument("--name")
    checkout.add_argument("--lastname")
    checkout.add_argument("--email")
    checkout.add_argument("--address-id", type=int, default=None)
    checkout.add_argument("--street")
    checkout.add_argument("--city")
    checkout.add_argument("--number", default="S/N")
    checkout.add_argument(
        "--payment", type=_enum_arg(PaymentType), default=PaymentType.CASH
    )
    checkout.add_argument(
        "--delivery", type=_enum_arg(DeliveryMethod), default=DeliveryMethod.HOME_DELIVERY
    )
    checkout.add_argument("--card-number")
    checkout.add_argument("--card-expiry")
    checkout.add_argument("--card-cvv")
    checkout.set_defaults(handler=cmd_checkout)

    orders = commands.add_parser("orders", help="orders and bills of a client")
    orders.add_argument("--client-id", type=int, required=True)
    orders.set_defaults(handler=cmd_orders)

    address = commands.add_parser("address", help="a client's saved addresses")
    address_actions = address.add_subparsers(dest="action", required=True)
    listing = address_actions.add_parser("list")
    listing.add_argument("--client-id", type=int, required=True)
    new = address_actions.add_parser("add")
    new.add_argument("--client-id", type=int, required=True)
    new.add_argument("--street", required=True)
    new.add_argument("--city", required=True)
    new.add_argument("--number")
    edit = address_actions.add_parser("edit")
    edit.add_argument("address_id", type=int)
    edit.add_argument("--client-id", type=int, required=True)
    edit.add_argument("--street")
    edit.add_argument("--city")
    edit.add_argument("--number")
    drop = address_actions.add_parser("remove")
    drop.add_argument("address_id", type=int)
    drop.add_argument("--client-id", type=int, required=True)
    address.set_defaults(handler=cmd_address)

    client = commands.add_parser("client", help="update a client's details")
    client.add_argument("client_id", type=int)
    client.add_argument("--name")
    client.add_argument("--lastname")
    client.add_argument("--email")
    client.add_argument("--telephone")
    client.set_defaults(handler=cmd_client)

    return parser


# ═══════════════════════════════════════════════════════════════════════════════
# Entry Point
# ═══════════════════════════════════════════════════════════════════════════════


def main(argv: list[str] | None = None, *, connect: Connect = ShopApi.connect) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else EXIT_USAGE

    try:
        settings = load_settings()
    except ConfigError as exc:
        print(f"  ✗ Configuration: {exc}")
        return EXIT_USAGE

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    logger.debug("storefront %s against %s", args.command, settings.api_url)
    cart = CartStore(FileStorage(settings.cart_dir), key=settings.cart_key)
    ctx = _Context(settings=settings, cart=cart, connect=connect)
    return asyncio.run(args.handler(args, ctx))


__all__ = ("main", "build_parser")
