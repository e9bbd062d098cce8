"""
Profile — what a customer has bought, and their own details.

The backend has no per-client endpoints, so every query reads whole
collections and filters on the foreign key. Edits go through the plain
collection endpoints; an address is only touched by the client it
belongs to.
"""

from __future__ import annotations

from dataclasses import dataclass

from kungfu import LazyCoroResult, Result, Ok, Error
from combinators import parallel as C_parallel

from storefront.lift import rejected
from storefront.repo import (
    Address,
    AddressInput,
    Bill,
    Client,
    ClientInput,
    Order,
    OrderDetail,
    RepoError,
    RepoErrorKind,
    ShopApi,
)

# Placeholder the checkout form sends when no phone was entered
NO_TELEPHONE = "0000000000"


@dataclass(frozen=True, slots=True)
class ClientProfile:
    client: Client
    addresses: tuple[Address, ...]
    orders: tuple[Order, ...]
    bills: tuple[Bill, ...]

    def bill_for(self, order: Order) -> Bill | None:
        for bill in self.bills:
            if bill.id_key == order.bill_id:
                return bill
        return None


def _first_blank(*fields: tuple[str, str | None]) -> str | None:
    for label, value in fields:
        if value is not None and not value.strip():
            return label
    return None


def _stripped(value: str | None, current: str) -> str:
    return current if value is None else value.strip()


# ═══════════════════════════════════════════════════════════════════════════════
# History
# ═══════════════════════════════════════════════════════════════════════════════


def client_orders(api: ShopApi, client_id: int) -> LazyCoroResult[ClientProfile, RepoError]:
    """
    Client with their addresses, orders and bills, newest order first.

    All four reads run concurrently; any failure fails the whole query.

    Example:
        match await client_orders(api, 7):
            case Ok(profile):
                for order in profile.orders:
                    print(order.id_key, profile.bill_for(order))
            case Error(e):
                print(e.message)
    """
    if client_id < 1:
        return rejected(api.clients.name, f"Invalid id: {client_id}")

    def build(results: list[object]) -> ClientProfile:
        client, addresses, orders, bills = results
        assert isinstance(client, Client)
        return ClientProfile(
            client=client,
            addresses=tuple(a for a in addresses if a.client_id == client_id),
            orders=tuple(sorted(
                (o for o in orders if o.client_id == client_id),
                key=lambda o: (o.date, o.id_key),
                reverse=True,
            )),
            bills=tuple(b for b in bills if b.client_id == client_id),
        )

    return C_parallel(
        api.clients.get_one(client_id),
        api.addresses.list_all(),
        api.orders.list_all(),
        api.bills.list_all(),
    ).map(build)


def order_lines(api: ShopApi, order_id: int) -> LazyCoroResult[tuple[OrderDetail, ...], RepoError]:
    if order_id < 1:
        return rejected(api.order_details.name, f"Invalid id: {order_id}")
    return api.order_details.list_all().map(
        lambda details: tuple(d for d in details if d.order_id == order_id)
    )


# ═══════════════════════════════════════════════════════════════════════════════
# Address Book
# ═══════════════════════════════════════════════════════════════════════════════


def owned_address(
    api: ShopApi, address_id: int, client_id: int
) -> LazyCoroResult[Address, RepoError]:
    """The address, or REJECTED when it belongs to another client."""
    addresses = api.addresses

    async def impl() -> Result[Address, RepoError]:
        result = await addresses.get_one(address_id)
        match result:
            case Ok(address) if address.client_id != client_id:
                return Error(RepoError(
                    RepoErrorKind.REJECTED,
                    "The selected address belongs to another customer.",
                    addresses.name,
                ))
            case _:
                return result

    return LazyCoroResult(impl)


def add_address(
    api: ShopApi,
    client_id: int,
    street: str,
    city: str,
    number: str | None = None,
) -> LazyCoroResult[Address, RepoError]:
    resource = api.addresses.name
    if client_id < 1:
        return rejected(resource, f"Invalid id: {client_id}")
    blank = _first_blank(("Street", street), ("City", city))
    if blank is not None:
        return rejected(resource, f"{blank} is required.")
    return api.addresses.create(AddressInput(
        street=street.strip(),
        city=city.strip(),
        number=number,
        client_id=client_id,
    ))


def update_address(
    api: ShopApi,
    client_id: int,
    address_id: int,
    *,
    street: str | None = None,
    city: str | None = None,
    number: str | None = None,
) -> LazyCoroResult[Address, RepoError]:
    """
    Change some fields of one of the client's addresses.

    Fields left as None keep their current value. The backend replaces
    the whole record, so the current address is read first.
    """
    resource = api.addresses.name
    if client_id < 1 or address_id < 1:
        return rejected(resource, f"Invalid id: {address_id}")
    blank = _first_blank(("Street", street), ("City", city))
    if blank is not None:
        return rejected(resource, f"{blank} is required.")

    async def impl() -> Result[Address, RepoError]:
        match await owned_address(api, address_id, client_id):
            case Error(e):
                return Error(e)
            case Ok(current):
                pass
        payload = AddressInput(
            street=_stripped(street, current.street),
            city=_stripped(city, current.city),
            number=current.number if number is None else number,
            client_id=client_id,
        )
        return await api.addresses.update(address_id, payload)

    return LazyCoroResult(impl)


def remove_address(
    api: ShopApi, client_id: int, address_id: int
) -> LazyCoroResult[None, RepoError]:
    """Delete one of the client's addresses. An address already gone is fine."""
    resource = api.addresses.name
    if client_id < 1 or address_id < 1:
        return rejected(resource, f"Invalid id: {address_id}")

    async def impl() -> Result[None, RepoError]:
        match await owned_address(api, address_id, client_id):
            case Error(e) if e.is_not_found:
                return Ok(None)
            case Error(e):
                return Error(e)
            case Ok(_):
                pass
        return await api.addresses.delete(address_id)

    return LazyCoroResult(impl)


# ═══════════════════════════════════════════════════════════════════════════════
# Client Data
# ═══════════════════════════════════════════════════════════════════════════════


def update_client(
    api: ShopApi,
    client_id: int,
    *,
    name: str | None = None,
    lastname: str | None = None,
    email: str | None = None,
    telephone: str | None = None,
) -> LazyCoroResult[Client, RepoError]:
    """
    Change the client's own details; None keeps the current value.

    Example:
        match await update_client(api, 7, email="new@example.com"):
            case Ok(client):
                print(f"✓ {client.email}")
            case Error(e):
                print(f"✗ {e.message}")
    """
    resource = api.clients.name
    if client_id < 1:
        return rejected(resource, f"Invalid id: {client_id}")
    blank = _first_blank(("First name", name), ("Last name", lastname), ("Email", email))
    if blank is not None:
        return rejected(resource, f"{blank} is required.")

    async def impl() -> Result[Client, RepoError]:
        match await api.clients.get_one(client_id):
            case Error(e):
                return Error(e)
            case Ok(current):
                pass
        payload = ClientInput(
            name=_stripped(name, current.name),
            lastname=_stripped(lastname, current.lastname),
            email=_stripped(email, current.email),
            telephone=_stripped(telephone, current.telephone or NO_TELEPHONE),
        )
        return await api.clients.update(client_id, payload)

    return LazyCoroResult(impl)


__all__ = (
    "ClientProfile",
    "client_orders",
    "order_lines",
    "owned_address",
    "add_address",
    "update_address",
    "remove_address",
    "update_client",
)
