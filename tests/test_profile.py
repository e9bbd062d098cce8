import pytest
from kungfu import Ok, Error

from storefront.profile import (
    add_address,
    client_orders,
    order_lines,
    remove_address,
    update_address,
    update_client,
)
from storefront.repo import RepoErrorKind, ShopApi


def seed_history(backend) -> None:
    backend.insert("clients", {"id_key": 1, "name": "Ana", "lastname": "G", "email": "a@x.io"})
    backend.insert("clients", {"id_key": 2, "name": "Bob", "lastname": "S", "email": "b@x.io"})
    backend.insert("addresses", {"id_key": 1, "street": "Main", "city": "X", "client_id": 1})
    backend.insert("addresses", {"id_key": 2, "street": "Side", "city": "Y", "client_id": 2})
    for id_key, client_id, day in ((1, 1, "2024-01-02"), (2, 2, "2024-01-03"), (3, 1, "2024-02-10")):
        backend.insert("bills", {
            "id_key": id_key, "bill_number": f"FAC-{id_key}", "date": day, "total": 12.1,
            "payment_type": 1, "client_id": client_id,
        })
        backend.insert("orders", {
            "id_key": id_key, "date": day, "total": 12.1, "delivery_method": 3,
            "status": 1, "client_id": client_id, "bill_id": id_key,
        })
    backend.insert("order_details", {"order_id": 3, "product_id": 1, "quantity": 2, "price": 5.0})
    backend.insert("order_details", {"order_id": 1, "product_id": 2, "quantity": 1, "price": 10.0})


@pytest.mark.asyncio
async def test_client_orders(api: ShopApi, backend) -> None:
    seed_history(backend)

    result = await client_orders(api, 1)

    match result:
        case Ok(profile):
            assert profile.client.name == "Ana"
            assert [a.id_key for a in profile.addresses] == [1]
            assert [o.id_key for o in profile.orders] == [3, 1]
            assert [b.bill_number for b in profile.bills] == ["FAC-1", "FAC-3"]
            assert profile.bill_for(profile.orders[0]).bill_number == "FAC-3"
        case Error(e):
            pytest.fail(str(e))


@pytest.mark.asyncio
async def test_client_orders_unknown_client(api: ShopApi, backend) -> None:
    seed_history(backend)

    result = await client_orders(api, 99)

    assert isinstance(result, Error)
    assert result.value.is_not_found


@pytest.mark.asyncio
async def test_invalid_id_sends_nothing(api: ShopApi, backend) -> None:
    result = await client_orders(api, 0)

    assert isinstance(result, Error)
    assert result.value.kind is RepoErrorKind.REJECTED
    assert backend.requests == []


@pytest.mark.asyncio
async def test_order_lines(api: ShopApi, backend) -> None:
    seed_history(backend)

    result = await order_lines(api, 3)

    assert isinstance(result, Ok)
    assert [(d.product_id, d.quantity) for d in result.value] == [(1, 2)]


# ═══════════════════════════════════════════════════════════════════════════════
# Address book
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_add_address(api: ShopApi, backend) -> None:
    seed_history(backend)

    result = await add_address(api, 1, "  Elm  ", "Rosario", number="12")

    assert isinstance(result, Ok)
    row = backend.tables["addresses"][result.value.id_key]
    assert row["street"] == "Elm"
    assert row["number"] == "12"
    assert row["client_id"] == 1


@pytest.mark.asyncio
async def test_add_address_needs_street_and_city(api: ShopApi, backend) -> None:
    result = await add_address(api, 1, "Elm", " ")

    assert isinstance(result, Error)
    assert result.value.kind is RepoErrorKind.REJECTED
    assert result.value.message == "City is required."
    assert backend.requests == []


@pytest.mark.asyncio
async def test_update_address_keeps_untouched_fields(api: ShopApi, backend) -> None:
    seed_history(backend)

    result = await update_address(api, 1, 1, street="Elm")

    assert isinstance(result, Ok)
    assert backend.tables["addresses"][1]["street"] == "Elm"
    assert backend.tables["addresses"][1]["city"] == "X"
    assert backend.requests == [("GET", "/addresses/1"), ("PUT", "/addresses/1")]


@pytest.mark.asyncio
async def test_address_of_another_client_cannot_be_changed(api: ShopApi, backend) -> None:
    seed_history(backend)

    edited = await update_address(api, 1, 2, city="Z")
    removed = await remove_address(api, 1, 2)

    assert edited.value.kind is RepoErrorKind.REJECTED
    assert removed.value.kind is RepoErrorKind.REJECTED
    assert backend.tables["addresses"][2]["city"] == "Y"
    assert [method for method, _ in backend.requests] == ["GET", "GET"]


@pytest.mark.asyncio
async def test_remove_address(api: ShopApi, backend) -> None:
    seed_history(backend)

    first = await remove_address(api, 1, 1)
    again = await remove_address(api, 1, 1)

    assert isinstance(first, Ok)
    assert isinstance(again, Ok)
    assert 1 not in backend.tables["addresses"]
    assert [m for m, _ in backend.requests].count("DELETE") == 1


# ═══════════════════════════════════════════════════════════════════════════════
# Client data
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_update_client(api: ShopApi, backend) -> None:
    seed_history(backend)

    result = await update_client(api, 1, email=" ana@new.io ")

    assert isinstance(result, Ok)
    assert result.value.email == "ana@new.io"
    row = backend.tables["clients"][1]
    assert row["name"] == "Ana"
    assert row["email"] == "ana@new.io"
    assert row["telephone"] == "0000000000"


@pytest.mark.asyncio
async def test_update_unknown_client(api: ShopApi, backend) -> None:
    result = await update_client(api, 99, name="X")

    assert isinstance(result, Error)
    assert result.value.is_not_found
    assert [m for m, _ in backend.requests] == ["GET"]


@pytest.mark.asyncio
async def test_update_client_refuses_blank_email(api: ShopApi, backend) -> None:
    seed_history(backend)

    result = await update_client(api, 1, email="")

    assert result.value.message == "Email is required."
    assert backend.requests == []
