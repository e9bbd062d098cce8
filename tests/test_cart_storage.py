import json
from decimal import Decimal

import pytest
from conftest import product

from storefront.cart import (
    CartStore,
    CorruptCart,
    FileStorage,
    MemoryStorage,
    decode_lines,
    encode_lines,
)


def test_every_mutation_is_persisted(storage: MemoryStorage) -> None:
    cart = CartStore(storage, key="cart")

    cart.add_item(product(1), 2)
    cart.update_quantity(1, 4)

    assert storage.writes == 2
    stored = json.loads(storage.data["cart"])
    assert stored == [
        {"category_id": None, "id_key": 1, "name": "Mouse", "price": 10.0, "stock": 10, "quantity": 4}
    ]


def test_restores_from_storage(storage: MemoryStorage) -> None:
    first = CartStore(storage)
    first.add_item(product(1, price="10.00"), 2)
    first.add_item(product(2, "Keyboard", "15.00", category_id=3), 1)

    second = CartStore(storage)

    assert second.snapshot() == first.snapshot()
    assert second.subtotal == Decimal("35.00")
    assert second.get(2).extra == {"category_id": 3}


@pytest.mark.parametrize(
    "data",
    [
        "not json",
        '{"id_key": 1}',
        '[{"id_key": 1, "name": "Mouse", "price": -1, "stock": 1, "quantity": 1}]',
        '[{"id_key": 1, "name": "Mouse", "price": 1, "stock": 1, "quantity": 0}]',
        '[{"name": "Mouse"}]',
    ],
)
def test_corrupt_storage_yields_empty_cart(data: str) -> None:
    cart = CartStore(MemoryStorage({"cart": data}))

    assert len(cart) == 0
    assert cart.item_count == 0


def test_decode_rejects_garbage() -> None:
    with pytest.raises(CorruptCart):
        decode_lines("[1, 2, 3]")


def test_decode_merges_duplicate_products() -> None:
    data = json.dumps([
        {"id_key": 1, "name": "Mouse", "price": 10, "stock": 9, "quantity": 2},
        {"id_key": 1, "name": "Mouse", "price": 10, "stock": 9, "quantity": 3},
    ])

    (line,) = decode_lines(data)

    assert line.quantity == 5


def test_unknown_fields_survive_round_trip() -> None:
    data = json.dumps([
        {"id_key": 4, "name": "Desk", "price": 99.5, "stock": 2, "quantity": 1,
         "category_id": 7, "image": "desk.png"},
    ])

    again = json.loads(encode_lines(decode_lines(data)))

    assert again[0]["image"] == "desk.png"
    assert again[0]["category_id"] == 7


def test_file_storage_round_trip(tmp_path) -> None:
    storage = FileStorage(tmp_path / "carts")
    cart = CartStore(storage, key="alice")
    cart.add_item(product(1, price="10.00"), 2)
    cart.add_item(product(2, "Keyboard", "15.00"), 1)

    restored = CartStore(FileStorage(tmp_path / "carts"), key="alice")

    assert storage.path("alice").exists()
    assert [(l.product_id, l.quantity) for l in restored] == [(1, 2), (2, 1)]
    assert restored.subtotal == Decimal("35.00")
    assert list((tmp_path / "carts").glob("*.tmp")) == []


def test_file_storage_missing_key(tmp_path) -> None:
    storage = FileStorage(tmp_path)

    assert storage.read("nobody") is None
    storage.remove("nobody")


def test_write_failure_keeps_cart_in_memory(tmp_path) -> None:
    blocker = tmp_path / "file"
    blocker.write_text("x")
    # directory path is a regular file, so every write fails
    cart = CartStore(FileStorage(blocker))

    cart.add_item(product(1), 2)

    assert cart.item_count == 2


def test_keys_are_separate(storage: MemoryStorage) -> None:
    CartStore(storage, key="a").add_item(product(1))

    assert len(CartStore(storage, key="b")) == 0
    assert len(CartStore(storage, key="a")) == 1
