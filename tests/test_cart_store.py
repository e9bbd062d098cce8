from decimal import Decimal

from conftest import product

from storefront.cart import CartSnapshot, CartStore


def assert_consistent(cart: CartStore) -> None:
    assert cart.item_count == sum(line.quantity for line in cart.lines)
    assert cart.subtotal == sum(
        (line.unit_price * line.quantity for line in cart.lines), Decimal("0")
    )
    assert all(line.quantity >= 1 for line in cart.lines)
    ids = [line.product_id for line in cart.lines]
    assert len(ids) == len(set(ids))


def test_add_same_product_merges_lines(cart: CartStore) -> None:
    mouse = product(1, "Mouse", "10.00")

    cart.add_item(mouse, 2)
    cart.add_item(mouse, 3)

    assert len(cart) == 1
    assert cart.get(1).quantity == 5
    assert_consistent(cart)


def test_add_keeps_original_price_snapshot(cart: CartStore) -> None:
    cart.add_item(product(1, price="10.00"), 1)
    cart.add_item(product(1, price="12.00"), 1)

    line = cart.get(1)
    assert line.unit_price == Decimal("10.00")
    assert line.quantity == 2


def test_re_adding_takes_current_stock(cart: CartStore) -> None:
    cart.add_item(product(1, stock=0), 2)
    cart.add_item(product(1, price="12.00", stock=50), 1)

    line = cart.get(1)
    assert line.stock == 50
    assert line.unit_price == Decimal("10.00")
    assert line.quantity == 3


def test_add_clamps_quantity_to_one(cart: CartStore) -> None:
    cart.add_item(product(1), 0)
    cart.add_item(product(2), -4)

    assert cart.get(1).quantity == 1
    assert cart.get(2).quantity == 1


def test_lines_keep_insertion_order(cart: CartStore) -> None:
    for id_key in (3, 1, 2):
        cart.add_item(product(id_key, f"P{id_key}"))

    assert [line.product_id for line in cart] == [3, 1, 2]


def test_update_to_zero_equals_remove() -> None:
    updated = CartStore()
    removed = CartStore()
    for store in (updated, removed):
        store.add_item(product(1), 2)
        store.add_item(product(2, "Keyboard", "15.00"), 1)

    updated.update_quantity(1, 0)
    removed.remove_item(1)

    assert updated.snapshot() == removed.snapshot()
    assert 1 not in updated


def test_update_quantity_sets_exact_value(cart: CartStore) -> None:
    cart.add_item(product(1), 2)

    cart.update_quantity(1, 7)

    assert cart.get(1).quantity == 7
    assert cart.item_count == 7
    assert_consistent(cart)


def test_update_and_remove_unknown_product_do_nothing(cart: CartStore) -> None:
    seen: list[CartSnapshot] = []
    cart.subscribe(seen.append)

    cart.update_quantity(42, 3)
    cart.remove_item(42)

    assert len(cart) == 0
    assert seen == []


def test_clear(cart: CartStore) -> None:
    cart.add_item(product(1), 2)
    cart.add_item(product(2, "Keyboard", "15.00"), 1)

    cart.clear()

    assert cart.item_count == 0
    assert cart.subtotal == Decimal("0")
    assert cart.snapshot().is_empty


def test_invariants_hold_after_each_mutation(cart: CartStore) -> None:
    cart.add_item(product(1, price="19.99"), 3)
    assert_consistent(cart)
    cart.add_item(product(2, price="0.01"), 7)
    assert_consistent(cart)
    cart.update_quantity(1, 1)
    assert_consistent(cart)
    cart.remove_item(2)
    assert_consistent(cart)
    cart.clear()
    assert_consistent(cart)


def test_listeners_get_every_change(cart: CartStore) -> None:
    seen: list[CartSnapshot] = []
    unsubscribe = cart.subscribe(seen.append)

    cart.add_item(product(1), 2)
    cart.update_quantity(1, 3)
    unsubscribe()
    cart.clear()

    assert [s.item_count for s in seen] == [2, 3]


def test_failing_listener_does_not_break_mutation(cart: CartStore) -> None:
    def broken(snapshot: CartSnapshot) -> None:
        raise RuntimeError("boom")

    seen: list[CartSnapshot] = []
    cart.subscribe(broken)
    cart.subscribe(seen.append)

    cart.add_item(product(1))

    assert len(cart) == 1
    assert len(seen) == 1


def test_snapshot_is_detached(cart: CartStore) -> None:
    cart.add_item(product(1), 2)
    snapshot = cart.snapshot()

    cart.add_item(product(1), 2)
    cart.add_item(product(2, "Keyboard"))

    assert snapshot.item_count == 2
    assert len(snapshot) == 1
    assert snapshot.line_for(1).quantity == 2
    assert snapshot.line_for(2) is None
