import time

import pytest

from darah_server.cart import CartState, CartStore
from darah_server.errors import NotInCartError
from darah_server.models import CartEntry


def test_add_one_appends_then_increments():
    cart = CartState()
    cart.add_one("a")
    cart.add_one("b")
    cart.add_one("a")

    assert [(e.item_id, e.quantity) for e in cart.get()] == [("a", 2), ("b", 1)]


def test_set_quantity_zero_removes_and_ignores_absent():
    cart = CartState([CartEntry(item_id="a", quantity=3)])

    cart.set_quantity("a", 0)
    cart.set_quantity("missing", 0)

    assert cart.get() == []


def test_set_quantity_requires_existing_entry():
    cart = CartState()

    with pytest.raises(NotInCartError):
        cart.set_quantity("ghost", 3)
    assert cart.get() == []


def test_store_creates_empty_cart_per_session():
    store = CartStore()

    with store.session("one") as cart:
        cart.add_one("a")

    assert store.get("two") == []
    assert [(e.item_id, e.quantity) for e in store.get("one")] == [("a", 1)]


def test_store_discards_changes_when_operation_fails():
    store = CartStore()
    store.set("s", [CartEntry(item_id="a", quantity=1)])

    with pytest.raises(RuntimeError):
        with store.session("s") as cart:
            cart.add_one("a")
            cart.add_one("b")
            raise RuntimeError("rejected")

    assert [(e.item_id, e.quantity) for e in store.get("s")] == [("a", 1)]


def test_store_returns_copies():
    store = CartStore()
    store.set("s", [CartEntry(item_id="a", quantity=1)])

    store.get("s")[0].quantity = 99

    assert store.get("s")[0].quantity == 1


def test_clear_empties_cart():
    store = CartStore()
    store.set("s", [CartEntry(item_id="a", quantity=2)])

    store.clear("s")

    assert store.get("s") == []


def test_idle_sessions_expire(monkeypatch):
    store = CartStore(max_age=60)
    store.set("old", [CartEntry(item_id="a", quantity=1)])

    now = time.monotonic()
    monkeypatch.setattr(time, "monotonic", lambda: now + 120)

    assert store.get("new") == []
    assert store.session_count() == 1
    assert store.get("old") == []
