import sys
import os

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))
from dataclasses import replace
from decimal import Decimal

import pytest

from storefront.domain import Cart, Product
from storefront.service import CartAggregator
from storefront.transforms import add_item, cart_total, remove_item, set_quantity


@pytest.fixture
def widget():
    return Product(
        id="p1", name="Widget", description="", price=Decimal("10.00"),
        category="Other", stock=5,
    )


@pytest.fixture
def gadget():
    return Product(
        id="p2", name="Gadget", description="", price=Decimal("25.00"),
        category="Electronics", stock=3,
    )


def test_repeated_add_keeps_one_line_and_first_price(widget):
    cart = CartAggregator()
    cart.add_item(widget)
    repriced = replace(widget, price=Decimal("99.00"))
    cart.add_item(repriced)
    cart.add_item(repriced)

    assert len(cart.lines) == 1
    line = cart.line("p1").get_or_else(None)
    assert line.quantity == 3
    assert line.price == Decimal("10.00")


def test_add_is_pure(widget):
    empty = Cart()
    updated = add_item(empty, widget)
    assert empty.lines == ()
    assert updated.lines[0].quantity == 1


def test_remove_item_and_missing_is_noop(widget, gadget):
    cart = CartAggregator()
    cart.add_item(widget)
    cart.add_item(gadget)
    cart.remove_item("p1")
    assert [l.product.id for l in cart.lines] == ["p2"]

    cart.remove_item("nope")
    assert [l.product.id for l in cart.lines] == ["p2"]


@pytest.mark.parametrize("qty", [0, -1])
def test_set_quantity_below_one_is_ignored(widget, qty):
    cart = CartAggregator()
    cart.add_item(widget)
    cart.set_quantity("p1", 4)
    cart.set_quantity("p1", qty)
    assert cart.line("p1").get_or_else(None).quantity == 4


def test_total_matches_lines_after_interleaved_ops(widget, gadget):
    cart = CartAggregator()
    cart.add_item(widget)
    cart.add_item(gadget)
    cart.add_item(widget)
    cart.set_quantity("p2", 3)
    cart.set_quantity("p1", 0)
    cart.remove_item("p2")
    cart.add_item(gadget)

    expected = sum((l.price * l.quantity for l in cart.lines), Decimal("0"))
    assert cart.total() == expected == Decimal("45.00")
    assert cart.total() == cart.total()


def test_empty_cart_total_is_zero():
    assert cart_total(Cart()) == Decimal("0")


def test_lines_keep_insertion_order(widget, gadget):
    cart = add_item(add_item(Cart(), gadget), widget)
    cart = set_quantity(remove_item(cart, "zzz"), "p2", 2)
    assert [l.product.id for l in cart.lines] == ["p2", "p1"]


def test_clear(widget):
    cart = CartAggregator()
    cart.add_item(widget)
    cart.clear()
    assert cart.is_empty()
