import pytest

from ecomm.core.errors import InsufficientStock, NotFound, ValidationError
from ecomm.services import cart_service, items_service


def test_adding_same_variation_twice_sums_quantity(customer, shirt):
    cart_service.add_item(customer["_id"], str(shirt["_id"]), 1, "red", "M")
    cart = cart_service.add_item(customer["_id"], str(shirt["_id"]), 2, "red", "M")

    assert len(cart["items"]) == 1
    assert cart["items"][0]["quantity"] == 3
    assert cart["total"] == 30.0


def test_different_variations_are_separate_entries(customer, shirt):
    cart_service.add_item(customer["_id"], str(shirt["_id"]), 1, "red", "M")
    cart = cart_service.add_item(customer["_id"], str(shirt["_id"]), 1, "blue", "L")

    assert len(cart["items"]) == 2
    assert cart["total"] == 20.0


def test_add_unknown_item_or_variation(customer, shirt):
    with pytest.raises(NotFound):
        cart_service.add_item(customer["_id"], "64b000000000000000000000", 1, "red", "M")
    with pytest.raises(NotFound):
        cart_service.add_item(customer["_id"], "not-an-id", 1, "red", "M")
    with pytest.raises(NotFound):
        cart_service.add_item(customer["_id"], str(shirt["_id"]), 1, "green", "M")


def test_add_beyond_stock(customer, shirt):
    with pytest.raises(InsufficientStock):
        cart_service.add_item(customer["_id"], str(shirt["_id"]), 2, "blue", "L")


def test_repeat_add_is_checked_against_stock(customer, shirt):
    cart_service.add_item(customer["_id"], str(shirt["_id"]), 4, "red", "M")
    with pytest.raises(InsufficientStock):
        cart_service.add_item(customer["_id"], str(shirt["_id"]), 2, "red", "M")
    assert cart_service.get_cart(customer["_id"])["items"][0]["quantity"] == 4


def test_add_requires_positive_quantity(customer, shirt):
    with pytest.raises(ValidationError):
        cart_service.add_item(customer["_id"], str(shirt["_id"]), 0, "red", "M")


def test_item_without_variations(customer, mug):
    cart = cart_service.add_item(customer["_id"], str(mug["_id"]), 2)
    assert cart["total"] == 9.0
    with pytest.raises(NotFound):
        cart_service.add_item(customer["_id"], str(mug["_id"]), 1, "red", "M")


def test_update_quantity(customer, shirt):
    cart_service.add_item(customer["_id"], str(shirt["_id"]), 1, "red", "M")
    cart = cart_service.update_quantity(customer["_id"], str(shirt["_id"]), 3, "red", "M")
    assert cart["items"][0]["quantity"] == 3

    with pytest.raises(InsufficientStock):
        cart_service.update_quantity(customer["_id"], str(shirt["_id"]), 6, "red", "M")


@pytest.mark.parametrize("quantity", [0, -2])
def test_update_to_zero_or_below_removes_entry(customer, shirt, quantity):
    cart_service.add_item(customer["_id"], str(shirt["_id"]), 1, "red", "M")
    cart_service.add_item(customer["_id"], str(shirt["_id"]), 1, "blue", "L")

    cart = cart_service.update_quantity(customer["_id"], str(shirt["_id"]), quantity, "red", "M")

    assert len(cart["items"]) == 1
    assert cart["items"][0]["color"] == "blue"


def test_update_or_remove_missing_entry(customer, shirt):
    with pytest.raises(NotFound):
        cart_service.update_quantity(customer["_id"], str(shirt["_id"]), 1, "red", "M")
    with pytest.raises(NotFound):
        cart_service.remove_item(customer["_id"], str(shirt["_id"]), "red", "M")


def test_remove_item(customer, shirt):
    cart_service.add_item(customer["_id"], str(shirt["_id"]), 1, "red", "M")
    cart = cart_service.remove_item(customer["_id"], str(shirt["_id"]), "red", "M")
    assert cart == {"items": [], "total": 0.0}


def test_total_follows_live_price(customer, shirt):
    cart_service.add_item(customer["_id"], str(shirt["_id"]), 2, "red", "M")
    items_service.update_item(shirt["_id"], {"price": 12.5})
    assert cart_service.get_cart(customer["_id"])["total"] == 25.0


def test_removed_variation_is_listed_but_not_priced(customer, shirt):
    cart_service.add_item(customer["_id"], str(shirt["_id"]), 2, "red", "M")
    cart_service.add_item(customer["_id"], str(shirt["_id"]), 1, "blue", "L")
    items_service.update_item(shirt["_id"], {"variations": [{"color": "red", "size": "M", "stock": 5}]})

    cart = cart_service.get_cart(customer["_id"])

    assert len(cart["items"]) == 2
    blue = next(line for line in cart["items"] if line["color"] == "blue")
    assert blue["available"] is False
    assert blue["lineTotal"] == 0.0
    assert cart["total"] == 20.0


def test_deleted_item_is_listed_but_not_priced(customer, shirt, mug):
    cart_service.add_item(customer["_id"], str(shirt["_id"]), 1, "red", "M")
    cart_service.add_item(customer["_id"], str(mug["_id"]), 1)
    items_service.delete_item(mug["_id"])

    cart = cart_service.get_cart(customer["_id"])

    assert len(cart["items"]) == 2
    assert cart["total"] == 10.0


def test_carts_are_per_user(customer, other_customer, shirt):
    cart_service.add_item(customer["_id"], str(shirt["_id"]), 1, "red", "M")
    assert cart_service.get_cart(other_customer["_id"]) == {"items": [], "total": 0.0}
