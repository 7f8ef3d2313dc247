import pytest

from ecomm.core.errors import InvalidStatus, InvalidTransition
from ecomm.services.order_status import (
    OrderStatus,
    allowed_transitions,
    check_transition,
    is_terminal,
)


@pytest.mark.parametrize("current,target", [
    ("pending", "processing"),
    ("pending", "cancelled"),
    ("processing", "shipped"),
    ("processing", "cancelled"),
    ("shipped", "shipped"),
    ("shipped", "cancelled"),
])
def test_admin_transitions_allowed(current, target):
    assert check_transition(current, target, role="admin") == OrderStatus(target)


@pytest.mark.parametrize("current,target", [
    ("pending", "shipped"),
    ("pending", "delivered"),
    ("processing", "pending"),
    ("shipped", "delivered"),
    ("delivered", "pending"),
    ("cancelled", "processing"),
    ("undelivered", "shipped"),
])
def test_admin_transitions_rejected(current, target):
    with pytest.raises(InvalidTransition):
        check_transition(current, target, role="admin")


def test_rider_can_only_close_shipped_orders():
    assert allowed_transitions("shipped", role="rider") == {OrderStatus.DELIVERED, OrderStatus.UNDELIVERED}
    assert allowed_transitions("processing", role="rider") == frozenset()
    with pytest.raises(InvalidTransition):
        check_transition("delivered", "undelivered", role="rider")


def test_terminal_states_have_no_exits():
    for status in ("delivered", "undelivered", "cancelled"):
        assert is_terminal(status)
        assert allowed_transitions(status) == frozenset()
        assert allowed_transitions(status, role="rider") == frozenset()
    assert not is_terminal("shipped")


def test_unknown_status():
    with pytest.raises(InvalidStatus):
        check_transition("pending", "paid")
