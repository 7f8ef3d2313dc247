from enum import Enum

from ecomm.core.errors import InvalidStatus, InvalidTransition


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    UNDELIVERED = "undelivered"
    CANCELLED = "cancelled"


TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.UNDELIVERED, OrderStatus.CANCELLED})
DELIVERY_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.UNDELIVERED})

# shipped -> shipped is only used to hand the order to another rider
ADMIN_TRANSITIONS = {
    OrderStatus.PENDING: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
}

RIDER_TRANSITIONS = {
    OrderStatus.SHIPPED: DELIVERY_STATUSES,
}


def parse_status(value) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        raise InvalidStatus(f"Invalid status '{value}'")


def allowed_transitions(current, role: str = "admin") -> frozenset:
    table = RIDER_TRANSITIONS if role == "rider" else ADMIN_TRANSITIONS
    return table.get(parse_status(current), frozenset())


def is_terminal(status) -> bool:
    return parse_status(status) in TERMINAL_STATUSES


def check_transition(current, target, role: str = "admin") -> OrderStatus:
    """Validates ``current -> target`` for ``role`` and returns the parsed target."""
    target = parse_status(target)
    if target not in allowed_transitions(current, role):
        raise InvalidTransition(parse_status(current).value, target.value)
    return target
