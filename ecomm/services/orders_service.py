import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from pymongo import DESCENDING
from pymongo.errors import PyMongoError

from ecomm.core.errors import (
    EmptyCart,
    Forbidden,
    InsufficientStock,
    InternalError,
    InvalidStatus,
    InvalidTransition,
    NotFound,
    ValidationError,
)
from ecomm.db.mongo import get_collection, to_object_id
from ecomm.services import cart_service, items_service, riders_service
from ecomm.services.order_status import (
    DELIVERY_STATUSES,
    OrderStatus,
    check_transition,
    is_terminal,
    parse_status,
)

logger = logging.getLogger("ORDERS")


def _orders():
    return get_collection("orders")


def _history_entry(status: OrderStatus, at: datetime, rider=None) -> dict:
    entry = {"status": status.value, "at": at}
    if rider is not None:
        entry["rider"] = rider
    return entry


def merge_lines(lines: list) -> list:
    """Folds lines sharing (item, color, size) into one, summing quantities."""
    merged = {}
    for line in lines:
        key = (line.get("item"), line.get("color"), line.get("size"))
        if key in merged:
            merged[key]["quantity"] += line["quantity"]
        else:
            merged[key] = dict(line)
    return list(merged.values())


def snapshot_lines(lines: list):
    """
    Freezes cart/checkout lines into order items priced from the catalog.

    Repeated (item, color, size) lines are merged first, then every line must
    still point at an existing item and variation with enough stock.
    Returns (order_items, total).
    """
    lines = merge_lines(lines)
    items_by_id = items_service.get_items_by_ids([line["item"] for line in lines if line.get("item")])
    order_items = []
    total = Decimal(0)
    for line in lines:
        item = items_by_id.get(line.get("item"))
        if not item:
            raise NotFound("Item not found")
        variation = items_service.find_variation(item, line.get("color"), line.get("size"))
        if variation is None:
            raise ValidationError(f"Selected color/size of '{item['name']}' is no longer available")
        if line["quantity"] > int(variation.get("stock", 0)):
            raise InsufficientStock(f"Insufficient stock for '{item['name']}'")
        price = float(item["price"])
        total += items_service.line_amount(price, line["quantity"])
        order_items.append({
            "item": item["_id"],
            "name": item["name"],
            "quantity": line["quantity"],
            "color": line.get("color"),
            "size": line.get("size"),
            "price": price,
        })
    return order_items, items_service.to_money(total)


def create_order(user_id, customer_info: dict, items: Optional[list] = None) -> dict:
    """
    Checkout: snapshots the cart (or ``items`` when given), stores a pending
    order and empties the cart. If the cart cannot be cleared the order is
    removed again so the two writes succeed or fail together.
    """
    user_oid = to_object_id(user_id)
    if items:
        lines = [
            {"item": to_object_id(line["itemId"]), "quantity": line["quantity"], "color": line.get("color"), "size": line.get("size")}
            for line in items
        ]
    else:
        lines = cart_service.get_entries(user_id)
    if not lines:
        raise EmptyCart()

    order_items, total = snapshot_lines(lines)
    now = datetime.now(timezone.utc)
    doc = {
        "user": user_oid,
        "items": order_items,
        "total": total,
        "status": OrderStatus.PENDING.value,
        "rider": None,
        "customerInfo": customer_info,
        "statusHistory": [_history_entry(OrderStatus.PENDING, now)],
        "created_at": now,
        "updated_at": now,
    }
    res = _orders().insert_one(doc)
    doc["_id"] = res.inserted_id

    try:
        cart_service.clear_cart(user_id)
    except PyMongoError as e:
        logger.exception(f"Clearing cart of user {user_id} failed, rolling back order {res.inserted_id}")
        _orders().delete_one({"_id": res.inserted_id})
        raise InternalError("Could not place order") from e

    logger.info(f"Order {res.inserted_id} created for user {user_id}, total {total}")
    return doc


def get_order(order_id) -> dict:
    oid = to_object_id(order_id)
    order = _orders().find_one({"_id": oid}) if oid else None
    if not order:
        raise NotFound("Order not found")
    return order


def get_order_for(order_id, requester_id, role: str) -> dict:
    """Customers may only read their own orders; admins and riders are not restricted."""
    order = get_order(order_id)
    if role == "user" and order["user"] != to_object_id(requester_id):
        raise Forbidden("Not authorized to view this order")
    return order


def list_orders(user_id=None, rider_id=None) -> list:
    query = {}
    if user_id is not None:
        query["user"] = to_object_id(user_id)
    if rider_id is not None:
        query["rider"] = to_object_id(rider_id)
    cursor = _orders().find(query).sort([("created_at", DESCENDING), ("_id", DESCENDING)])
    return list(cursor)


def attach_parties(orders: list, include_user: bool = False) -> list:
    """
    Adds ``riderInfo`` (name, phone) and optionally ``userInfo`` (email) to
    each order with one batched lookup per collection.
    """
    rider_ids = list({o["rider"] for o in orders if o.get("rider")})
    riders = {}
    if rider_ids:
        cursor = get_collection("riders").find({"_id": {"$in": rider_ids}}, {"name": 1, "phone": 1})
        riders = {r["_id"]: r for r in cursor}
    users = {}
    if include_user:
        user_ids = list({o["user"] for o in orders if o.get("user")})
        if user_ids:
            cursor = get_collection("users").find({"_id": {"$in": user_ids}}, {"name": 1, "email": 1})
            users = {u["_id"]: u for u in cursor}

    for order in orders:
        rider = riders.get(order.get("rider"))
        order["riderInfo"] = {"id": rider["_id"], "name": rider.get("name"), "phone": rider.get("phone")} if rider else None
        if include_user:
            user = users.get(order.get("user"))
            order["userInfo"] = {"id": user["_id"], "name": user.get("name"), "email": user.get("email")} if user else None
    return orders


def update_order_status(order_id, status: str, rider_id=None) -> dict:
    """
    Admin status change, optionally handing the order to a rider.

    A rider is required exactly when the order moves to shipped. Moving a
    shipped order to shipped again with another rider reassigns it.
    """
    order = get_order(order_id)
    rider = riders_service.get_rider(rider_id) if rider_id else None
    current = parse_status(order["status"])
    target = check_transition(current, status, role="admin")

    if target == OrderStatus.SHIPPED:
        if rider is None:
            raise ValidationError("A rider is required to ship an order")
        if current == OrderStatus.SHIPPED and order.get("rider") == rider["_id"]:
            return order
        riders_service.ensure_assignable(rider)
    elif rider is not None:
        raise ValidationError("A rider can only be assigned when shipping an order")

    previous_rider = order.get("rider")
    now = datetime.now(timezone.utc)
    fields = {"status": target.value, "updated_at": now}
    if target == OrderStatus.SHIPPED:
        fields["rider"] = rider["_id"]
    entry = _history_entry(target, now, rider["_id"] if rider else None)
    # only applies if nobody moved the order since it was read
    res = _orders().update_one(
        {"_id": order["_id"], "status": current.value, "rider": previous_rider},
        {"$set": fields, "$push": {"statusHistory": entry}},
    )
    if res.matched_count == 0:
        logger.warning(f"Order {order['_id']} changed concurrently, {current.value} -> {target.value} rejected")
        raise InvalidTransition(current.value, target.value)

    if target == OrderStatus.SHIPPED:
        if previous_rider and previous_rider != rider["_id"]:
            riders_service.release_order(previous_rider, order["_id"])
        riders_service.assign_order(rider["_id"], order["_id"])
    elif is_terminal(target) and previous_rider:
        riders_service.release_order(previous_rider, order["_id"])

    logger.info(f"Order {order['_id']} {current.value} -> {target.value}")
    order.update(fields)
    order["statusHistory"] = order.get("statusHistory", []) + [entry]
    return order


def update_delivery_status(order_id, status: str, rider_id) -> dict:
    """Assigned rider closes a shipped order as delivered or undelivered."""
    order = get_order(order_id)
    if order.get("rider") is None or order["rider"] != to_object_id(rider_id):
        raise Forbidden("Not authorized to update this order")
    if status not in {s.value for s in DELIVERY_STATUSES}:
        raise InvalidStatus()
    target = OrderStatus(status)
    current = parse_status(order["status"])
    check_transition(current, target, role="rider")

    now = datetime.now(timezone.utc)
    fields = {"status": target.value, "updated_at": now}
    entry = _history_entry(target, now, order["rider"])
    res = _orders().update_one(
        {"_id": order["_id"], "status": current.value, "rider": order["rider"]},
        {"$set": fields, "$push": {"statusHistory": entry}},
    )
    if res.matched_count == 0:
        logger.warning(f"Order {order['_id']} changed concurrently, {current.value} -> {target.value} rejected")
        raise InvalidTransition(current.value, target.value)
    riders_service.release_order(order["rider"], order["_id"])

    logger.info(f"Order {order['_id']} {current.value} -> {target.value} by rider {rider_id}")
    order.update(fields)
    order["statusHistory"] = order.get("statusHistory", []) + [entry]
    return order
