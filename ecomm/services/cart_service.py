import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from ecomm.core.errors import InsufficientStock, NotFound, ValidationError
from ecomm.db.mongo import get_collection, serialize_doc, to_object_id
from ecomm.services import items_service

logger = logging.getLogger("CART")


def _carts():
    return get_collection("carts")


def _user_oid(user_id):
    oid = to_object_id(user_id)
    if oid is None:
        raise ValidationError("Invalid user id")
    return oid


def _find_entry(entries: list, item_oid, color: Optional[str], size: Optional[str]) -> int:
    for idx, entry in enumerate(entries):
        if entry["item"] == item_oid and entry.get("color") == color and entry.get("size") == size:
            return idx
    return -1


def _check_stock(variation: dict, quantity: int) -> None:
    if quantity > int(variation.get("stock", 0)):
        raise InsufficientStock()


def get_entries(user_id) -> list:
    """Raw cart lines of a user: [{item, quantity, color, size}]."""
    cart = _carts().find_one({"user": _user_oid(user_id)})
    return list(cart.get("items", [])) if cart else []


def _save_entries(user_id, entries: list) -> None:
    now = datetime.now(timezone.utc)
    _carts().update_one(
        {"user": _user_oid(user_id)},
        {"$set": {"items": entries, "updated_at": now}, "$setOnInsert": {"created_at": now}},
        upsert=True,
    )


def price_entries(entries: list, items_by_id: dict):
    """
    Joins cart lines with live item data.

    Returns (lines, total). Lines whose item or (color, size) variation no
    longer exists stay in the listing with ``available`` False and do not
    count towards the total.
    """
    lines = []
    total = Decimal(0)
    for entry in entries:
        item = items_by_id.get(entry["item"])
        variation = items_service.find_variation(item, entry.get("color"), entry.get("size")) if item else None
        available = variation is not None
        line_total = items_service.line_amount(item["price"], entry["quantity"]) if available else Decimal(0)
        total += line_total
        lines.append({
            "itemId": str(entry["item"]),
            "item": serialize_doc(item) if item else None,
            "quantity": entry["quantity"],
            "color": entry.get("color"),
            "size": entry.get("size"),
            "available": available,
            "lineTotal": items_service.to_money(line_total),
        })
    return lines, items_service.to_money(total)


def get_cart(user_id) -> dict:
    entries = get_entries(user_id)
    items_by_id = items_service.get_items_by_ids([e["item"] for e in entries])
    lines, total = price_entries(entries, items_by_id)
    return {"items": lines, "total": total}


def add_item(user_id, item_id, quantity: int, color: Optional[str] = None, size: Optional[str] = None) -> dict:
    if quantity is None or quantity < 1:
        raise ValidationError("Quantity must be at least 1")
    item = items_service.get_item(item_id)
    variation = items_service.find_variation(item, color, size)
    if variation is None:
        raise NotFound("Selected color/size not available")

    entries = get_entries(user_id)
    idx = _find_entry(entries, item["_id"], color, size)
    if idx > -1:
        new_qty = entries[idx]["quantity"] + quantity
        _check_stock(variation, new_qty)
        entries[idx]["quantity"] = new_qty
    else:
        _check_stock(variation, quantity)
        entries.append({"item": item["_id"], "quantity": quantity, "color": color, "size": size})

    _save_entries(user_id, entries)
    logger.info(f"User {user_id} added {quantity} x {item['_id']} ({color}/{size})")
    return get_cart(user_id)


def update_quantity(user_id, item_id, quantity: int, color: Optional[str] = None, size: Optional[str] = None) -> dict:
    entries = get_entries(user_id)
    item_oid = to_object_id(item_id)
    idx = _find_entry(entries, item_oid, color, size) if item_oid else -1
    if idx == -1:
        raise NotFound("Item not found in cart")

    if quantity <= 0:
        entries.pop(idx)
    else:
        item = items_service.get_item(item_oid)
        variation = items_service.find_variation(item, color, size)
        if variation is None:
            raise NotFound("Selected color/size not available")
        _check_stock(variation, quantity)
        entries[idx]["quantity"] = quantity

    _save_entries(user_id, entries)
    return get_cart(user_id)


def remove_item(user_id, item_id, color: Optional[str] = None, size: Optional[str] = None) -> dict:
    entries = get_entries(user_id)
    item_oid = to_object_id(item_id)
    idx = _find_entry(entries, item_oid, color, size) if item_oid else -1
    if idx == -1:
        raise NotFound("Item not found in cart")
    entries.pop(idx)
    _save_entries(user_id, entries)
    return get_cart(user_id)


def clear_cart(user_id) -> None:
    _carts().update_one(
        {"user": _user_oid(user_id)},
        {"$set": {"items": [], "updated_at": datetime.now(timezone.utc)}},
    )
    logger.info(f"Cart of user {user_id} cleared")
