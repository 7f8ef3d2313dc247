import logging
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from pymongo import DESCENDING

from ecomm.core.errors import NotFound, ValidationError
from ecomm.db.mongo import get_collection, to_object_id

logger = logging.getLogger("ITEMS")


def _items():
    return get_collection("items")


def apply_stock_invariant(doc: dict) -> dict:
    # with variations the overall stock is always derived
    variations = doc.get("variations") or []
    if variations:
        doc["stock"] = sum(int(v.get("stock", 0)) for v in variations)
    return doc


def find_variation(item: dict, color: Optional[str], size: Optional[str]) -> Optional[dict]:
    """
    Returns the (color, size) variation of ``item`` or None.

    Items sold without variations only match color=None, size=None and
    expose their standalone stock as a pseudo variation.
    """
    variations = item.get("variations") or []
    if not variations:
        if color is None and size is None:
            return {"color": None, "size": None, "stock": int(item.get("stock", 0))}
        return None
    for v in variations:
        if v.get("color") == color and v.get("size") == size:
            return v
    return None


def list_items():
    return list(_items().find().sort([("created_at", DESCENDING), ("_id", DESCENDING)]))


def get_item(item_id) -> dict:
    oid = to_object_id(item_id)
    item = _items().find_one({"_id": oid}) if oid else None
    if not item:
        raise NotFound("Item not found")
    return item


def get_items_by_ids(ids) -> dict:
    oids = [oid for oid in (to_object_id(i) for i in ids) if oid]
    if not oids:
        return {}
    return {doc["_id"]: doc for doc in _items().find({"_id": {"$in": oids}})}


def create_item(data: dict) -> dict:
    if not data.get("name") or data.get("price") is None or not data.get("category"):
        raise ValidationError("Name, price, and category are required fields")
    now = datetime.now(timezone.utc)
    doc = apply_stock_invariant({**data, "created_at": now, "updated_at": now})
    res = _items().insert_one(doc)
    doc["_id"] = res.inserted_id
    logger.info(f"Item {res.inserted_id} created ({doc['name']})")
    return doc


def update_item(item_id, updates: dict) -> dict:
    item = get_item(item_id)
    updates = {k: v for k, v in updates.items() if v is not None}
    if not updates:
        return item
    merged = apply_stock_invariant({**item, **updates})
    merged["updated_at"] = datetime.now(timezone.utc)
    fields = {k: v for k, v in merged.items() if k != "_id"}
    _items().update_one({"_id": item["_id"]}, {"$set": fields})
    logger.info(f"Item {item['_id']} updated: {sorted(updates)}")
    return merged


def delete_item(item_id) -> None:
    item = get_item(item_id)
    _items().delete_one({"_id": item["_id"]})
    logger.info(f"Item {item['_id']} deleted")


CENT = Decimal("0.01")


def line_amount(price, quantity: int) -> Decimal:
    """Price times quantity in exact decimal, rounded half up to the cent."""
    return (Decimal(str(price)) * quantity).quantize(CENT, rounding=ROUND_HALF_UP)


def to_money(amount: Decimal) -> float:
    return float(amount.quantize(CENT, rounding=ROUND_HALF_UP))
