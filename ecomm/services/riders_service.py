import logging
from datetime import datetime, timezone
from numbers import Real

from pymongo.errors import DuplicateKeyError

from ecomm.core.errors import Conflict, InvalidInput, InvalidStatus, NotFound, Unauthorized, ValidationError
from ecomm.core.security import hash_password, verify_password
from ecomm.db.mongo import get_collection, to_object_id

logger = logging.getLogger("RIDERS")

RIDER_STATUSES = ("available", "busy", "offline")


def _riders():
    return get_collection("riders")


def get_rider(rider_id) -> dict:
    oid = to_object_id(rider_id)
    rider = _riders().find_one({"_id": oid}) if oid else None
    if not rider:
        raise NotFound("Rider not found")
    return rider


def list_riders():
    """All riders with ``activeOrders`` expanded into short order summaries."""
    riders = list(_riders().find().sort("created_at", 1))
    order_ids = list({oid for r in riders for oid in r.get("activeOrders", [])})
    orders = {}
    if order_ids:
        fields = {"status": 1, "total": 1, "customerInfo": 1, "created_at": 1}
        orders = {o["_id"]: o for o in get_collection("orders").find({"_id": {"$in": order_ids}}, fields)}
    for rider in riders:
        rider["activeOrders"] = [orders[oid] for oid in rider.get("activeOrders", []) if oid in orders]
    return riders


def _insert(doc: dict):
    try:
        return _riders().insert_one(doc)
    except DuplicateKeyError:
        raise Conflict("Rider with this email already exists")


def create_rider(name: str, email: str, phone: str, password: str) -> dict:
    email = email.lower()
    if _riders().find_one({"email": email}):
        raise Conflict("Rider with this email already exists")
    doc = {
        "name": name,
        "email": email,
        "phone": phone,
        "password": hash_password(password),
        "status": "available",
        "currentLocation": {"type": "Point", "coordinates": [0, 0]},
        "activeOrders": [],
        "created_at": datetime.now(timezone.utc),
    }
    res = _insert(doc)
    doc["_id"] = res.inserted_id
    logger.info(f"Rider {res.inserted_id} created")
    return doc


def update_rider(rider_id, updates: dict) -> dict:
    rider = get_rider(rider_id)
    updates = {k: v for k, v in updates.items() if v is not None}
    if "status" in updates and updates["status"] not in RIDER_STATUSES:
        raise InvalidStatus()
    if "email" in updates:
        updates["email"] = updates["email"].lower()
        if updates["email"] != rider["email"] and _riders().find_one({"email": updates["email"], "_id": {"$ne": rider["_id"]}}):
            raise Conflict("Rider with this email already exists")
    if "password" in updates:
        updates["password"] = hash_password(updates["password"])
    if updates:
        try:
            _riders().update_one({"_id": rider["_id"]}, {"$set": updates})
        except DuplicateKeyError:
            raise Conflict("Rider with this email already exists")
        logger.info(f"Rider {rider['_id']} updated: {sorted(k for k in updates if k != 'password')}")
    return {**rider, **updates}


def authenticate(email: str, password: str) -> dict:
    rider = _riders().find_one({"email": email.lower()})
    if not rider or not verify_password(password, rider["password"]):
        raise Unauthorized("Invalid credentials")
    return rider


def update_status(rider_id, status: str) -> dict:
    if status not in RIDER_STATUSES:
        raise InvalidStatus()
    rider = get_rider(rider_id)
    _riders().update_one({"_id": rider["_id"]}, {"$set": {"status": status}})
    logger.info(f"Rider {rider['_id']} is now {status}")
    return {**rider, "status": status}


def validate_coordinates(coordinates) -> list:
    """[longitude, latitude]; booleans are not numbers here."""
    if not isinstance(coordinates, (list, tuple)) or len(coordinates) != 2:
        raise InvalidInput("Invalid coordinates")
    if any(isinstance(c, bool) or not isinstance(c, Real) for c in coordinates):
        raise InvalidInput("Invalid coordinates")
    return [float(c) for c in coordinates]


def update_location(rider_id, coordinates) -> dict:
    coords = validate_coordinates(coordinates)
    rider = get_rider(rider_id)
    location = {"type": "Point", "coordinates": coords}
    _riders().update_one({"_id": rider["_id"]}, {"$set": {"currentLocation": location}})
    return {**rider, "currentLocation": location}


def ensure_assignable(rider: dict) -> None:
    if rider.get("status") == "offline":
        raise ValidationError("Rider is offline")


def assign_order(rider_id, order_id) -> None:
    _riders().update_one({"_id": to_object_id(rider_id)}, {"$addToSet": {"activeOrders": to_object_id(order_id)}})
    logger.info(f"Order {order_id} assigned to rider {rider_id}")


def release_order(rider_id, order_id) -> None:
    _riders().update_one({"_id": to_object_id(rider_id)}, {"$pull": {"activeOrders": to_object_id(order_id)}})
    logger.info(f"Order {order_id} released from rider {rider_id}")
