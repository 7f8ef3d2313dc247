from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from ecomm.core.errors import Forbidden, Unauthorized
from ecomm.core.security import decode_token
from ecomm.db.mongo import get_collection, to_object_id

oauth2 = OAuth2PasswordBearer(tokenUrl="/auth/login")

def get_current_user(token: str = Depends(oauth2)) -> dict:
    """Resolves the bearer token into the caller's user or rider document, with its role."""
    payload = decode_token(token)
    role = payload["role"]
    oid = to_object_id(payload["sub"])
    collection = get_collection("riders" if role == "rider" else "users")
    doc = collection.find_one({"_id": oid}) if oid else None
    if not doc:
        raise Unauthorized("User not found")
    if role != "rider" and doc.get("role") != role:
        raise Unauthorized("Invalid or expired token")
    doc["role"] = role
    doc.pop("password", None)
    return doc

def role_gate(role: str, message: str):
    """Dependency admitting only callers whose principal has ``role``."""
    def checker(user: dict = Depends(get_current_user)) -> dict:
        if user["role"] != role:
            raise Forbidden(message)
        return user
    return checker

require_admin = role_gate("admin", "Access denied: Admin privileges required")
require_customer = role_gate("user", "Access denied: Customer account required")
require_rider = role_gate("rider", "Access denied: Rider account required")
