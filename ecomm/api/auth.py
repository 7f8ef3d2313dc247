import logging
from datetime import datetime, timezone
from fastapi import APIRouter, status
from pymongo.errors import DuplicateKeyError
from ecomm.models.schemas import UserCreate, AdminCreate, LoginIn, TokenOut
from ecomm.db.mongo import get_collection
from ecomm.core.config import ADMIN_SECRET_KEY
from ecomm.core.errors import Conflict, Forbidden, Unauthorized
from ecomm.core.security import hash_password, verify_password, create_token

logger = logging.getLogger("AUTH")
router = APIRouter()

def _users():
    return get_collection("users")

def _register(name: str, email: str, password: str, role: str) -> dict:
    email = email.lower()
    if _users().find_one({"email": email}):
        raise Conflict("Email Address already Registered, Please Log In")
    user = {
        "name": name,
        "email": email,
        "password": hash_password(password),
        "role": role,
        "created_at": datetime.now(timezone.utc),
    }
    try:
        res = _users().insert_one(user)
    except DuplicateKeyError:
        raise Conflict("Email Address already Registered, Please Log In")
    user["_id"] = res.inserted_id
    logger.info(f"Registered {role} {res.inserted_id}")
    return user

def _token_response(doc: dict, role: str, message: str) -> dict:
    return {
        "message": message,
        "token": create_token(str(doc["_id"]), role),
        "user": {"id": str(doc["_id"]), "name": doc["name"], "email": doc["email"], "role": role},
    }

def _login(email: str, password: str, role: str) -> dict:
    user = _users().find_one({"email": email.lower(), "role": role})
    if not user or not verify_password(password, user["password"]):
        raise Unauthorized("Invalid credentials")
    return _token_response(user, role, "Login successful")

@router.post("/signup", response_model=TokenOut, status_code=status.HTTP_201_CREATED)
def signup(payload: UserCreate):
    user = _register(payload.name, payload.email, payload.password, "user")
    return _token_response(user, "user", "User Created Successfully")

@router.post("/login", response_model=TokenOut)
def login(payload: LoginIn):
    return _login(payload.email, payload.password, "user")

@router.post("/admin/login", response_model=TokenOut)
def admin_login(payload: LoginIn):
    return _login(payload.email, payload.password, "admin")

@router.post("/admin/register", response_model=TokenOut, status_code=status.HTTP_201_CREATED)
def register_admin(payload: AdminCreate):
    if not ADMIN_SECRET_KEY or payload.adminSecret != ADMIN_SECRET_KEY:
        raise Forbidden("Invalid admin secret key")
    admin = _register(payload.name, payload.email, payload.password, "admin")
    return _token_response(admin, "admin", "Admin registered successfully")
