import mongomock
import pytest
from fastapi.testclient import TestClient

from ecomm.core.security import create_token, hash_password
from ecomm.db import mongo
from ecomm.main import app
from ecomm.services import items_service, riders_service


@pytest.fixture(autouse=True)
def db():
    database = mongomock.MongoClient()["ecomm_test"]
    mongo.use_database(database)
    mongo.ensure_indexes()
    yield database
    mongo.use_database(None)


@pytest.fixture
def client():
    return TestClient(app)


def make_user(db, email, role="user", password="secret123"):
    doc = {"name": email.split("@")[0], "email": email, "password": hash_password(password), "role": role}
    doc["_id"] = db["users"].insert_one(doc).inserted_id
    return doc


def auth_header(doc, role):
    return {"Authorization": f"Bearer {create_token(str(doc['_id']), role)}"}


@pytest.fixture
def customer(db):
    return make_user(db, "alice@example.com")


@pytest.fixture
def other_customer(db):
    return make_user(db, "bob@example.com")


@pytest.fixture
def admin(db):
    return make_user(db, "admin@example.com", role="admin")


@pytest.fixture
def rider():
    return riders_service.create_rider("Ravi", "ravi@example.com", "555-0100", "secret123")


@pytest.fixture
def second_rider():
    return riders_service.create_rider("Sana", "sana@example.com", "555-0101", "secret123")


@pytest.fixture
def shirt():
    return items_service.create_item({
        "name": "Shirt",
        "description": "Cotton shirt",
        "price": 10.0,
        "category": "Apparel",
        "image": None,
        "stock": 0,
        "variations": [
            {"color": "red", "size": "M", "stock": 5},
            {"color": "blue", "size": "L", "stock": 1},
        ],
    })


@pytest.fixture
def mug():
    return items_service.create_item({
        "name": "Mug",
        "price": 4.5,
        "category": "Kitchen",
        "stock": 3,
        "variations": [],
    })
