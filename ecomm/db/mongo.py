import logging
from typing import Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import GEOSPHERE, MongoClient
from pymongo.database import Database

from ecomm.core.config import MONGO_URI, MONGO_DB_NAME

logger = logging.getLogger("DB")

client: Optional[MongoClient] = None
db: Optional[Database] = None


def get_db() -> Database:
    global client, db
    if db is None:
        if not MONGO_URI:
            raise RuntimeError("MONGO_URI not configured. See .env")
        client = MongoClient(MONGO_URI)
        db = client[MONGO_DB_NAME]
        logger.info(f"Connected to MongoDB database '{MONGO_DB_NAME}'")
    return db


def use_database(database: Database) -> None:
    """Point every collection accessor at ``database`` (tests, scripts)."""
    global db
    db = database


def get_collection(name: str):
    return get_db()[name]


def ensure_indexes() -> None:
    """Unique emails and carts per user, plus the geo index on rider positions. Idempotent."""
    database = get_db()
    database["users"].create_index("email", unique=True)
    database["riders"].create_index("email", unique=True)
    database["riders"].create_index([("currentLocation", GEOSPHERE)])
    database["carts"].create_index("user", unique=True)
    logger.info(f"Indexes ensured on database '{database.name}'")


def to_object_id(value) -> Optional[ObjectId]:
    """Parse an id coming from a request; None when it is not a valid ObjectId."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None


def serialize_doc(doc):
    """Make a Mongo document JSON friendly: ``_id`` -> ``id``, ObjectIds -> str."""
    if isinstance(doc, dict):
        out = {}
        for k, v in doc.items():
            if k == "_id":
                out["id"] = str(v)
            elif k == "password":
                continue
            else:
                out[k] = serialize_doc(v)
        return out
    if isinstance(doc, list):
        return [serialize_doc(v) for v in doc]
    if isinstance(doc, ObjectId):
        return str(doc)
    if hasattr(doc, "isoformat"):
        return doc.isoformat()
    return doc
