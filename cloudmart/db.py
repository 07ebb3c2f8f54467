from bson.errors import InvalidId
from bson.objectid import ObjectId
from flask import current_app
from flask_pymongo import PyMongo
from pymongo import ASCENDING, DESCENDING

from cloudmart.errors import NotFound
from cloudmart.utils.logging import get_logger

logger = get_logger(__name__)

mongo = PyMongo()

# --- Collection names ---
USERS = "users"
PRODUCTS = "products"
CART_ITEMS = "cart_items"


def init_db(app, database=None):
    """Attach a database handle to the app; ``database`` overrides Flask-PyMongo (tests)."""
    if database is None:
        mongo.init_app(app)
        database = mongo.db
    app.extensions["cloudmart.db"] = database
    return database


def get_db():
    """Return the pymongo Database bound to the current app."""
    return current_app.extensions["cloudmart.db"]


def ensure_indexes(db):
    """Create the indexes the stores rely on (idempotent)."""
    db[USERS].create_index([("email", ASCENDING)], unique=True)
    db[PRODUCTS].create_index([("created_at", DESCENDING)])
    db[PRODUCTS].create_index([("category", ASCENDING)])
    # One row per (user, product); the cart upsert depends on this
    db[CART_ITEMS].create_index([("user_id", ASCENDING), ("product_id", ASCENDING)], unique=True)
    db[CART_ITEMS].create_index([("product_id", ASCENDING)])
    logger.info("indexes_ensured", database=db.name)


def ping(db):
    """Return True when the server answers a ping."""
    db.command("ping")
    return True


def oid(value, what="Item"):
    """Parse an id string into an ObjectId; malformed ids are reported as not found."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        raise NotFound(f"{what} not found")
