"""User accounts: registration, credential checks and lookups.

This is the only module that touches password hashes. The cart and catalog
code receives a user id from the request layer and nothing more.
"""

import re
from datetime import datetime, timezone

from pymongo.errors import DuplicateKeyError
from werkzeug.security import check_password_hash, generate_password_hash

from cloudmart.db import CART_ITEMS, USERS, oid
from cloudmart.errors import InvalidArgument, NotFound
from cloudmart.models import ROLE_ADMIN, ROLE_CUSTOMER, ROLES, User
from cloudmart.utils.logging import get_logger

logger = get_logger(__name__)

MIN_PASSWORD_LENGTH = 6
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def normalize_email(email):
    return (email or "").strip().lower()


def find_user_by_id(db, user_id):
    """Return the User for ``user_id`` or None."""
    try:
        _id = oid(user_id, "User")
    except NotFound:
        return None
    doc = db[USERS].find_one({"_id": _id})
    return User.from_doc(doc) if doc else None


def find_user_by_email(db, email):
    doc = db[USERS].find_one({"email": normalize_email(email)})
    return User.from_doc(doc) if doc else None


def register_user(db, email, password, confirm_password=None, role=ROLE_CUSTOMER):
    """Create a user with a hashed password and return it."""
    email = normalize_email(email)
    if not email or not password:
        raise InvalidArgument("Email and password are required")
    if not EMAIL_RE.match(email):
        raise InvalidArgument("Please enter a valid email address")
    if confirm_password is not None and password != confirm_password:
        raise InvalidArgument("Passwords do not match")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise InvalidArgument(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if role not in ROLES:
        raise InvalidArgument("Role must be customer or admin")
    if db[USERS].find_one({"email": email}, {"_id": 1}):
        raise InvalidArgument("An account with this email already exists")

    doc = {
        "email": email,
        "password_hash": generate_password_hash(password),
        "role": role,
        "created_at": datetime.now(timezone.utc),
    }
    try:
        result = db[USERS].insert_one(doc)
    except DuplicateKeyError:
        raise InvalidArgument("An account with this email already exists")

    doc["_id"] = result.inserted_id
    logger.info("user_registered", user_id=str(result.inserted_id), role=role)
    return User.from_doc(doc)


def authenticate(db, email, password):
    """Return the User when the credentials match, otherwise None."""
    email = normalize_email(email)
    doc = db[USERS].find_one({"email": email})
    if not doc:
        logger.warning("login_unknown_email", email=email)
        return None
    if not check_password_hash(doc["password_hash"], password or ""):
        logger.warning("login_failed", email=email)
        return None
    logger.info("user_logged_in", user_id=str(doc["_id"]))
    return User.from_doc(doc)


def ensure_admin(db, email, password):
    """Create the admin account if it is missing; returns (user, created)."""
    existing = find_user_by_email(db, email)
    if existing:
        return existing, False
    return register_user(db, email, password, role=ROLE_ADMIN), True


def delete_user(db, user_id):
    """Delete a user and every cart item they own."""
    _id = oid(user_id, "User")
    result = db[USERS].delete_one({"_id": _id})
    if result.deleted_count == 0:
        raise NotFound("User not found")
    removed = db[CART_ITEMS].delete_many({"user_id": _id}).deleted_count
    logger.info("user_deleted", user_id=str(_id), cart_items_removed=removed)
