"""Shopping cart: one row per (user, product) with a positive quantity.

Every function takes the acting user's id explicitly; nothing here reads the
session. Totals are recomputed from live product prices on each view.
"""

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal

from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from cloudmart.catalog import get_product
from cloudmart.db import CART_ITEMS, PRODUCTS, oid
from cloudmart.errors import Forbidden, InvalidArgument, NotFound
from cloudmart.models import CENTS, CartItem, CartLine, CartView, CheckoutResult, Product
from cloudmart.utils.logging import get_logger

logger = get_logger(__name__)


def parse_quantity(raw, default=None):
    """Coerce form input to an int >= 1.

    Blank input falls back to ``default`` when one is given; anything else that
    is not a whole number of at least 1 raises InvalidArgument.
    """
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        if default is not None:
            return default
        raise InvalidArgument("Quantity is required")
    if isinstance(raw, bool):
        raise InvalidArgument("Quantity must be a whole number")
    if isinstance(raw, int):
        quantity = raw
    else:
        try:
            quantity = int(str(raw).strip())
        except ValueError:
            raise InvalidArgument("Quantity must be a whole number")
    if quantity < 1:
        raise InvalidArgument("Quantity must be at least 1")
    return quantity


def view(db, user_id):
    """The user's cart, newest line first, with its total."""
    user_oid = oid(user_id, "User")
    items = [
        CartItem.from_doc(doc)
        for doc in db[CART_ITEMS].find({"user_id": user_oid}).sort([("created_at", DESCENDING), ("_id", DESCENDING)])
    ]
    if not items:
        return CartView()

    product_ids = [oid(item.product_id) for item in items]
    products = {
        str(doc["_id"]): Product.from_doc(doc)
        for doc in db[PRODUCTS].find({"_id": {"$in": product_ids}})
    }

    lines = []
    for item in items:
        product = products.get(item.product_id)
        if product is None:
            continue
        lines.append(CartLine(item_id=item.id, product=product, quantity=item.quantity))

    total = sum((line.product.price * line.quantity for line in lines), Decimal("0"))
    return CartView(lines=lines, total=total.quantize(CENTS, rounding=ROUND_HALF_UP))


def item_count(db, user_id):
    """Total number of units in the user's cart."""
    user_oid = oid(user_id, "User")
    return sum(doc["quantity"] for doc in db[CART_ITEMS].find({"user_id": user_oid}, {"quantity": 1}))


def add(db, user_id, product_id, quantity=None):
    """Add ``quantity`` (default 1) of a product, incrementing an existing line.

    Returns the product name for the confirmation message.
    """
    user_oid = oid(user_id, "User")
    product = get_product(db, product_id)
    qty = parse_quantity(quantity, default=1)
    key = {"user_id": user_oid, "product_id": oid(product.id)}
    update = {
        "$inc": {"quantity": qty},
        "$setOnInsert": {"created_at": datetime.now(timezone.utc)},
    }

    try:
        doc = db[CART_ITEMS].find_one_and_update(key, update, upsert=True, return_document=ReturnDocument.AFTER)
    except DuplicateKeyError:
        # A concurrent add inserted the row first; the unique index makes the retry an increment
        doc = db[CART_ITEMS].find_one_and_update(key, update, return_document=ReturnDocument.AFTER)

    logger.info("cart_item_added", user_id=str(user_oid), product_id=product.id, added=qty, quantity=doc["quantity"])
    return product.name


def _owned_item(db, user_oid, item_id):
    item_oid = oid(item_id, "Cart item")
    doc = db[CART_ITEMS].find_one({"_id": item_oid})
    if doc is None:
        raise NotFound("Cart item not found")
    if doc["user_id"] != user_oid:
        logger.warning("cart_item_access_denied", user_id=str(user_oid), item_id=str(item_oid))
        raise Forbidden("Cart item belongs to another user")
    return doc


def update_quantity(db, user_id, item_id, quantity):
    """Overwrite the quantity of a line the user owns."""
    user_oid = oid(user_id, "User")
    qty = parse_quantity(quantity)
    doc = _owned_item(db, user_oid, item_id)

    db[CART_ITEMS].update_one({"_id": doc["_id"], "user_id": user_oid}, {"$set": {"quantity": qty}})
    logger.info("cart_item_updated", user_id=str(user_oid), item_id=str(doc["_id"]), quantity=qty)


def remove(db, user_id, item_id):
    """Delete a line the user owns."""
    user_oid = oid(user_id, "User")
    doc = _owned_item(db, user_oid, item_id)

    db[CART_ITEMS].delete_one({"_id": doc["_id"], "user_id": user_oid})
    logger.info("cart_item_removed", user_id=str(user_oid), item_id=str(doc["_id"]))


def checkout(db, user_id):
    """Clear the user's cart. No order, payment or stock change is recorded."""
    user_oid = oid(user_id, "User")
    removed = db[CART_ITEMS].delete_many({"user_id": user_oid}).deleted_count
    if removed:
        logger.info("checkout_completed", user_id=str(user_oid), items_cleared=removed)
    else:
        logger.info("checkout_cart_empty", user_id=str(user_oid))
    return CheckoutResult(removed=removed)
