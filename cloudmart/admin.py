"""Admin product management: create, update and delete products with images.

Image upload problems never undo a product change; they come back as a
warning on the ProductChange result. Deleting a product removes it from every
cart.
"""

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation

from bson.decimal128 import Decimal128

from cloudmart.catalog import NEWEST_FIRST
from cloudmart.db import CART_ITEMS, PRODUCTS, oid
from cloudmart.errors import InvalidArgument, NotFound, UpstreamUnavailable
from cloudmart.models import CENTS, Product, ProductChange
from cloudmart.storage import ALLOWED_IMAGE_EXTENSIONS, allowed_image
from cloudmart.utils.logging import get_logger

logger = get_logger(__name__)

MAX_NAME_LENGTH = 255
MAX_CATEGORY_LENGTH = 100

CREATE_IMAGE_WARNING = "Product created but image upload failed. You can add an image later."
UPDATE_IMAGE_WARNING = "Product updated but image upload failed."


def parse_price(raw):
    """Parse a price into a non-negative Decimal with two places."""
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        raise InvalidArgument("Price is required")
    try:
        price = Decimal(str(raw).strip())
    except InvalidOperation:
        raise InvalidArgument("Price must be a valid number")
    if not price.is_finite():
        raise InvalidArgument("Price must be a valid number")
    if price < 0:
        raise InvalidArgument("Price must not be negative")
    if price != price.quantize(CENTS):
        raise InvalidArgument("Price can have at most two decimal places")
    return price.quantize(CENTS)


def _clean_fields(name, description, price, category):
    name = (name or "").strip()
    if not name:
        raise InvalidArgument("Product name is required")
    if len(name) > MAX_NAME_LENGTH:
        raise InvalidArgument(f"Product name must be at most {MAX_NAME_LENGTH} characters")
    category = (category or "").strip() or None
    if category and len(category) > MAX_CATEGORY_LENGTH:
        raise InvalidArgument(f"Category must be at most {MAX_CATEGORY_LENGTH} characters")

    return {
        "name": name,
        "description": (description or "").strip() or None,
        "price": Decimal128(parse_price(price)),
        "category": category,
    }


def _read_image(image):
    """Validate an uploaded file and read it; None when no file was chosen.

    Called before any database write.
    """
    if image is None or not getattr(image, "filename", None):
        return None
    if not allowed_image(image.filename, ALLOWED_IMAGE_EXTENSIONS):
        raise InvalidArgument("Only image files (jpeg, jpg, png, gif, webp) are allowed")
    payload = image.read()
    if not payload:
        raise InvalidArgument("Image file is empty")
    return payload, image.mimetype or "application/octet-stream", image.filename


def _upload(storage, upload, product_id):
    payload, content_type, filename = upload
    return storage.store(payload, content_type, product_id, filename)


def list_admin_products(db):
    """Every product, newest first."""
    return [Product.from_doc(doc) for doc in db[PRODUCTS].find().sort(NEWEST_FIRST)]


def create_product(db, storage, name, description, price, category, image=None):
    """Insert a product, then attach its image if one was uploaded."""
    fields = _clean_fields(name, description, price, category)
    upload = _read_image(image)

    now = datetime.now(timezone.utc)
    doc = dict(fields, image_url=None, image_key=None, created_at=now, updated_at=now)
    doc["_id"] = db[PRODUCTS].insert_one(doc).inserted_id
    product_id = str(doc["_id"])

    warning = None
    if upload:
        try:
            url, key = _upload(storage, upload, product_id)
        except UpstreamUnavailable as exc:
            logger.warning("product_image_upload_failed", product_id=product_id, error=exc.message)
            warning = CREATE_IMAGE_WARNING
        else:
            db[PRODUCTS].update_one({"_id": doc["_id"]}, {"$set": {"image_url": url, "image_key": key}})
            doc.update(image_url=url, image_key=key)

    logger.info("product_created", product_id=product_id, name=doc["name"])
    return ProductChange(product=Product.from_doc(doc), warning=warning)


def update_product(db, storage, product_id, name, description, price, category, image=None):
    """Replace a product's fields; a new image replaces the old one."""
    _id = oid(product_id, "Product")
    existing = db[PRODUCTS].find_one({"_id": _id})
    if existing is None:
        raise NotFound("Product not found")

    changes = _clean_fields(name, description, price, category)
    upload = _read_image(image)
    changes["updated_at"] = datetime.now(timezone.utc)

    warning = None
    old_key = None
    if upload:
        try:
            url, key = _upload(storage, upload, str(_id))
        except UpstreamUnavailable as exc:
            logger.warning("product_image_upload_failed", product_id=str(_id), error=exc.message)
            warning = UPDATE_IMAGE_WARNING
        else:
            changes.update(image_url=url, image_key=key)
            old_key = existing.get("image_key")

    db[PRODUCTS].update_one({"_id": _id}, {"$set": changes})
    if old_key:
        storage.delete(old_key)

    existing.update(changes)
    logger.info("product_updated", product_id=str(_id), name=existing["name"])
    return ProductChange(product=Product.from_doc(existing), warning=warning)


def delete_product(db, storage, product_id):
    """Delete a product, its image and every cart line that references it.

    Returns the deleted product's name.
    """
    _id = oid(product_id, "Product")
    doc = db[PRODUCTS].find_one({"_id": _id})
    if doc is None:
        raise NotFound("Product not found")

    storage.delete(doc.get("image_key"))
    db[PRODUCTS].delete_one({"_id": _id})
    removed = db[CART_ITEMS].delete_many({"product_id": _id}).deleted_count

    logger.info("product_deleted", product_id=str(_id), name=doc["name"], cart_items_removed=removed)
    return doc["name"]
