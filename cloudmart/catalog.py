"""Catalog queries: filtered product listing, category facets, lookup by id."""

import re

from pymongo import DESCENDING

from cloudmart.db import PRODUCTS, oid
from cloudmart.errors import NotFound
from cloudmart.models import CatalogPage, Product

NEWEST_FIRST = [("created_at", DESCENDING), ("_id", DESCENDING)]


def build_filter(search=None, category=None):
    """Mongo filter for a case-insensitive name/description search AND an exact category."""
    query = {}
    search = (search or "").strip()
    category = (category or "").strip()

    if search:
        # Substring match, so user input must not be read as a pattern
        pattern = re.escape(search)
        query["$or"] = [
            {"name": {"$regex": pattern, "$options": "i"}},
            {"description": {"$regex": pattern, "$options": "i"}},
        ]
    if category:
        query["category"] = category
    return query


def list_categories(db):
    """Distinct non-empty categories over the whole catalog, sorted."""
    categories = db[PRODUCTS].distinct("category", {"category": {"$nin": [None, ""]}})
    return sorted(categories)


def list_products(db, search=None, category=None):
    """Products matching the filters, newest first, plus the full category facet list."""
    cursor = db[PRODUCTS].find(build_filter(search, category)).sort(NEWEST_FIRST)
    return CatalogPage(
        products=[Product.from_doc(doc) for doc in cursor],
        categories=list_categories(db),
        search=(search or "").strip(),
        category=(category or "").strip(),
    )


def get_product(db, product_id):
    """Return a single Product; NotFound when absent or the id is malformed."""
    doc = db[PRODUCTS].find_one({"_id": oid(product_id, "Product")})
    if doc is None:
        raise NotFound("Product not found")
    return Product.from_doc(doc)
