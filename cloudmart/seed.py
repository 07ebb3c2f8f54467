"""Development data: an admin account, a demo customer and sample products.

Safe to run repeatedly; nothing is created twice.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from bson.decimal128 import Decimal128

from cloudmart.db import PRODUCTS
from cloudmart.identity import ensure_admin, find_user_by_email, register_user
from cloudmart.utils.logging import get_logger

logger = get_logger(__name__)

DEMO_CUSTOMER_EMAIL = "customer@example.com"
DEMO_CUSTOMER_PASSWORD = "Customer@123"

SAMPLE_PRODUCTS = [
    # Electronics
    {
        "name": "Wireless Bluetooth Headphones",
        "description": "Premium noise-cancelling wireless headphones with 30-hour battery life and Bluetooth 5.0.",
        "price": "79.99",
        "category": "Electronics",
    },
    {
        "name": "Smart Watch Pro",
        "description": "Smartwatch with heart rate monitoring, GPS tracking and water resistance. Works with iOS and Android.",
        "price": "199.99",
        "category": "Electronics",
    },
    {
        "name": "USB-C Hub Adapter",
        "description": "7-in-1 USB-C hub with HDMI, USB 3.0, SD card reader and 100W power delivery.",
        "price": "34.99",
        "category": "Electronics",
    },
    # Clothing
    {
        "name": "Classic Denim Jacket",
        "description": "Timeless denim jacket made from premium cotton with button closure and chest pockets.",
        "price": "59.99",
        "category": "Clothing",
    },
    {
        "name": "Running Shoes Ultra",
        "description": "Lightweight running shoes with responsive cushioning and a breathable mesh upper.",
        "price": "129.99",
        "category": "Clothing",
    },
    {
        "name": "Cotton Polo Shirt",
        "description": "Classic fit polo shirt made from 100% organic cotton.",
        "price": "29.99",
        "category": "Clothing",
    },
    # Books
    {
        "name": "Cloud Computing Handbook",
        "description": "Guide to AWS, Azure and GCP services covering architecture, deployment and operations.",
        "price": "44.99",
        "category": "Books",
    },
    {
        "name": "Docker & Kubernetes Guide",
        "description": "Hands-on guide to containers and orchestration, from Docker basics to CI/CD pipelines.",
        "price": "39.99",
        "category": "Books",
    },
    # Home & Garden
    {
        "name": "Indoor Plant Set",
        "description": "Set of 3 low-maintenance indoor plants in ceramic pots, with care instructions.",
        "price": "49.99",
        "category": "Home & Garden",
    },
    {
        "name": "LED Desk Lamp",
        "description": "Adjustable LED desk lamp with 5 brightness levels, 3 color temperatures and a USB charging port.",
        "price": "24.99",
        "category": "Home & Garden",
    },
]


def seed_users(db, admin_email, admin_password):
    """Create the admin and demo customer accounts; returns the number created."""
    created = 0
    _, admin_created = ensure_admin(db, admin_email, admin_password)
    if admin_created:
        created += 1
        logger.info("seed_admin_created", email=admin_email)

    if find_user_by_email(db, DEMO_CUSTOMER_EMAIL) is None:
        register_user(db, DEMO_CUSTOMER_EMAIL, DEMO_CUSTOMER_PASSWORD)
        created += 1
        logger.info("seed_customer_created", email=DEMO_CUSTOMER_EMAIL)
    return created


def seed_products(db):
    """Insert the sample products when the catalog is empty; returns the number inserted."""
    existing = db[PRODUCTS].count_documents({})
    if existing:
        logger.info("seed_products_skipped", existing=existing)
        return 0

    now = datetime.now(timezone.utc)
    docs = []
    # Stagger timestamps so "newest first" keeps the listing order stable
    for offset, product in enumerate(reversed(SAMPLE_PRODUCTS)):
        created_at = now + timedelta(seconds=offset)
        docs.append(dict(
            product,
            price=Decimal128(Decimal(product["price"])),
            image_url=None,
            image_key=None,
            created_at=created_at,
            updated_at=created_at,
        ))
    db[PRODUCTS].insert_many(docs)
    logger.info("seed_products_created", count=len(docs))
    return len(docs)
