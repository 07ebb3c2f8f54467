from pathlib import Path
from unittest.mock import MagicMock

import mongomock
import pytest

from cloudmart import admin, create_app
from cloudmart.config import TestingConfig
from cloudmart.db import ensure_indexes
from cloudmart.identity import register_user
from cloudmart.models import ROLE_ADMIN
from cloudmart.storage import ImageStorage

PASSWORD = "secret123"


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))
        if "/unit/" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)


@pytest.fixture
def db():
    client = mongomock.MongoClient()
    database = client["cloudmart_test"]
    ensure_indexes(database)
    yield database
    client.drop_database("cloudmart_test")


@pytest.fixture
def s3_client():
    client = MagicMock()
    client.generate_presigned_url.return_value = "https://signed.example/url"
    return client


@pytest.fixture
def storage(s3_client):
    return ImageStorage(s3_client, "test-bucket", "us-east-1")


@pytest.fixture
def make_user(db):
    def _make_user(email="shopper@example.com", role="customer"):
        return register_user(db, email, PASSWORD, role=role)

    return _make_user


@pytest.fixture
def make_product(db, storage):
    def _make_product(name="Widget", price="10.00", category=None, description=None, image=None):
        change = admin.create_product(db, storage, name, description, price, category, image=image)
        return change.product

    return _make_product


@pytest.fixture
def app(db, storage):
    app = create_app(TestingConfig, db=db, storage=storage)
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login(client):
    def _login(email, password=PASSWORD):
        return client.post("/login", data={"email": email, "password": password})

    return _login


@pytest.fixture
def customer(make_user):
    return make_user("customer@example.com")


@pytest.fixture
def admin_user(make_user):
    return make_user("admin@example.com", role=ROLE_ADMIN)


@pytest.fixture
def customer_client(client, login, customer):
    login(customer.email)
    return client


@pytest.fixture
def admin_client(client, login, admin_user):
    login(admin_user.email)
    return client
