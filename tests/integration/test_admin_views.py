"""Tests for the admin product pages."""

import io

import pytest
from bson.objectid import ObjectId

from cloudmart import cart
from cloudmart.db import CART_ITEMS, PRODUCTS


@pytest.mark.parametrize("path", ["/admin/products/", "/admin/products/new"])
def test_guest_is_sent_to_login(client, path):
    response = client.get(path)
    assert response.status_code == 302
    assert "/login" in response.headers["Location"]


def test_customer_is_denied(customer_client, db):
    response = customer_client.post("/admin/products/", data={"name": "Hack", "price": "1"})

    assert response.status_code == 302
    assert response.headers["Location"].endswith("/products/")
    assert db[PRODUCTS].count_documents({}) == 0
    assert b"Admin privileges required" in customer_client.get("/products/").data


def test_dashboard_lists_products(admin_client, make_product):
    make_product("Desk", price="149.00", category="Furniture")
    response = admin_client.get("/admin/products/")
    assert response.status_code == 200
    assert b"Desk" in response.data
    assert b"$149.00" in response.data


class TestCreate:
    def test_with_image(self, admin_client, db, s3_client):
        response = admin_client.post(
            "/admin/products/",
            data={
                "name": "Desk",
                "description": "Oak",
                "price": "149.00",
                "category": "Furniture",
                "image": (io.BytesIO(b"fake-jpeg"), "desk.jpg", "image/jpeg"),
            },
            content_type="multipart/form-data",
        )

        assert response.status_code == 302
        doc = db[PRODUCTS].find_one({"name": "Desk"})
        assert doc["image_key"].startswith(f"products/{doc['_id']}/")
        assert s3_client.put_object.call_args.kwargs["Body"] == b"fake-jpeg"
        assert b"Product created successfully" in admin_client.get("/admin/products/").data

    def test_invalid_price_rerenders_form(self, admin_client, db):
        response = admin_client.post("/admin/products/", data={"name": "Desk", "price": "cheap"})

        assert response.status_code == 400
        assert b"Price must be a valid number" in response.data
        assert b'value="Desk"' in response.data
        assert db[PRODUCTS].count_documents({}) == 0

    def test_rejects_non_image_upload(self, admin_client, db, s3_client):
        response = admin_client.post(
            "/admin/products/",
            data={"name": "Desk", "price": "10", "image": (io.BytesIO(b"#!/bin/sh"), "run.sh")},
            content_type="multipart/form-data",
        )

        assert response.status_code == 400
        assert b"Only image files" in response.data
        s3_client.put_object.assert_not_called()

    def test_oversized_upload_is_refused(self, admin_client, app, db):
        app.config["MAX_CONTENT_LENGTH"] = 1024
        response = admin_client.post(
            "/admin/products/",
            data={"name": "Desk", "price": "10", "image": (io.BytesIO(b"x" * 4096), "big.png")},
            content_type="multipart/form-data",
        )

        assert response.status_code == 302
        assert db[PRODUCTS].count_documents({}) == 0
        assert b"File is too large" in admin_client.get("/admin/products/").data


class TestUpdate:
    def test_edit_form(self, admin_client, make_product):
        product = make_product("Desk", price="149.00")
        response = admin_client.get(f"/admin/products/{product.id}/edit")
        assert response.status_code == 200
        assert b"Edit: Desk" in response.data

    def test_update(self, admin_client, db, make_product):
        product = make_product("Desk", price="149.00")

        response = admin_client.post(
            f"/admin/products/{product.id}",
            data={"name": "Standing Desk", "price": "199.00", "category": "Office"},
        )

        assert response.status_code == 302
        doc = db[PRODUCTS].find_one({"_id": ObjectId(product.id)})
        assert doc["name"] == "Standing Desk"
        assert doc["category"] == "Office"

    def test_missing_product(self, admin_client):
        response = admin_client.post(f"/admin/products/{ObjectId()}", data={"name": "X", "price": "1"})
        assert response.headers["Location"].endswith("/admin/products/")


class TestDelete:
    def test_delete_cascades(self, admin_client, db, make_user, make_product):
        shopper = make_user()
        product = make_product("Desk")
        cart.add(db, shopper.id, product.id, 1)

        response = admin_client.post(f"/admin/products/{product.id}/delete")

        assert response.status_code == 302
        assert db[PRODUCTS].count_documents({}) == 0
        assert db[CART_ITEMS].count_documents({}) == 0
        assert b"Product deleted successfully" in admin_client.get("/admin/products/").data

    def test_delete_missing(self, admin_client):
        admin_client.post(f"/admin/products/{ObjectId()}/delete")
        assert b"Product not found" in admin_client.get("/admin/products/").data
