from flask import Blueprint, flash, redirect, render_template, request, url_for

from cloudmart import admin as product_admin
from cloudmart.auth import admin_required
from cloudmart.catalog import get_product
from cloudmart.db import get_db
from cloudmart.errors import InvalidArgument, NotFound
from cloudmart.storage import get_storage

bp = Blueprint("admin", __name__, url_prefix="/admin/products")


def _form_fields():
    return {
        "name": request.form.get("name", ""),
        "description": request.form.get("description", ""),
        "price": request.form.get("price", ""),
        "category": request.form.get("category", ""),
        "image": request.files.get("image"),
    }


@bp.route("/")
@admin_required
def products():
    """Product management dashboard."""
    return render_template("admin/products.html", products=product_admin.list_admin_products(get_db()))


@bp.route("/new")
@admin_required
def new_product():
    return render_template("admin/product_form.html", product=None, form_data={})


@bp.route("/", methods=["POST"])
@admin_required
def create_product():
    """Allows an admin to add a product, with an optional image upload."""
    try:
        change = product_admin.create_product(get_db(), get_storage(), **_form_fields())
    except InvalidArgument as exc:
        flash(exc.message, "error")
        return render_template("admin/product_form.html", product=None, form_data=request.form), 400

    if change.warning:
        flash(change.warning, "warning")
    flash("Product created successfully", "success")
    return redirect(url_for("admin.products"))


@bp.route("/<product_id>/edit")
@admin_required
def edit_product(product_id):
    try:
        product = get_product(get_db(), product_id)
    except NotFound as exc:
        flash(exc.message, "error")
        return redirect(url_for("admin.products"))
    return render_template("admin/product_form.html", product=product, form_data={})


@bp.route("/<product_id>", methods=["POST"])
@admin_required
def update_product(product_id):
    """Updates an existing product."""
    try:
        change = product_admin.update_product(get_db(), get_storage(), product_id, **_form_fields())
    except NotFound as exc:
        flash(exc.message, "error")
        return redirect(url_for("admin.products"))
    except InvalidArgument as exc:
        flash(exc.message, "error")
        return redirect(url_for("admin.edit_product", product_id=product_id))

    if change.warning:
        flash(change.warning, "warning")
    flash("Product updated successfully", "success")
    return redirect(url_for("admin.products"))


@bp.route("/<product_id>/delete", methods=["POST"])
@admin_required
def delete_product(product_id):
    """Deletes a product, its image and any cart lines holding it."""
    try:
        product_admin.delete_product(get_db(), get_storage(), product_id)
    except NotFound as exc:
        flash(exc.message, "error")
    else:
        flash("Product deleted successfully", "success")
    return redirect(url_for("admin.products"))
