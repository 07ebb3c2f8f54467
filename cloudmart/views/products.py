from flask import Blueprint, flash, redirect, render_template, request, url_for

from cloudmart.catalog import get_product, list_products
from cloudmart.db import get_db
from cloudmart.errors import NotFound

bp = Blueprint("products", __name__, url_prefix="/products")


@bp.route("/")
def index():
    """Product listing, filtered by ``search`` and ``category`` query args."""
    page = list_products(get_db(), request.args.get("search"), request.args.get("category"))
    return render_template("products/index.html", page=page)


@bp.route("/<product_id>")
def detail(product_id):
    """Displays details for a specific product."""
    try:
        product = get_product(get_db(), product_id)
    except NotFound as exc:
        flash(exc.message, "error")
        return redirect(url_for("products.index"))
    return render_template("products/detail.html", product=product)
