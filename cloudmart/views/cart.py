from flask import Blueprint, flash, g, redirect, render_template, request, url_for

from cloudmart import cart as cart_engine
from cloudmart.auth import login_required
from cloudmart.db import get_db
from cloudmart.errors import Forbidden, InvalidArgument, NotFound

bp = Blueprint("cart", __name__, url_prefix="/cart")


@bp.route("/")
@login_required
def index():
    """Displays the contents of the user's shopping cart."""
    cart = cart_engine.view(get_db(), g.user.id)
    return render_template("cart/index.html", cart=cart)


@bp.route("/add", methods=["POST"])
@login_required
def add():
    """Adds a product to the user's shopping cart."""
    try:
        name = cart_engine.add(get_db(), g.user.id, request.form.get("product_id", ""), request.form.get("quantity"))
    except NotFound as exc:
        flash(exc.message, "error")
        return redirect(url_for("products.index"))
    except InvalidArgument as exc:
        flash(exc.message, "error")
        return redirect(request.referrer or url_for("products.index"))

    flash(f"{name} added to cart", "success")
    return redirect(url_for("cart.index"))


@bp.route("/update/<item_id>", methods=["POST"])
@login_required
def update(item_id):
    """Sets the quantity of a line in the user's cart."""
    try:
        cart_engine.update_quantity(get_db(), g.user.id, item_id, request.form.get("quantity"))
    except InvalidArgument as exc:
        flash(exc.message, "error")
    except (NotFound, Forbidden):
        flash("Cart item not found", "error")
    else:
        flash("Cart updated", "success")
    return redirect(url_for("cart.index"))


@bp.route("/remove/<item_id>", methods=["POST"])
@login_required
def remove(item_id):
    """Removes a line from the user's shopping cart."""
    try:
        cart_engine.remove(get_db(), g.user.id, item_id)
    except (NotFound, Forbidden):
        flash("Cart item not found", "error")
    else:
        flash("Item removed from cart", "success")
    return redirect(url_for("cart.index"))


@bp.route("/checkout", methods=["POST"])
@login_required
def checkout():
    """Clears the cart; there is no payment step."""
    result = cart_engine.checkout(get_db(), g.user.id)
    if result.already_empty:
        flash("Your cart is already empty", "info")
        return redirect(url_for("cart.index"))

    flash("Order placed successfully! Thank you for your purchase.", "success")
    return redirect(url_for("products.index"))
