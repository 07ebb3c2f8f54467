from flask import Blueprint, flash, g, redirect, render_template, request, url_for

from cloudmart.auth import login_user, logout_user
from cloudmart.db import get_db
from cloudmart.errors import InvalidArgument
from cloudmart.identity import authenticate, register_user

bp = Blueprint("auth", __name__)


def _safe_next(target):
    # Only follow local paths after login
    if target and target.startswith("/") and not target.startswith("//"):
        return target
    return url_for("products.index")


@bp.route("/register", methods=["GET", "POST"])
def register():
    """Handles user registration."""
    if request.method == "POST":
        try:
            register_user(
                get_db(),
                request.form.get("email", ""),
                request.form.get("password", ""),
                request.form.get("confirm_password", ""),
            )
        except InvalidArgument as exc:
            flash(exc.message, "error")
            return render_template("auth/register.html", form_data=request.form), 400

        flash("Registration successful! Please log in.", "success")
        return redirect(url_for("auth.login"))

    return render_template("auth/register.html", form_data={})


@bp.route("/login", methods=["GET", "POST"])
def login():
    """Handles user login."""
    if g.user is not None:
        flash("You are already logged in.", "info")
        return redirect(url_for("products.index"))

    if request.method == "POST":
        email = request.form.get("email", "")
        password = request.form.get("password", "")
        if not email.strip() or not password:
            flash("Please enter both email and password.", "error")
            return render_template("auth/login.html", form_data=request.form), 400

        user = authenticate(get_db(), email, password)
        if user is None:
            flash("Invalid email or password", "error")
            return render_template("auth/login.html", form_data=request.form), 401

        login_user(user)
        flash(f"Welcome, {user.email}!", "success")
        return redirect(_safe_next(request.args.get("next")))

    return render_template("auth/login.html", form_data={})


@bp.route("/logout")
def logout():
    """Handles user logout."""
    logout_user()
    flash("You have been logged out", "success")
    return redirect(url_for("auth.login"))
