from functools import wraps

from flask import flash, g, redirect, request, session, url_for

from cloudmart.db import get_db
from cloudmart.identity import find_user_by_id
from cloudmart.utils.logging import add_context, get_logger

logger = get_logger(__name__)


def load_current_user():
    """Resolve the session's user id into ``g.user`` (None for guests)."""
    g.user = None
    user_id = session.get("user_id")
    if not user_id:
        return
    g.user = find_user_by_id(get_db(), user_id)
    if g.user is None:
        # Account was removed while the session was alive
        session.pop("user_id", None)
        return
    add_context(user_id=g.user.id)


def login_user(user):
    session.clear()
    session["user_id"] = user.id
    session.permanent = True


def logout_user():
    session.pop("user_id", None)


# --- Authentication Decorators ---
def login_required(f):
    """Decorator to protect routes that require a logged-in user."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if g.get("user") is None:
            flash("Please log in to access this page.", "error")
            return redirect(url_for("auth.login", next=request.path))
        return f(*args, **kwargs)
    return decorated_function


def admin_required(f):
    """Decorator to protect routes that require an admin user."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        user = g.get("user")
        if user is None:
            flash("Please log in to access this page.", "error")
            return redirect(url_for("auth.login", next=request.path))
        if not user.is_admin:
            logger.warning("admin_access_denied", user_id=user.id, path=request.path)
            flash("Access denied. Admin privileges required.", "error")
            return redirect(url_for("products.index"))
        return f(*args, **kwargs)
    return decorated_function
