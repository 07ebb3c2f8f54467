import uuid

from flask import Flask, flash, g, redirect, render_template, request, url_for
from pymongo.errors import PyMongoError
from werkzeug.exceptions import RequestEntityTooLarge

from cloudmart import cart as cart_engine
from cloudmart.auth import load_current_user
from cloudmart.cli import register_commands
from cloudmart.config import get_config
from cloudmart.db import get_db, init_db
from cloudmart.errors import StorefrontError, UpstreamUnavailable
from cloudmart.storage import ImageStorage
from cloudmart.utils.logging import add_context, clear_context, configure_logging, get_logger
from cloudmart.views import register_blueprints

logger = get_logger(__name__)

CONTENT_SECURITY_POLICY = "; ".join([
    "default-src 'self'",
    "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net https://*.amazonaws.com",
    "script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net https://*.amazonaws.com",
    "img-src 'self' data: https://*.amazonaws.com",
    "font-src 'self' https://cdn.jsdelivr.net",
    "connect-src 'self' https://*.amazonaws.com",
    "form-action 'self'",
    "frame-ancestors 'self'",
    "object-src 'none'",
])


def create_app(config=None, db=None, storage=None):
    """Application factory.

    ``config`` is a config class or environment name; ``db`` and ``storage``
    replace the MongoDB database and S3 storage (tests pass fakes here).
    """
    app = Flask(__name__)
    app.config.from_object(config if isinstance(config, type) else get_config(config))

    configure_logging(app.config["ENV_NAME"], app.config["LOG_DIR"])

    init_db(app, db)
    app.extensions["cloudmart.storage"] = storage or ImageStorage.from_config(app.config)

    register_blueprints(app)
    register_commands(app)
    _register_hooks(app)
    _register_error_handlers(app)

    logger.info("app_created", env=app.config["ENV_NAME"])
    return app


def _register_hooks(app):
    @app.before_request
    def setup_request():
        clear_context()
        add_context(request_id=uuid.uuid4().hex[:12])
        logger.info(
            "request",
            method=request.method,
            path=request.path,
            ip=request.remote_addr,
            user_agent=request.headers.get("User-Agent"),
        )
        load_current_user()

    @app.teardown_request
    def teardown(exc):
        clear_context()

    @app.after_request
    def security_headers(response):
        response.headers.setdefault("Content-Security-Policy", CONTENT_SECURITY_POLICY)
        response.headers.setdefault("X-Frame-Options", "SAMEORIGIN")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        return response

    @app.context_processor
    def template_globals():
        """Make user and app settings available in all templates."""
        user = g.get("user")
        cart_count = 0
        if user and not g.get("db_unavailable"):
            cart_count = cart_engine.item_count(get_db(), user.id)
        return {
            "current_user": user,
            "app_name": app.config["APP_NAME"],
            "cart_count": cart_count,
        }

    @app.template_filter("money")
    def money(value):
        return f"{value:.2f}"


def _register_error_handlers(app):
    def render_error(title, message, status):
        return render_template("error.html", title=title, message=message), status

    @app.errorhandler(404)
    def not_found(error):
        return render_error("Page Not Found", "The page you are looking for does not exist.", 404)

    @app.errorhandler(RequestEntityTooLarge)
    def too_large(error):
        flash("File is too large. Maximum size is 5MB.", "error")
        return redirect(request.referrer or url_for("admin.products"))

    @app.errorhandler(StorefrontError)
    def storefront_error(error):
        logger.warning("request_rejected", error=error.message, status=error.status_code)
        return render_error("Error", error.message, error.status_code)

    @app.errorhandler(PyMongoError)
    def database_error(error):
        logger.error("database_error", error=str(error), path=request.path, exc_info=True)
        g.db_unavailable = True
        unavailable = UpstreamUnavailable()
        return render_error("Service Unavailable", unavailable.message, unavailable.status_code)

    @app.errorhandler(500)
    def internal_error(error):
        logger.error("unhandled_error", path=request.path, method=request.method, exc_info=True)
        return render_error("Error", "Something went wrong. Please try again later.", 500)
