import time

from flask import Blueprint, jsonify, redirect, url_for
from pymongo.errors import PyMongoError

from cloudmart.db import get_db, ping
from cloudmart.storage import get_storage
from cloudmart.utils.logging import get_logger

logger = get_logger(__name__)

bp = Blueprint("main", __name__)

STARTED_AT = time.time()


@bp.route("/")
def home():
    """The storefront starts at the catalog."""
    return redirect(url_for("products.index"))


@bp.route("/health")
def health():
    """Liveness probe for the load balancer: database and bucket reachability."""
    status = {
        "status": "healthy",
        "timestamp": int(time.time() * 1000),
        "uptime": round(time.time() - STARTED_AT, 3),
        "database": "disconnected",
        "s3": "inaccessible",
    }

    try:
        ping(get_db())
        status["database"] = "connected"
    except PyMongoError:
        status["status"] = "degraded"
        logger.warning("health_database_disconnected")

    if get_storage().is_reachable():
        status["s3"] = "accessible"
    else:
        status["status"] = "degraded"
        logger.warning("health_s3_inaccessible")

    return jsonify(status), 200 if status["status"] == "healthy" else 503
