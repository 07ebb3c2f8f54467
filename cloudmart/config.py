import os
from datetime import timedelta

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _flag(name, default="false"):
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    ENV_NAME = "development"
    TESTING = False

    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-in-production")
    APP_NAME = os.getenv("APP_NAME", "CloudMart Store")

    # --- MongoDB ---
    MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017/cloudmart")

    # --- Object storage (S3) ---
    AWS_REGION = os.getenv("AWS_REGION", "us-east-1")
    AWS_S3_BUCKET = os.getenv("AWS_S3_BUCKET", "cloudmart-images")
    # Leave unset on EC2/ECS so the instance role is used
    AWS_ACCESS_KEY_ID = os.getenv("AWS_ACCESS_KEY_ID")
    AWS_SECRET_ACCESS_KEY = os.getenv("AWS_SECRET_ACCESS_KEY")

    # --- Uploads ---
    MAX_CONTENT_LENGTH = 5 * 1024 * 1024

    # --- Sessions ---
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SECURE = False
    PERMANENT_SESSION_LIFETIME = timedelta(hours=24)

    # --- Seeding ---
    ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@cloudmart.local")
    ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "Admin@123")

    # --- Logging ---
    LOG_DIR = os.getenv("LOG_DIR", "logs")


class DevelopmentConfig(Config):
    DEBUG = True


class ProductionConfig(Config):
    ENV_NAME = "production"
    SESSION_COOKIE_SECURE = _flag("USE_HTTPS")


class TestingConfig(Config):
    ENV_NAME = "test"
    TESTING = True
    SECRET_KEY = "test-secret"
    MONGO_URI = "mongodb://localhost:27017/cloudmart_test"
    AWS_S3_BUCKET = "cloudmart-test"


CONFIGS = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "test": TestingConfig,
    "testing": TestingConfig,
}


def get_config(name=None):
    """Pick the config class for ``name`` (or ENVIRONMENT/FLASK_ENV)."""
    name = (name or os.getenv("ENVIRONMENT") or os.getenv("FLASK_ENV") or "development").lower()
    return CONFIGS.get(name, DevelopmentConfig)
