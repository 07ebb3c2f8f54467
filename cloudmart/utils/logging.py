"""Logging configuration for the storefront.

Standard library logging does the routing (console plus optional rotating
files); structlog renders the records and carries per-request context.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any, Optional

import structlog


def get_environment(env: Optional[str] = None) -> str:
    return (env or os.getenv("ENVIRONMENT") or os.getenv("FLASK_ENV") or "development").lower()


def get_log_level(env: Optional[str] = None) -> str:
    """Get log level based on environment."""
    level_map = {
        "production": "INFO",
        "staging": "INFO",
        "development": "DEBUG",
        "test": "WARNING",
        "testing": "WARNING",
    }

    # Blank LOG_LEVEL falls back to the environment default
    return (os.getenv("LOG_LEVEL") or level_map.get(get_environment(env), "INFO")).upper()


def file_logging_enabled(env: Optional[str] = None) -> bool:
    return get_environment(env) == "production" or os.getenv("ENABLE_FILE_LOGS", "").lower() == "true"


def _writable_log_dir(log_dir: Path) -> Optional[Path]:
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
    except OSError:
        return None
    return log_dir if os.access(log_dir, os.W_OK) else None


def setup_stdlib_logging(env: Optional[str] = None, log_dir: Optional[str] = None) -> None:
    """Configure standard library logging."""
    log_level = get_log_level(env)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    root_logger.addHandler(console_handler)

    if file_logging_enabled(env):
        directory = _writable_log_dir(Path(log_dir or os.getenv("LOG_DIR", "logs")))
        if directory is None:
            root_logger.warning("Log directory is not writable, file logging disabled")
        else:
            file_handler = logging.handlers.RotatingFileHandler(
                filename=directory / "cloudmart.log",
                maxBytes=20 * 1024 * 1024,
                backupCount=7,
                encoding="utf-8",
            )
            file_handler.setLevel(log_level)

            error_handler = logging.handlers.RotatingFileHandler(
                filename=directory / "cloudmart_error.log",
                maxBytes=20 * 1024 * 1024,
                backupCount=14,
                encoding="utf-8",
            )
            error_handler.setLevel(logging.ERROR)

            root_logger.addHandler(file_handler)
            root_logger.addHandler(error_handler)

    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)
    logging.getLogger("werkzeug").setLevel(logging.WARNING)


def setup_structlog(env: Optional[str] = None) -> None:
    """Configure structlog for structured logging."""
    env = get_environment(env)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if env in ["production", "staging"]:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging(env: Optional[str] = None, log_dir: Optional[str] = None) -> None:
    """Configure all logging for the application."""
    setup_stdlib_logging(env, log_dir)
    setup_structlog(env)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a configured logger instance."""
    return structlog.get_logger(name)


def add_context(**kwargs: Any) -> None:
    """Add context variables that will be included in all subsequent log messages."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all context variables."""
    structlog.contextvars.clear_contextvars()
