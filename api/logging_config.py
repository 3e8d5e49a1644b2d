"""
Logging configuration for the API.

Provides centralized logging setup with request tracking.
"""

import logging
import os
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime
from pathlib import Path
from typing import Optional

# Context variables for request tracking across async calls
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
user_id_var: ContextVar[Optional[str]] = ContextVar("user_id", default=None)


class RequestContextFilter(logging.Filter):
    """Add request_id and user_id to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get() or "-"
        record.user_id = user_id_var.get() or "-"
        return True


def setup_api_logger(
    name: str = "api",
    log_dir: Optional[Path] = None,
    level: int = logging.INFO,
) -> logging.Logger:
    """
    Set up the API logger with file and console handlers.

    Args:
        name: Logger name
        log_dir: Directory for log files (defaults to $LOG_DIR or ./logs)
        level: Logging level

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Avoid adding handlers multiple times
    if logger.handlers:
        return logger

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s user=%(user_id)s] - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if log_dir is None:
        log_dir = Path(os.getenv("LOG_DIR", str(Path.cwd() / "logs")))
    log_dir.mkdir(parents=True, exist_ok=True)

    log_file = log_dir / f"{name}_{datetime.now().strftime('%Y%m%d')}.log"
    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)
    file_handler.addFilter(RequestContextFilter())
    logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(RequestContextFilter())
    logger.addHandler(console_handler)

    return logger


def generate_request_id() -> str:
    """Generate a short unique request ID."""
    return uuid.uuid4().hex[:8]


def set_request_id(request_id: str) -> None:
    """Set the request ID in context."""
    request_id_var.set(request_id)


def set_user_id(user_id: Optional[str]) -> None:
    """Record the authenticated user for log lines."""
    user_id_var.set(user_id)


# Initialize the main API logger
logger = setup_api_logger()
