"""Logging setup for job-intake.

Modules log through ``logging.getLogger(__name__)``; the CLI calls
``configure_logging`` once so every ``job_intake.*`` record reaches stderr.
"""

import logging
import sys

LOGGER_NAME = "job_intake"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str | None = None) -> logging.Logger:
    """Attach the stderr handler to the app logger and set its level.

    Calling it again only changes the level.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL); INFO if unset.
    """
    app_logger = logging.getLogger(LOGGER_NAME)
    log_level = getattr(logging, (level or "INFO").upper(), logging.INFO)

    if not app_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        app_logger.addHandler(handler)
        # LiteLLM logs to the root logger; keep the two streams apart
        app_logger.propagate = False

    app_logger.setLevel(log_level)
    for handler in app_logger.handlers:
        handler.setLevel(log_level)
    return app_logger


def reset_logging() -> None:
    """Drop the app handler and restore propagation (used by tests)."""
    app_logger = logging.getLogger(LOGGER_NAME)
    app_logger.handlers.clear()
    app_logger.setLevel(logging.NOTSET)
    app_logger.propagate = True
