"""Logging setup for framework diagnostics.

Run output (results, summaries) goes to the report sink. This logger only
carries internal diagnostics such as modules skipped during discovery.
"""

import logging
import sys
from typing import Optional

LOGGER_NAME = "bartest"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(log_level: str = "WARNING", stream=None) -> logging.Logger:
    """Attach a single stream handler to the ``bartest`` logger.

    Calling it again replaces the previous handler instead of stacking.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level.upper(), logging.WARNING))

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Child logger under ``bartest`` (e.g. ``bartest.discovery``)."""
    if not name or name == LOGGER_NAME:
        return logging.getLogger(LOGGER_NAME)
    if name.startswith(LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{LOGGER_NAME}.{name}")
