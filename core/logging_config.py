# core/logging_config.py
import logging
import sys
from typing import Optional

from core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(name)s:%(module)s] %(message)s"
LOGGER_NAME = "mapshare"

# Library loggers that are too chatty at INFO
QUIET_LOGGERS = ("apscheduler", "sqlalchemy.engine", "passlib")


def resolve_level(name: Optional[str]) -> int:
    """Unknown names fall back to INFO."""
    level = logging.getLevelName(str(name or "INFO").upper())
    return level if isinstance(level, int) else logging.INFO


def setup_logger(level: Optional[str] = None) -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(resolve_level(level or settings.LOG_LEVEL))

    # Avoid duplicate handlers in dev reload
    if logger.handlers:
        return logger

    # stdout, not stderr
    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(stream_handler)
    logger.propagate = False

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger


logger = setup_logger()
