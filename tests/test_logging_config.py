# tests/test_logging_config.py

import logging

from core.logging_config import LOGGER_NAME, logger, resolve_level, setup_logger


def test_resolve_level():
    assert resolve_level("debug") == logging.DEBUG
    assert resolve_level("WARNING") == logging.WARNING
    assert resolve_level(None) == logging.INFO
    assert resolve_level("chatty") == logging.INFO


def test_setup_is_idempotent_and_applies_level():
    try:
        again = setup_logger("DEBUG")
        assert again is logger
        assert again.name == LOGGER_NAME
        assert len(again.handlers) == 1
        assert again.level == logging.DEBUG
    finally:
        setup_logger("INFO")


def test_records_carry_module_name():
    formatter = logger.handlers[0].formatter
    record = logging.LogRecord(LOGGER_NAME, logging.INFO, "/app/core/role_guard.py", 10, "role set", None, None)

    line = formatter.format(record)

    assert "[mapshare:role_guard]" in line
    assert line.endswith("role set")
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
