"""Ensure logging setup does not crash and sets level."""

import logging

from esign.core.logging import setup_logging


def test_setup_logging():
    setup_logging()
    logger = logging.getLogger()
    # Should configure without raising; ensure at least one handler attached
    assert logger.handlers


def test_sql_echo_quiet_by_default(monkeypatch):
    monkeypatch.delenv("LOG_SQL", raising=False)
    setup_logging("debug")
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
