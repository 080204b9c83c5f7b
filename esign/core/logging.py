"""Logging configuration."""

import logging
import os


def setup_logging(level: str | None = None) -> None:
    """Configure application logging.

    The SQLAlchemy engine logger stays at WARNING unless LOG_SQL is set.
    """
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    if not os.getenv("LOG_SQL"):
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
