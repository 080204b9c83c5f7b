"""Alembic helper utilities for programmatic migrations."""
from __future__ import annotations

from pathlib import Path

from alembic import command
from alembic.config import Config

from esign.db.session import _to_sync_url


def run_migrations(database_url: str, revision: str = "head") -> None:
    """Run Alembic migrations up to `revision` (latest by default)."""
    base_path = Path(__file__).resolve().parents[2]
    alembic_cfg = Config(str(base_path / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(base_path / "alembic"))
    sync_url = _to_sync_url(database_url)
    alembic_cfg.set_main_option("sqlalchemy.url", sync_url)
    alembic_cfg.attributes["database_url_override"] = sync_url
    command.upgrade(alembic_cfg, revision)
