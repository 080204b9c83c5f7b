"""Database package."""

from esign.db.session import (
    AsyncSessionLocal,
    Base,
    SessionLocal,
    async_engine,
    get_db,
    get_db_dependency,
    init_db,
    sync_engine,
)

__all__ = [
    "AsyncSessionLocal",
    "Base",
    "SessionLocal",
    "async_engine",
    "get_db",
    "get_db_dependency",
    "init_db",
    "sync_engine",
]
