"""Pytest configuration and fixtures."""

import os

# Set test configuration BEFORE any esign imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./test.db"
os.environ["JWT_SECRET"] = "test-secret"

import itertools
from datetime import datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from esign.core.security import create_access_token
from esign.db.repository import SqlDocumentStore
from esign.db.session import Base, get_db_dependency
from esign.deps import get_reveal_throttle
from esign.lifecycle.access import InMemoryKeyRevealCounter, KeyRevealThrottle
from esign.lifecycle.service import LifecycleService
from esign.main import app

OWNER_ID = "owner-1"
OTHER_OWNER_ID = "owner-2"


@pytest.fixture(scope="function")
def sqlite_sessionmaker(tmp_path):
    """Create a SQLite database with schema for testing."""
    db_path = tmp_path / "test.db"
    engine = create_engine(
        f"sqlite:///{db_path}", echo=False, connect_args={"check_same_thread": False}
    )
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)
    yield SessionLocal
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(sqlite_sessionmaker):
    session = sqlite_sessionmaker()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(db_session):
    return SqlDocumentStore(db_session)


@pytest.fixture
def clock():
    """Deterministic clock that advances one second per call."""
    ticks = itertools.count()
    start = datetime(2024, 1, 1, 12, 0, 0)
    return lambda: start + timedelta(seconds=next(ticks))


@pytest.fixture
def key_factory():
    """Deterministic share keys: KEY000000001, KEY000000002, ..."""
    counter = itertools.count(1)
    return lambda: f"KEY{next(counter):09d}"


@pytest.fixture
def service(store, clock, key_factory):
    return LifecycleService(store, key_factory=key_factory, clock=clock)


@pytest.fixture
def make_draft(service):
    """Create a draft with client details filled in."""

    def _make(owner_id=OWNER_ID, title="Website redesign", **kwargs):
        kwargs.setdefault("client_name", "Jane Client")
        kwargs.setdefault("client_email", "jane@example.com")
        kwargs.setdefault("content", {"scope_of_work": "Design and build"})
        return service.create_document(owner_id, title, **kwargs)

    return _make


@pytest.fixture
def reveal_throttle():
    return KeyRevealThrottle(InMemoryKeyRevealCounter(), limit=3)


@pytest.fixture
def api_client(sqlite_sessionmaker, reveal_throttle):
    """TestClient whose request sessions come from the per-test SQLite database."""

    def override_db():
        db = sqlite_sessionmaker()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db_dependency] = override_db
    app.dependency_overrides[get_reveal_throttle] = lambda: reveal_throttle
    try:
        with TestClient(app, raise_server_exceptions=False) as client:
            yield client
    finally:
        app.dependency_overrides.clear()


def auth_headers(owner_id: str = OWNER_ID) -> dict:
    return {"Authorization": f"Bearer {create_access_token(owner_id)}"}


@pytest.fixture
def owner_headers():
    return auth_headers(OWNER_ID)


@pytest.fixture
def other_owner_headers():
    return auth_headers(OTHER_OWNER_ID)


@pytest.fixture
def mock_db_session():
    """Create a mock async database session."""
    mock_session = MagicMock()
    mock_session.__aenter__ = AsyncMock(return_value=mock_session)
    mock_session.__aexit__ = AsyncMock(return_value=None)
    mock_session.execute = AsyncMock()
    return mock_session
