# backend/tests/conftest.py
"""
Pytest configuration shared by every test.

Each test gets its own in-memory SQLite engine (StaticPool, so every
thread sees the same connection) and a frozen, advanceable wall clock.
"""

import os
import sys

# Set testing mode BEFORE any expertbook imports
os.environ.setdefault("EXPERTBOOK_ENVIRONMENT", "testing")
os.environ.setdefault("EXPERTBOOK_DATABASE_URL", "sqlite+pysqlite:///:memory:")

# Add the backend directory to Python path so imports work
backend_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if backend_dir not in sys.path:
    sys.path.insert(0, backend_dir)

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from expertbook.database import init_db
from expertbook.models.expert import Expert
from expertbook.services.base import BaseService
from tests._utils.builders import FrozenClock, make_expert


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine) -> Session:
    SessionLocal = sessionmaker(
        bind=engine, autoflush=False, expire_on_commit=False, future=True
    )
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def expert(db) -> Expert:
    return make_expert(db)


@pytest.fixture(autouse=True)
def _reset_service_metrics():
    yield
    BaseService._class_metrics.clear()
