import pytest
from fastapi.testclient import TestClient

from expertbook.api.dependencies.services import get_clock
from expertbook.database import get_db
from expertbook.main import app


@pytest.fixture
def client(db, clock):
    """TestClient bound to the per-test database and frozen clock."""

    def _get_db():
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_clock] = lambda: clock
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
