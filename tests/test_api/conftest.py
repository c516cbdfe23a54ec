"""
Fixtures for API tests: app wired to the in-memory database
"""
import pytest
from fastapi.testclient import TestClient

from timetable.api.deps import get_db
from timetable.auth import hash_password
from timetable.config import get_settings
from timetable.main import app


@pytest.fixture
def client(db_session, monkeypatch):
    """Test client for FastAPI (not logged in)"""
    monkeypatch.setenv("AUTH_USERNAME", "admin")
    monkeypatch.setenv("AUTH_PASSWORD_HASH", hash_password("secret"))
    get_settings.cache_clear()

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def authenticated_client(client):
    """Client with a logged-in session cookie"""
    response = client.post("/api/v1/auth/login", json={"username": "admin", "password": "secret"})
    assert response.status_code == 200
    return client
