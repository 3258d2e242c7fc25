"""Shared fixtures.

The environment is configured before ``taskflow`` is imported so the cached
settings and the engine point at a throwaway SQLite file.
"""

import os
import tempfile
from pathlib import Path

DB_PATH = Path(tempfile.gettempdir()) / f"taskflow_test_{os.getpid()}.sqlite"

os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = f"sqlite:///{DB_PATH}"
os.environ["SEED_DEFAULT_DATA"] = "true"

from unittest.mock import AsyncMock  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from taskflow.main import app  # noqa: E402


SEEDED_CREDENTIALS = {
    "admin": ("admin@example.com", "admin123"),
    "manager": ("manager@example.com", "manager123"),
    "user": ("user@example.com", "user123"),
}


def _remove_db():
    if DB_PATH.exists():
        DB_PATH.unlink()


@pytest.fixture(autouse=True)
def token_blacklist(monkeypatch):
    """Replace the Redis revocation list with mocks."""
    monkeypatch.setattr(
        "taskflow.core.dependencies.is_token_blacklisted",
        AsyncMock(return_value=False),
    )
    blacklist = AsyncMock()
    monkeypatch.setattr("taskflow.api.auth.blacklist_token", blacklist)
    return blacklist


@pytest.fixture
def client():
    """App client backed by a freshly seeded database."""
    _remove_db()
    with TestClient(app) as test_client:
        yield test_client
    _remove_db()


def login(client, email, password):
    response = client.post("/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True, body
    return {"Authorization": f"Bearer {body['token']}"}


@pytest.fixture
def admin_headers(client):
    return login(client, *SEEDED_CREDENTIALS["admin"])


@pytest.fixture
def manager_headers(client):
    return login(client, *SEEDED_CREDENTIALS["manager"])


@pytest.fixture
def user_headers(client):
    return login(client, *SEEDED_CREDENTIALS["user"])


@pytest.fixture
def seeded_users(client, admin_headers):
    """Seeded users keyed by username."""
    response = client.get("/users", headers=admin_headers)
    assert response.status_code == 200
    return {user["username"]: user for user in response.json()}
