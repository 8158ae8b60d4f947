from datetime import datetime
from typing import Any

import pytest
from fastapi.testclient import TestClient

from pet_minder_api.app.core.config import settings
from pet_minder_api.app.core.db import init_db
from pet_minder_api.app.core.security import create_access_token
from pet_minder_api.app.main import app


def parse_dt(value: str) -> datetime:
    """Parse an API timestamp (pydantic renders UTC as ``Z``)."""
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def register(client: TestClient, email: str, password: str = "secret") -> dict[str, Any]:
    response = client.post(
        "/api/v1/users/",
        json={"email": email, "password": password, "first_name": email.split("@")[0]},
    )
    assert response.status_code == 201, response.text
    user = response.json()
    token = create_access_token({"sub": user["id"]})
    return {
        "id": user["id"],
        "role": user["role"],
        "headers": {"Authorization": f"Bearer {token}"},
    }


@pytest.fixture
def database(tmp_path, monkeypatch) -> str:
    """Point the application at a fresh SQLite file and migrate it."""
    path = str(tmp_path / "pet_minder_test.db")
    monkeypatch.setattr(settings, "database_url", path)
    init_db()
    return path


@pytest.fixture
def client(database: str):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin(client: TestClient) -> dict[str, Any]:
    # The first registered user is the administrator.
    return register(client, "admin@example.com")


@pytest.fixture
def user1(client: TestClient, admin: dict[str, Any]) -> dict[str, Any]:
    return register(client, "user1@example.com")


@pytest.fixture
def user2(client: TestClient, user1: dict[str, Any]) -> dict[str, Any]:
    return register(client, "user2@example.com")


@pytest.fixture
def pet_payload() -> dict[str, Any]:
    return {
        "name": "Biscuit",
        "gender": "Female",
        "type": "Dog",
        "date_of_birth": "2021-04-12",
        "breed": "Beagle",
        "weight": 11.4,
    }
