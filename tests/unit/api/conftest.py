"""Fixtures for API route tests."""

import pytest
from fastapi.testclient import TestClient

from accountguard.api import create_app
from accountguard.config import Settings
from tests.conftest import TEST_BCRYPT_ROUNDS, FakeClock

JWT_SECRET = "api-tests-signing-secret-0123456789"


@pytest.fixture
def settings() -> Settings:
    """Settings for an in-memory app with fast hashing."""
    return Settings(
        db_path=":memory:",
        jwt_secret=JWT_SECRET,
        bcrypt_rounds=TEST_BCRYPT_ROUNDS,
        lockout_seconds=900,
        reset_ttl_seconds=3600,
    )


@pytest.fixture
def client(settings: Settings, clock: FakeClock):
    """TestClient with the lifespan running."""
    app = create_app(settings, clock=clock)
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


def register(client: TestClient, email: str = "alice@example.com", password: str = "Secret123"):
    """Register an account and return the response JSON."""
    response = client.post(
        "/api/v1/auth/register",
        json={"email": email, "password": password, "display_name": "Alice"},
    )
    assert response.status_code == 201
    return response.json()
