"""Unit tests for profile routes."""

import pytest
from fastapi.testclient import TestClient

from accountguard.credentials import TokenIssuer
from tests.unit.api.conftest import JWT_SECRET, register

EMAIL = "alice@example.com"
PASSWORD = "Secret123"


@pytest.fixture
def token(client: TestClient) -> str:
    return register(client)["data"]["token"]


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.mark.unit
class TestAuthentication:
    """Bearer token handling on profile routes."""

    def test_missing_token(self, client: TestClient) -> None:
        response = client.get("/api/v1/auth/profile")

        assert response.status_code == 401
        assert response.json()["error"] == "Missing bearer token"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_garbage_token(self, client: TestClient) -> None:
        response = client.get("/api/v1/auth/profile", headers=auth("not.a.jwt"))
        assert response.status_code == 401

    def test_token_from_other_secret(self, client: TestClient, token: str) -> None:
        forged = TokenIssuer("a-different-signing-secret-0123456789").issue(1, EMAIL)

        response = client.get("/api/v1/auth/profile", headers=auth(forged))

        assert response.status_code == 401

    def test_token_for_missing_account(self, client: TestClient) -> None:
        orphan = TokenIssuer(JWT_SECRET).issue(999, "ghost@example.com")

        response = client.get("/api/v1/auth/profile", headers=auth(orphan))

        assert response.status_code == 404
        assert response.json()["error"] == "Account not found"


@pytest.mark.unit
class TestGetProfile:
    def test_get_profile(self, client: TestClient, token: str) -> None:
        response = client.get("/api/v1/auth/profile", headers=auth(token))

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["email"] == EMAIL
        assert data["display_name"] == "Alice"
        assert "reset_token" not in data


@pytest.mark.unit
class TestUpdateProfile:
    """Tests for PATCH /api/v1/auth/profile."""

    def test_update_display_name(self, client: TestClient, token: str) -> None:
        response = client.patch(
            "/api/v1/auth/profile", json={"display_name": "Alice L"}, headers=auth(token)
        )

        assert response.status_code == 200
        assert response.json()["data"]["display_name"] == "Alice L"
        assert response.json()["data"]["email"] == EMAIL

    def test_update_email(self, client: TestClient, token: str) -> None:
        response = client.patch(
            "/api/v1/auth/profile", json={"email": "alice@new.example"}, headers=auth(token)
        )

        assert response.status_code == 200
        assert response.json()["data"]["email"] == "alice@new.example"

    def test_update_email_taken(self, client: TestClient, token: str) -> None:
        register(client, email="bob@example.com")

        response = client.patch(
            "/api/v1/auth/profile", json={"email": "bob@example.com"}, headers=auth(token)
        )

        assert response.status_code == 409

    def test_update_validation(self, client: TestClient, token: str) -> None:
        response = client.patch(
            "/api/v1/auth/profile", json={"display_name": "A"}, headers=auth(token)
        )

        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "display_name"


@pytest.mark.unit
class TestChangePassword:
    """Tests for POST /api/v1/auth/profile/password."""

    def change(self, client: TestClient, token: str, current: str, new: str):
        return client.post(
            "/api/v1/auth/profile/password",
            json={"current_password": current, "new_password": new},
            headers=auth(token),
        )

    def test_change_password(self, client: TestClient, token: str) -> None:
        response = self.change(client, token, PASSWORD, "NewSecret456")

        assert response.status_code == 200
        assert response.json()["data"]["message"] == "Password changed successfully"
        login = client.post(
            "/api/v1/auth/login", json={"email": EMAIL, "password": "NewSecret456"}
        )
        assert login.status_code == 200

    def test_wrong_current_password(self, client: TestClient, token: str) -> None:
        response = self.change(client, token, "Wrong1234", "NewSecret456")

        assert response.status_code == 401
        assert response.json()["error"] == "The current password you provided is incorrect"

    def test_same_password(self, client: TestClient, token: str) -> None:
        response = self.change(client, token, PASSWORD, PASSWORD)

        assert response.status_code == 400
        assert "different" in response.json()["error"]

    def test_weak_new_password(self, client: TestClient, token: str) -> None:
        response = self.change(client, token, PASSWORD, "weakpassword")

        assert response.status_code == 400
        assert response.json()["error"] == "Validation failed"
