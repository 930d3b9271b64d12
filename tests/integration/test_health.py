"""Integration tests for health check endpoints."""

from collections.abc import Callable

from fastapi.testclient import TestClient

from fakes import FakeSupabaseStore
from helpers import USER_A_ID


class TestHealthEndpoint:
    """Tests for /health endpoint."""

    def test_health_returns_healthy_status(self, client: TestClient) -> None:
        """Test that /health endpoint returns healthy status."""
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["timestamp"] is not None
        assert data["version"] == "0.1.0"


class TestReadinessEndpoint:
    """Tests for /health/ready endpoint."""

    def test_readiness_returns_200_when_healthy(self, client: TestClient) -> None:
        """Test that /health/ready returns 200 when the database answers."""
        response = client.get("/health/ready")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert [check["name"] for check in data["checks"]] == ["database"]
        assert data["checks"][0]["healthy"] is True

    def test_readiness_returns_503_when_database_down(
        self, client: TestClient, fake_store: FakeSupabaseStore
    ) -> None:
        """Test that /health/ready reports an unhealthy database."""
        fake_store.fail("profiles", "select", message="connection refused")

        response = client.get("/health/ready")

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "unhealthy"
        assert data["checks"][0]["healthy"] is False
        assert "connection refused" in data["checks"][0]["error"]


class TestAuthenticatedHealthEndpoint:
    """Tests for /health/auth endpoint."""

    def test_returns_user_for_valid_token(
        self, client: TestClient, auth_headers: Callable[..., dict[str, str]]
    ) -> None:
        """Test that a valid session is echoed back."""
        response = client.get("/health/auth", headers=auth_headers())

        assert response.status_code == 200
        data = response.json()
        assert data["authenticated"] is True
        assert data["user_id"] == USER_A_ID

    def test_returns_401_without_token(self, client: TestClient) -> None:
        """Test that the endpoint requires a session."""
        response = client.get("/health/auth")

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == "Bearer"
        assert response.json()["code"] == "authentication_error"
