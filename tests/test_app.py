"""Application wiring tests."""

import pytest
from fastapi.testclient import TestClient

from rbac.jwt import create_access_token
from rbac.roles import Role
from web.app import create_app


class TestHealth:
    """Test the liveness check"""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "environment": "test"}


class TestCorrelationId:
    """Test X-Request-ID propagation"""

    def test_generated_when_missing(self, client):
        response = client.get("/health")
        assert len(response.headers["X-Request-ID"]) == 32

    def test_echoed_when_provided(self, client):
        response = client.get("/health", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"

    def test_present_on_denials(self, client, auth_header):
        response = client.get(
            "/api/v1/admin/rbac/roles",
            headers={**auth_header(Role.FREE), "X-Request-ID": "req-456"},
        )
        assert response.status_code == 403
        assert response.headers["X-Request-ID"] == "req-456"


class TestCors:
    """Test CORS configuration"""

    def test_allowed_origin(self, client):
        response = client.options(
            "/health",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "GET",
            },
        )
        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "http://localhost:3000"


class TestAppSettings:
    """The application verifies tokens with the settings it was built with"""

    @pytest.fixture
    def custom_settings(self):
        from config.settings import AuthSettings, Settings

        return Settings(environment="test", auth=AuthSettings(jwt_secret="k" * 40))

    @pytest.fixture
    def custom_client(self, custom_settings):
        return TestClient(create_app(custom_settings))

    def test_accepts_token_signed_with_app_settings(self, custom_client, custom_settings):
        token = create_access_token(
            "user-1", "user@example.com", role=Role.PRO, settings=custom_settings,
        )
        response = custom_client.get(
            "/api/v1/admin/rbac/me",
            headers={"Authorization": f"Bearer {token}"},
        )
        assert response.status_code == 200
        assert response.json()["role"] == "PRO"

    def test_rejects_token_signed_with_process_settings(self, custom_client, auth_header):
        response = custom_client.get("/api/v1/admin/rbac/me", headers=auth_header(Role.PRO))
        assert response.status_code == 401
