"""Pytest configuration and fixtures for test suite."""

import os
import sys
from pathlib import Path

import pytest

# Set test environment BEFORE any other imports
os.environ.setdefault("APP_ENVIRONMENT", "test")
os.environ.setdefault("AUTH_JWT_SECRET", "test-secret-key-for-session-tokens-0123456789")

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))


def _reset_settings_caches():
    """Drop cached settings and signing secret so env changes take effect."""
    from config.settings import get_settings
    from rbac.jwt import reset_jwt_secret_cache

    get_settings.cache_clear()
    reset_jwt_secret_cache()


@pytest.fixture(autouse=True)
def reset_settings():
    """Reset settings caches before and after each test."""
    _reset_settings_caches()
    yield
    _reset_settings_caches()


@pytest.fixture
def make_token():
    """
    Build a signed access token.

    Usage:
        def test_x(make_token):
            token = make_token(Role.ADMIN)
    """
    from rbac.jwt import create_access_token

    def _make(role=None, user_id="user-1", email="user@example.com", **kwargs):
        return create_access_token(user_id=user_id, email=email, role=role, **kwargs)

    return _make


@pytest.fixture
def auth_header(make_token):
    """Build an Authorization header for a role."""

    def _header(role=None, **kwargs):
        return {"Authorization": f"Bearer {make_token(role, **kwargs)}"}

    return _header


@pytest.fixture
def app():
    """Fresh application built from test settings."""
    from config.settings import Settings
    from web.app import create_app

    return create_app(Settings(environment="test"))


@pytest.fixture
def client(app):
    from fastapi.testclient import TestClient

    return TestClient(app)
