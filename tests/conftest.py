"""Shared fixtures for the Authware SDK tests."""

from typing import Any, Dict

import pytest

from authware import AuthwareAsyncClient, AuthwareClient, AuthwareConfig


BASE_URL = "https://api.authware.org"
APP_ID = "baf3d091-3626-40a0-afb9-2c2eda2c6e45"
HARDWARE_ID = "hwid-test-value"


@pytest.fixture
def valid_config(tmp_path) -> AuthwareConfig:
    """Configuration writing tokens under a temporary directory."""
    return AuthwareConfig(
        app_version="2.1.0",
        token_directory=str(tmp_path),
        hardware_id_provider=lambda: HARDWARE_ID,
        debug=True,
    )


@pytest.fixture
def application_payload() -> Dict[str, Any]:
    """Mock /app response."""
    return {
        "id": APP_ID,
        "name": "Example App",
        "version": "2.1.0",
        "date_created": "2021-07-04T12:30:00.1234567Z",
        "is_hwid_checking_enabled": False,
        "apis": [
            {"id": "5f0c3a6e-8d57-4b1f-9b2e-1f7a2a4c9d10", "name": "echo"},
        ],
    }


@pytest.fixture
def profile_payload() -> Dict[str, Any]:
    """Mock /user/profile response."""
    return {
        "id": "0d6f6b7e-3b8a-4c6e-9a51-5e2b1d4f7c33",
        "username": "Test",
        "email": "test@example.com",
        "date_created": "2022-01-01T00:00:00Z",
        "expiration": "2030-01-01T00:00:00Z",
        "api_key": "api-key-123",
        "role": {
            "id": "7a1c2e3d-4b5f-4a6b-8c9d-0e1f2a3b4c5d",
            "name": "Member",
            "variables": [{"key": "tier", "value": "gold"}],
        },
        "sessions": [
            {"id": "11111111-2222-3333-4444-555555555555", "date_created": "2022-02-02T10:00:00Z"},
        ],
        "requests": [],
        "user_variables": [{"key": "theme", "value": "dark", "can_user_edit": True}],
    }


@pytest.fixture
def sync_client(valid_config: AuthwareConfig):
    """Create sync client for testing."""
    client = AuthwareClient(valid_config)
    yield client
    client.close()


@pytest.fixture
def async_client(valid_config: AuthwareConfig) -> AuthwareAsyncClient:
    """Create async client for testing (tests close it)."""
    return AuthwareAsyncClient(valid_config)
