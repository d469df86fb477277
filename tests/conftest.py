"""Pytest configuration and fixtures."""

from unittest.mock import AsyncMock, MagicMock

import pytest
import responses

from mcprest.core.auth import NoAuthHandler, TokenAuthHandler
from mcprest.core.config import ServerConfig
from mcprest.core.http_client import ApiClient, ApiResponse

from tests.utils_mcp import BASE_URL


@pytest.fixture
def mock_env(monkeypatch):
    """Mock environment variables for testing."""
    def _set_env(**kwargs):
        for key, value in kwargs.items():
            monkeypatch.setenv(key, value)
    return _set_env


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every API_* variable so tests start from a blank configuration."""
    for name in (
        "API_BASE_URL",
        "API_AUTH_TYPE",
        "API_AUTH_TOKEN",
        "API_BASIC_AUTH_USERNAME",
        "API_BASIC_AUTH_PASSWORD",
        "API_TIMEOUT_SECS",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def none_config():
    return ServerConfig(base_url=BASE_URL, auth_type="none")


@pytest.fixture
def token_config():
    return ServerConfig(base_url=BASE_URL, auth_type="token", auth_token="test-token")


@pytest.fixture
def api_client(none_config):
    """ApiClient against BASE_URL with no authentication."""
    return ApiClient(none_config, NoAuthHandler())


@pytest.fixture
def token_client(token_config):
    """ApiClient against BASE_URL with bearer token authentication."""
    return ApiClient(token_config, TokenAuthHandler("test-token"))


@pytest.fixture
def mocked_responses():
    """Stub HTTP layer; requests made from worker threads are intercepted too."""
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


@pytest.fixture
def mock_api_client():
    """ApiClient double whose verb methods are AsyncMocks returning success."""
    client = MagicMock(spec=ApiClient)
    for verb in ("get", "post", "put", "patch", "delete"):
        setattr(client, verb, AsyncMock(return_value=ApiResponse(success=True, status=200, data={}, headers={})))
    client.get_base_url.return_value = BASE_URL
    client.get_auth_type.return_value = "none"
    return client
