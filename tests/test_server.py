"""Tests for the MCP server wiring."""

import pytest
import responses
from mcp import types as mcp_types

from mcprest import server as server_module
from mcprest.core.config import ServerConfig
from mcprest.core.errors import AuthConfigurationError, ServerError
from mcprest.server import RestApiServer, main, parse_args

from tests.utils_mcp import BASE_URL, parse_result


def test_server_registers_tools(none_config):
    """Test all five verb tools are exposed."""
    server = RestApiServer(none_config)

    names = [tool.name for tool in server.list_tools()]

    assert names == ["api_get", "api_post", "api_put", "api_patch", "api_delete"]
    assert server.api_client.get_base_url() == BASE_URL


def test_server_registers_mcp_handlers(none_config):
    """Test the MCP request handlers are installed."""
    handlers = RestApiServer(none_config).server.request_handlers

    for request_type in (
        mcp_types.ListToolsRequest,
        mcp_types.CallToolRequest,
        mcp_types.ListResourcesRequest,
        mcp_types.ListResourceTemplatesRequest,
        mcp_types.ReadResourceRequest,
    ):
        assert request_type in handlers


async def test_list_tools_handler(none_config):
    """Test tools/list through the MCP handler."""
    server = RestApiServer(none_config)

    result = await server.server.request_handlers[mcp_types.ListToolsRequest](
        mcp_types.ListToolsRequest(method="tools/list")
    )

    assert len(result.root.tools) == 5


async def test_call_tool_dispatch(token_config, mocked_responses):
    """Test a tool call is dispatched and signed with the configured token."""
    mocked_responses.add(responses.GET, f"{BASE_URL}/posts/1", json={"id": 1})
    server = RestApiServer(token_config)

    result = await server.call_tool("api_get", {"path": "/posts/1"})

    assert result.isError is False
    assert parse_result(result)["data"] == {"id": 1}
    assert mocked_responses.calls[0].request.headers["Authorization"] == "Bearer test-token"


async def test_call_tool_validation_error(none_config, mocked_responses):
    """Test invalid arguments come back as a tool error, not an exception."""
    server = RestApiServer(none_config)

    result = await server.call_tool("api_delete", {"path": "/x", "body": {}})

    assert result.isError is True
    assert len(mocked_responses.calls) == 0


async def test_call_unknown_tool(none_config):
    """Test unknown tools are a protocol-level error."""
    server = RestApiServer(none_config)

    with pytest.raises(ServerError, match="Unknown tool: api_head") as exc_info:
        await server.call_tool("api_head", {"path": "/"})
    assert exc_info.value.code == "UNKNOWN_TOOL"


def test_invalid_auth_aborts_construction():
    """Test the strategy is validated before the server is built."""
    config = ServerConfig(base_url=BASE_URL, auth_type="token", auth_token="   ")

    with pytest.raises(AuthConfigurationError, match="non-empty token"):
        RestApiServer(config)


def test_parse_args():
    """Test CLI flags."""
    assert parse_args([]).debug is False
    assert parse_args(["--debug"]).debug is True
    assert parse_args(["-d"]).debug is True


def test_version_flag(capsys):
    """Test --version prints the server version and exits."""
    with pytest.raises(SystemExit) as exc_info:
        parse_args(["--version"])
    assert exc_info.value.code == 0
    assert "mcp-restful-api-server v1.0.0" in capsys.readouterr().out


def test_main_exits_on_bad_config(monkeypatch, clean_env):
    """Test startup stops with exit code 1 when configuration is invalid."""
    monkeypatch.setattr(server_module, "load_dotenv", lambda: None)
    monkeypatch.setenv("API_BASE_URL", "not-a-url")
    monkeypatch.setenv("API_AUTH_TYPE", "none")

    with pytest.raises(SystemExit) as exc_info:
        main([])
    assert exc_info.value.code == 1


def test_main_exits_on_bad_timeout(monkeypatch, clean_env):
    """Test a malformed timeout stops startup with exit code 1."""
    monkeypatch.setattr(server_module, "load_dotenv", lambda: None)
    monkeypatch.setenv("API_BASE_URL", BASE_URL)
    monkeypatch.setenv("API_AUTH_TYPE", "none")
    monkeypatch.setenv("API_TIMEOUT_SECS", "soon")

    with pytest.raises(SystemExit) as exc_info:
        main([])
    assert exc_info.value.code == 1
