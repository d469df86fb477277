"""Integration tests for the REST tools via MCP protocol."""

import pytest

from tests.utils_mcp import assert_response_structure, call_tool

pytestmark = pytest.mark.integration


def test_list_tools_mcp(mcp_client):
    """Test all verb tools are advertised via MCP protocol."""
    names = {tool.name for tool in mcp_client.list_tools_sync()}
    assert names == {"api_get", "api_post", "api_put", "api_patch", "api_delete"}


def test_api_get_mcp(mcp_client):
    """Test api_get via MCP protocol."""
    response = call_tool(mcp_client, "api_get", path="/posts/1")

    assert_response_structure(response, ["success", "status", "data", "headers"])
    assert response["_is_error"] is False
    assert response["status"] == 200
    assert response["data"]["id"] == 1


def test_api_get_with_query_params_mcp(mcp_client):
    """Test api_get with query parameters via MCP protocol."""
    response = call_tool(mcp_client, "api_get", path="/posts", queryParams={"userId": "1"})

    assert response["status"] == 200
    assert all(post["userId"] == 1 for post in response["data"])


def test_api_post_mcp(mcp_client):
    """Test api_post returns 201 via MCP protocol."""
    response = call_tool(mcp_client, "api_post", path="/posts", body={"title": "foo", "body": "bar", "userId": 1})

    assert response["status"] == 201
    assert response["data"]["title"] == "foo"


def test_api_put_and_patch_mcp(mcp_client):
    """Test api_put and api_patch via MCP protocol."""
    put = call_tool(mcp_client, "api_put", path="/posts/1", body={"id": 1, "title": "replaced", "body": "b", "userId": 1})
    patch = call_tool(mcp_client, "api_patch", path="/posts/1", body={"title": "patched"})

    assert put["status"] == 200
    assert put["data"]["title"] == "replaced"
    assert patch["data"]["title"] == "patched"


def test_api_delete_mcp(mcp_client):
    """Test api_delete via MCP protocol."""
    response = call_tool(mcp_client, "api_delete", path="/posts/1")

    assert response["success"] is True
    assert response["status"] == 200


def test_api_get_not_found_mcp(mcp_client):
    """Test an HTTP 404 comes back as a tool error via MCP protocol."""
    response = call_tool(mcp_client, "api_get", path="/posts/999999")

    assert response["_is_error"] is True
    assert response["success"] is False
    assert response["details"]["status"] == 404


def test_api_delete_rejects_body_mcp(mcp_client):
    """Test strict argument validation is enforced end to end."""
    response = call_tool(mcp_client, "api_delete", path="/posts/1", body={"x": 1})

    assert response["_is_error"] is True
    assert response["error"].startswith("Invalid arguments: ")
