"""Pytest configuration for MCP protocol integration tests.

These tests start the real server as a subprocess and talk to it over stdio
with the official MCP Python SDK client. The server is pointed at a public
JSON placeholder API, so network access is required.
"""

import asyncio
import json
import os
import sys
from typing import Any, Dict, Optional

import pytest
from mcp import ClientSession
from mcp.client.stdio import StdioServerParameters, stdio_client

INTEGRATION_API_URL = "https://jsonplaceholder.typicode.com"

CALL_TIMEOUT_SECS = 30.0


class MCPTestClient:
    """Test client for calling MCP tools and resources through the full protocol.

    Each call spawns a fresh server process and runs the whole session inside
    a single event loop task, so the stdio transport is always torn down in
    the task that opened it.
    """

    def __init__(self, env: Dict[str, str]):
        self.env = env

    def _server_params(self) -> StdioServerParameters:
        return StdioServerParameters(
            command=sys.executable,
            args=["-m", "mcprest.server"],
            env=self.env,
        )

    async def _with_session(self, action):
        async with stdio_client(self._server_params()) as (read, write):
            async with ClientSession(read, write) as session:
                await asyncio.wait_for(session.initialize(), timeout=10.0)
                return await asyncio.wait_for(action(session), timeout=CALL_TIMEOUT_SECS)

    def call_tool_sync(self, name: str, arguments: Dict[str, Any]) -> Dict[str, Any]:
        """Call a tool and return its decoded envelope plus the isError flag."""
        async def _call(session):
            return await session.call_tool(name, arguments)

        result = asyncio.run(self._with_session(_call))
        text = result.content[0].text
        try:
            payload = json.loads(text)
        except json.JSONDecodeError:
            payload = {"text": text}
        payload["_is_error"] = bool(result.isError)
        return payload

    def list_tools_sync(self):
        async def _list(session):
            return (await session.list_tools()).tools

        return asyncio.run(self._with_session(_list))

    def list_resources_sync(self):
        async def _list(session):
            return (await session.list_resources()).resources

        return asyncio.run(self._with_session(_list))

    def read_resource_sync(self, uri: str) -> Optional[Dict[str, Any]]:
        async def _read(session):
            return await session.read_resource(uri)

        result = asyncio.run(self._with_session(_read))
        return json.loads(result.contents[0].text)


@pytest.fixture(scope="session")
def mcp_client():
    """MCP client bound to a server configured for the public placeholder API."""
    env = os.environ.copy()
    env.update({
        "API_BASE_URL": INTEGRATION_API_URL,
        "API_AUTH_TYPE": "none",
    })
    yield MCPTestClient(env)
