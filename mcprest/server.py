"""MCP server exposing REST API operations as tools and resources."""

import argparse
import asyncio
import logging
import os
import sys
from typing import Any, Optional

from dotenv import load_dotenv
from mcp import types as mcp_types
from mcp.server.lowlevel import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.stdio import stdio_server

from mcprest.core.auth import create_authentication_strategy
from mcprest.core.config import ServerConfig, load_config
from mcprest.core.errors import AuthConfigurationError, ConfigurationError, ServerError
from mcprest.core.http_client import ApiClient
from mcprest.core.resources import ApiResourceProvider
from mcprest.server_tools.http_tools import ToolHandler, create_tool_handlers

logger = logging.getLogger(__name__)

SERVER_NAME = "mcp-restful-api-server"
SERVER_VERSION = "1.0.0"


class RestApiServer:
    """
    Composition root: configuration in, MCP server out.

    The authentication strategy is validated once here, before any request
    can be signed; an invalid strategy aborts construction.
    """

    def __init__(self, config: ServerConfig):
        self.config = config
        self.auth_strategy = create_authentication_strategy(config)
        self.auth_strategy.validate()
        logger.debug(f"Authentication configuration validated (auth_type={self.auth_strategy.get_auth_type()})")

        self.api_client = ApiClient(config, self.auth_strategy)
        self.tool_handlers: dict[str, ToolHandler] = {
            handler.tool_name: handler for handler in create_tool_handlers(self.api_client)
        }
        self.resource_provider = ApiResourceProvider(self.api_client, config)

        self.server = Server(SERVER_NAME, version=SERVER_VERSION)
        self._setup_server()
        logger.info(f"Initialized '{SERVER_NAME}' for {config.base_url} with tools {list(self.tool_handlers)}")

    def _setup_server(self) -> None:
        """Register tool and resource handlers on the MCP server."""

        @self.server.list_tools()
        async def list_tools() -> list[mcp_types.Tool]:
            return self.list_tools()

        # Arguments reach the handlers unvalidated; each handler applies its own strict schema.
        @self.server.call_tool(validate_input=False)
        async def call_tool(name: str, arguments: Optional[dict[str, Any]]) -> mcp_types.CallToolResult:
            return await self.call_tool(name, arguments)

        @self.server.list_resources()
        async def list_resources() -> list[mcp_types.Resource]:
            return await self.resource_provider.list_resources()

        @self.server.list_resource_templates()
        async def list_resource_templates() -> list[mcp_types.ResourceTemplate]:
            return [self.resource_provider.get_resource_template()]

        @self.server.read_resource()
        async def read_resource(uri) -> list[ReadResourceContents]:
            logger.debug(f"Reading resource {uri}")
            text = await self.resource_provider.read_resource(str(uri))
            return [ReadResourceContents(content=text, mime_type="application/json")]

    def list_tools(self) -> list[mcp_types.Tool]:
        return [handler.tool_definition for handler in self.tool_handlers.values()]

    async def call_tool(self, name: str, arguments: Optional[dict[str, Any]]) -> mcp_types.CallToolResult:
        """Dispatch a tool call to its verb handler."""
        handler = self.tool_handlers.get(name)
        if handler is None:
            logger.warning(f"Unknown tool requested: {name}")
            raise ServerError(f"Unknown tool: {name}", code="UNKNOWN_TOOL")

        logger.debug(f"Tool call: {name}")
        result = await handler.call(arguments)
        logger.debug(f"Tool '{name}' completed (isError={result.isError})")
        return result

    async def run_stdio(self) -> None:
        """Check API reachability, then serve MCP over stdio until the client disconnects."""
        await self.resource_provider.validate_base_url_accessibility()
        async with stdio_server() as (read_stream, write_stream):
            logger.info("MCP server listening on stdio")
            await self.server.run(read_stream, write_stream, self.server.create_initialization_options())


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="mcprest",
        description="MCP server for RESTful API operations (API_BASE_URL, API_AUTH_TYPE, "
                    "API_AUTH_TOKEN, API_BASIC_AUTH_USERNAME, API_BASIC_AUTH_PASSWORD)",
    )
    parser.add_argument("-d", "--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("-v", "--version", action="version", version=f"{SERVER_NAME} v{SERVER_VERSION}")
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> None:
    """Entry point: load .env, configure logging, build the server and run it."""
    args = parse_args(argv)
    load_dotenv()

    debug = args.debug or os.getenv("DEBUG", "").lower() == "true"
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if debug else logging.INFO,
        format="[%(levelname)s] %(name)s: %(message)s",
    )

    try:
        server = RestApiServer(load_config())
    except AuthConfigurationError as e:
        logger.error(f"Authentication configuration error: {e}")
        sys.exit(1)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    try:
        asyncio.run(server.run_stdio())
    except KeyboardInterrupt:
        logger.info("Shutting down")


if __name__ == "__main__":
    main()
