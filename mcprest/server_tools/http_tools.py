"""HTTP verb tools for MCP server (api_get, api_post, api_put, api_patch, api_delete)."""

import logging
from dataclasses import dataclass

from mcp import types as mcp_types

from mcprest.core.errors import ArgumentValidationError
from mcprest.core.formatting import format_error_response, handle_api_response, handle_error
from mcprest.core.http_client import ApiClient, ApiRequestOptions
from mcprest.server_models import BaseRequestArgs, BodyRequestArgs, DeleteRequestArgs, QueryRequestArgs
from mcprest.server_utils import explicit_fields, validate_arguments

logger = logging.getLogger(__name__)

_PROPERTY_SCHEMAS = {
    "path": {
        "type": "string",
        "description": "API endpoint path (relative to base URL)",
        "minLength": 1,
    },
    "queryParams": {
        "type": "object",
        "description": "Optional query parameters as key-value pairs",
        "additionalProperties": {"type": "string"},
    },
    "body": {
        "description": "Optional JSON request body",
    },
    "headers": {
        "type": "object",
        "description": "Optional custom headers as key-value pairs",
        "additionalProperties": {"type": "string"},
    },
}


@dataclass(frozen=True)
class ToolSpec:
    """Static description of one verb tool."""
    name: str
    method: str
    description: str
    args_model: type[BaseRequestArgs]


TOOL_SPECS = (
    ToolSpec("api_get", "GET", "Perform GET request to the configured API endpoint", QueryRequestArgs),
    ToolSpec("api_post", "POST", "Perform POST request to the configured API endpoint with JSON body support", BodyRequestArgs),
    ToolSpec("api_put", "PUT", "Perform PUT request to the configured API endpoint with JSON body support", BodyRequestArgs),
    ToolSpec("api_patch", "PATCH", "Perform PATCH request to the configured API endpoint with JSON body support", BodyRequestArgs),
    ToolSpec("api_delete", "DELETE", "Perform DELETE request to the configured API endpoint", DeleteRequestArgs),
)


def build_input_schema(args_model: type[BaseRequestArgs]) -> dict:
    """JSON schema mirroring a strict argument model."""
    properties = {}
    for name, field in args_model.model_fields.items():
        wire_name = field.alias or name
        properties[wire_name] = dict(_PROPERTY_SCHEMAS[wire_name])
    return {
        "type": "object",
        "properties": properties,
        "required": ["path"],
        "additionalProperties": False,
    }


class ToolHandler:
    """Validates a tool call, forwards it to the ApiClient and formats the outcome."""

    def __init__(self, api_client: ApiClient, spec: ToolSpec):
        self.api_client = api_client
        self.spec = spec

    @property
    def tool_name(self) -> str:
        return self.spec.name

    @property
    def tool_definition(self) -> mcp_types.Tool:
        return mcp_types.Tool(
            name=self.spec.name,
            description=self.spec.description,
            inputSchema=build_input_schema(self.spec.args_model),
        )

    def _request_options(self, args: BaseRequestArgs) -> ApiRequestOptions:
        fields = explicit_fields(args)
        options = {"path": args.path}
        for name in ("query_params", "headers"):
            if fields.get(name) is not None:
                options[name] = fields[name]
        if "body" in fields:
            options["body"] = fields["body"]
        return ApiRequestOptions(**options)

    async def handle_call(self, request: mcp_types.CallToolRequest) -> mcp_types.CallToolResult:
        try:
            try:
                args = validate_arguments(self.spec.args_model, request.params.arguments)
            except ArgumentValidationError as e:
                return format_error_response(str(e))

            call = getattr(self.api_client, self.spec.method.lower())
            response = await call(self._request_options(args))
            logger.debug(f"{self.spec.name}: {args.path} -> status {response.status}, success={response.success}")
            return handle_api_response(response)
        except Exception as e:
            logger.exception(f"{self.spec.name}: unexpected error")
            return handle_error(e)

    async def call(self, arguments) -> mcp_types.CallToolResult:
        """Handle a call given only its arguments."""
        request = mcp_types.CallToolRequest(
            method="tools/call",
            params=mcp_types.CallToolRequestParams(name=self.spec.name, arguments=arguments),
        )
        return await self.handle_call(request)


def create_tool_handlers(api_client: ApiClient) -> list[ToolHandler]:
    """Create one handler per HTTP verb."""
    return [ToolHandler(api_client, spec) for spec in TOOL_SPECS]
