"""API discovery and endpoint documentation exposed as MCP resources.

Discovery is best-effort: probes are plain GETs through the ApiClient and
any failure just means the probed endpoint is not listed.
"""

import asyncio
import json
import logging
import re
from datetime import datetime, timezone
from typing import Any, Optional

from mcp import types as mcp_types
from pydantic import BaseModel, Field

from .config import ServerConfig
from .errors import ResourceNotFoundError
from .http_client import ApiClient

logger = logging.getLogger(__name__)

INFO_URI = "api://endpoints/info"
ENDPOINT_URI_TEMPLATE = "api://endpoints/{endpoint}"
_ENDPOINT_URI = re.compile(r"^api://endpoints/endpoint-(\d+)$")

PROBE_PATHS = ("/api", "/v1", "/api/v1", "/health", "/status", "/info", "/version", "/docs", "/swagger", "/openapi")
PROBE_RESOURCES = ("users", "posts", "comments", "articles", "products", "orders", "items", "data")

_COLLECTION_QUERY = {
    "limit": "Maximum number of items to return",
    "offset": "Number of items to skip",
    "page": "Page number for pagination",
    "sort": "Field to sort by",
    "order": "Sort order (asc/desc)",
    "filter": "Filter criteria",
}


class EndpointParameters(BaseModel):
    """Documented parameters of an endpoint."""
    path: Optional[dict[str, str]] = Field(default=None, description="Path placeholders")
    query: Optional[dict[str, str]] = Field(default=None, description="Query parameters")
    body: Optional[Any] = Field(default=None, description="Body description")


class ApiEndpointInfo(BaseModel):
    """A documented or discovered API endpoint."""
    path: str = Field(description="Endpoint path, may contain {resource}/{id} placeholders")
    methods: list[str] = Field(description="HTTP methods the endpoint accepts")
    description: str = Field(description="Human-readable description")
    parameters: EndpointParameters = Field(default_factory=EndpointParameters)


TOOL_SUMMARIES = (
    ("api_get", "Perform GET requests to retrieve data"),
    ("api_post", "Perform POST requests to create resources"),
    ("api_put", "Perform PUT requests to update entire resources"),
    ("api_patch", "Perform PATCH requests to partially update resources"),
    ("api_delete", "Perform DELETE requests to remove resources"),
)


def standard_endpoints() -> list[ApiEndpointInfo]:
    """Generic REST CRUD patterns, documented regardless of the target API."""
    item_path = {"resource": "The resource type (e.g., users, posts, etc.)", "id": "The unique identifier of the resource"}
    return [
        ApiEndpointInfo(
            path="/{resource}",
            methods=["GET"],
            description="Retrieve a collection of resources",
            parameters=EndpointParameters(
                path={"resource": "The resource path (e.g., users, posts, etc.)"},
                query=dict(_COLLECTION_QUERY),
            ),
        ),
        ApiEndpointInfo(
            path="/{resource}/{id}",
            methods=["GET"],
            description="Retrieve a specific resource by ID",
            parameters=EndpointParameters(path=item_path),
        ),
        ApiEndpointInfo(
            path="/{resource}",
            methods=["POST"],
            description="Create a new resource",
            parameters=EndpointParameters(
                path={"resource": "The resource type to create"},
                body="JSON object containing the resource data to create",
            ),
        ),
        ApiEndpointInfo(
            path="/{resource}/{id}",
            methods=["PUT"],
            description="Update an entire resource by ID (replace)",
            parameters=EndpointParameters(path=item_path, body="JSON object containing the complete updated resource data"),
        ),
        ApiEndpointInfo(
            path="/{resource}/{id}",
            methods=["PATCH"],
            description="Partially update a resource by ID (merge)",
            parameters=EndpointParameters(path=item_path, body="JSON object containing only the fields to update"),
        ),
        ApiEndpointInfo(
            path="/{resource}/{id}",
            methods=["DELETE"],
            description="Delete a resource by ID",
            parameters=EndpointParameters(path=item_path),
        ),
    ]


def generate_usage_example(endpoint: ApiEndpointInfo) -> dict:
    """Example tool call for the endpoint's first method."""
    if not endpoint.methods:
        raise ValueError("Endpoint must have at least one method")

    method = endpoint.methods[0]
    example = {
        "tool": f"api_{method.lower()}",
        "arguments": {"path": endpoint.path.replace("{resource}", "users").replace("{id}", "123")},
    }
    if endpoint.parameters.query:
        example["arguments"]["queryParams"] = {"limit": "10", "offset": "0"}
    if endpoint.parameters.body and method in ("POST", "PUT", "PATCH"):
        example["arguments"]["body"] = {"name": "John Doe", "email": "john@example.com"}
    return example


class ApiResourceProvider:
    """Lists and reads the api://endpoints/* resources."""

    def __init__(self, api_client: ApiClient, config: ServerConfig):
        self.api_client = api_client
        self.config = config
        self.base_url_accessible = False

    def get_resource_template(self) -> mcp_types.ResourceTemplate:
        return mcp_types.ResourceTemplate(
            uriTemplate=ENDPOINT_URI_TEMPLATE,
            name="API Endpoints",
            description="Available API endpoints and their documentation",
        )

    async def validate_base_url_accessibility(self) -> bool:
        """GET / on the base URL; anything short of a 5xx or no response counts as reachable."""
        try:
            response = await self.api_client.get({"path": "/"})
        except Exception as e:
            logger.warning(f"Could not validate API accessibility: {e}")
            self.base_url_accessible = False
            return False
        self.base_url_accessible = response.success or 0 < response.status < 500
        if not self.base_url_accessible:
            logger.warning(f"API base URL {self.config.base_url} is not accessible: {response.error}")
        return self.base_url_accessible

    async def _probe(self, path: str) -> bool:
        try:
            response = await self.api_client.get({"path": path})
        except Exception:
            return False
        return response.success

    async def _discover_from_api_root(self, root_path: str) -> list[ApiEndpointInfo]:
        paths = [f"{root_path}/{resource}" for resource in PROBE_RESOURCES]
        found = await asyncio.gather(*(self._probe(path) for path in paths))

        discovered = []
        for resource, resource_path, ok in zip(PROBE_RESOURCES, paths, found):
            if not ok:
                continue
            discovered.append(ApiEndpointInfo(
                path=resource_path,
                methods=["GET", "POST"],
                description=f"Discovered resource collection: {resource}",
                parameters=EndpointParameters(
                    path={"resource": f"Resource type: {resource}"},
                    query={"limit": "Maximum number of items to return", "offset": "Number of items to skip"},
                    body=f"JSON object for creating new {resource}",
                ),
            ))
            discovered.append(ApiEndpointInfo(
                path=f"{resource_path}/{{id}}",
                methods=["GET", "PUT", "PATCH", "DELETE"],
                description=f"Discovered individual resource: {resource} by ID",
                parameters=EndpointParameters(
                    path={"resource": f"Resource type: {resource}", "id": f"Unique identifier for the {resource}"},
                    body=f"JSON object for updating {resource}",
                ),
            ))
        return discovered

    async def probe_common_endpoints(self) -> list[ApiEndpointInfo]:
        found = await asyncio.gather(*(self._probe(path) for path in PROBE_PATHS))

        discovered = []
        for path, ok in zip(PROBE_PATHS, found):
            if not ok:
                continue
            discovered.append(ApiEndpointInfo(
                path=path,
                methods=["GET"],
                description=f"Discovered endpoint: {path}",
            ))
            if "api" in path or "v1" in path:
                discovered.extend(await self._discover_from_api_root(path))
        return discovered

    async def discover_endpoints(self) -> list[ApiEndpointInfo]:
        """Standard CRUD patterns followed by whatever probing finds."""
        endpoints = standard_endpoints()
        endpoints.extend(await self.probe_common_endpoints())
        logger.debug(f"Discovered {len(endpoints)} endpoints")
        return endpoints

    async def list_resources(self) -> list[mcp_types.Resource]:
        endpoints = await self.discover_endpoints()
        resources = [
            mcp_types.Resource(
                uri=INFO_URI,
                name="API Information",
                description="General information about the configured API",
                mimeType="application/json",
            )
        ]
        for index, endpoint in enumerate(endpoints):
            resources.append(mcp_types.Resource(
                uri=f"api://endpoints/endpoint-{index}",
                name=f"{', '.join(endpoint.methods)} {endpoint.path}",
                description=endpoint.description,
                mimeType="application/json",
            ))
        return resources

    async def read_resource(self, uri: str) -> str:
        """Return the JSON document behind a resource URI."""
        uri = str(uri)
        if uri == INFO_URI:
            return json.dumps(self.get_api_info(), indent=2)

        match = _ENDPOINT_URI.match(uri)
        if not match:
            raise ResourceNotFoundError(f"Invalid resource URI: {uri}")

        index = int(match.group(1))
        endpoints = await self.discover_endpoints()
        if index >= len(endpoints):
            raise ResourceNotFoundError(f"Endpoint not found: {uri}")

        endpoint = endpoints[index]
        document = {
            "endpoint": {
                **endpoint.model_dump(exclude_none=True),
                "baseUrl": self.config.base_url,
                "authType": self.config.auth_type,
            },
            "usage": {
                "example": generate_usage_example(endpoint),
                "notes": [
                    "Replace {resource} and {id} with actual values",
                    "All requests are made relative to the configured base URL",
                    "Authentication is handled automatically based on configuration",
                    "Discovered endpoints are based on common REST patterns and API probing",
                ],
            },
        }
        return json.dumps(document, indent=2)

    def get_api_info(self, checked_at: Optional[datetime] = None) -> dict:
        checked_at = checked_at or datetime.now(timezone.utc)
        return {
            "api": {
                "baseUrl": self.config.base_url,
                "authType": self.config.auth_type,
                "accessible": self.base_url_accessible,
                "lastChecked": checked_at.isoformat(),
            },
            "capabilities": {
                "supportedMethods": ["GET", "POST", "PUT", "PATCH", "DELETE"],
                "supportedContentTypes": ["application/json"],
                "authenticationMethods": ["basic", "token", "none"],
            },
            "tools": [{"name": name, "description": description} for name, description in TOOL_SUMMARIES],
            "usage": {
                "notes": [
                    "This is a generic REST API client that works with any RESTful service",
                    "Configure the API base URL and authentication through environment variables",
                    "Use the provided tools to perform CRUD operations on any endpoint",
                ],
            },
        }
