"""Turn ApiResponses and exceptions into MCP tool-call results."""

import json
import traceback
from typing import Any, Optional

from mcp import types as mcp_types

from .http_client import ApiResponse


def _text_result(payload: dict, is_error: bool) -> mcp_types.CallToolResult:
    text = json.dumps(payload, indent=2, default=str)
    return mcp_types.CallToolResult(
        content=[mcp_types.TextContent(type="text", text=text)],
        isError=is_error,
    )


def format_success_response(response: ApiResponse) -> mcp_types.CallToolResult:
    """Success envelope: {success, status, data, headers}."""
    return _text_result(
        {
            "success": response.success,
            "status": response.status,
            "data": response.data,
            "headers": response.headers,
        },
        is_error=False,
    )


def format_error_response(error: str, details: Optional[Any] = None) -> mcp_types.CallToolResult:
    """Error envelope: {success: false, error, details?} flagged isError."""
    payload = {"success": False, "error": error}
    if details is not None:
        payload["details"] = details
    return _text_result(payload, is_error=True)


def handle_api_response(response: ApiResponse) -> mcp_types.CallToolResult:
    if response.success:
        return format_success_response(response)
    return format_error_response(response.error or "Unknown API error", {"status": response.status})


def handle_error(error: BaseException) -> mcp_types.CallToolResult:
    """Report an unexpected exception with its type name and traceback."""
    details = {
        "name": type(error).__name__,
        "stack": "".join(traceback.format_exception(type(error), error, error.__traceback__)),
    }
    return format_error_response(str(error) or "Unknown error occurred", details)
