"""Pydantic argument models for MCP tools."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ============================================================================
# Tool Argument Models
# ============================================================================

class BaseRequestArgs(BaseModel):
    """Arguments shared by every verb. Undeclared keys and explicit nulls for optional mappings are rejected."""
    model_config = ConfigDict(extra="forbid", strict=True, populate_by_name=False)

    path: str = Field(description="API endpoint path (relative to base URL)")
    headers: dict[str, str] = Field(default=None, description="Optional custom headers as key-value pairs")

    @field_validator("path")
    @classmethod
    def _path_not_empty(cls, value: str) -> str:
        if len(value) < 1:
            raise ValueError("Path is required and cannot be empty")
        return value


class QueryRequestArgs(BaseRequestArgs):
    """GET arguments."""
    query_params: dict[str, str] = Field(
        default=None,
        alias="queryParams",
        description="Optional query parameters as key-value pairs",
    )


class BodyRequestArgs(BaseRequestArgs):
    """POST/PUT/PATCH arguments. An explicit null body is kept."""
    body: Any = Field(default=None, description="Optional JSON request body")


class DeleteRequestArgs(BaseRequestArgs):
    """DELETE arguments: path and headers only."""
