"""Utility functions for MCP server tools."""

import logging
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from mcprest.core.errors import ArgumentValidationError, describe_validation_errors

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def format_validation_error(exc: ValidationError) -> str:
    """Join every violation as "<field>: <message>" behind an "Invalid arguments: " prefix."""
    messages = ", ".join(f"{loc}: {msg}" for loc, msg in describe_validation_errors(exc))
    return f"Invalid arguments: {messages}"


def validate_arguments(model: type[ModelT], arguments: Any) -> ModelT:
    """
    Validate raw tool arguments against a strict argument model.

    Raises:
        ArgumentValidationError: With an "Invalid arguments: ..." message
    """
    try:
        return model.model_validate(arguments)
    except ValidationError as e:
        message = format_validation_error(e)
        logger.debug(f"validate_arguments: {model.__name__} rejected arguments: {message}")
        raise ArgumentValidationError(message)


def explicit_fields(args: BaseModel) -> dict[str, Any]:
    """Return the validated fields the caller actually supplied, keyed by field name."""
    return {name: getattr(args, name) for name in args.model_fields_set}
