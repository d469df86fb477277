"""Error taxonomy for the REST bridge."""

from typing import Any, Optional

from pydantic import ValidationError

_JSON_TYPE_NAMES = {
    type(None): "null",
    bool: "boolean",
    int: "number",
    float: "number",
    str: "string",
    list: "array",
    dict: "object",
}


def _received(value: Any) -> str:
    return _JSON_TYPE_NAMES.get(type(value), type(value).__name__)


def describe_validation_errors(exc: ValidationError) -> list[tuple[str, str]]:
    """
    Reduce a pydantic ValidationError to (location, message) pairs.

    Locations are dotted field paths, or "root" for the object itself.
    Messages keep the wording tool clients match on: "Required" for a
    missing field, "Expected <type>, received <type>" for a wrong type,
    "Unrecognized key(s) in object: '<key>', ..." for the undeclared keys
    of one object, and
    the raw validator message for custom checks.
    """
    described = []
    unrecognized = {}
    for err in exc.errors():
        loc = tuple(str(part) for part in err["loc"])
        kind = err["type"]
        if kind == "extra_forbidden":
            parent = ".".join(loc[:-1]) or "root"
            if parent not in unrecognized:
                unrecognized[parent] = []
                described.append((parent, unrecognized[parent]))
            unrecognized[parent].append(f"'{loc[-1]}'")
            continue
        if kind == "missing":
            message = "Required"
        elif kind == "value_error":
            message = str(err["ctx"]["error"])
        elif kind == "string_type":
            message = f"Expected string, received {_received(err['input'])}"
        elif kind in ("dict_type", "model_type", "model_attributes_type"):
            message = f"Expected object, received {_received(err['input'])}"
        else:
            message = err["msg"]
        described.append((".".join(loc) or "root", message))
    # Undeclared keys under one parent are reported as a single entry.
    return [
        (loc, f"Unrecognized key(s) in object: {', '.join(message)}" if isinstance(message, list) else message)
        for loc, message in described
    ]


class ConfigurationError(ValueError):
    """Raised when server configuration is missing or invalid."""

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(message)
        self.details = details


class AuthConfigurationError(ConfigurationError):
    """Raised when an authentication strategy fails its own validation."""


class ArgumentValidationError(ValueError):
    """Raised when tool arguments violate the verb's schema."""


class ApiClientError(Exception):
    """Classified transport failure (HTTP_ERROR, NETWORK_ERROR, REQUEST_ERROR, AUTH_ERROR)."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        code: Optional[str] = None,
        original_error: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.status = status
        self.code = code
        self.original_error = original_error


class ServerError(Exception):
    """Raised for protocol-level failures (unknown tool, bad resource URI)."""

    def __init__(self, message: str, code: str, details: Optional[Any] = None):
        super().__init__(message)
        self.code = code
        self.details = details


class ResourceNotFoundError(ServerError):
    """Raised when a resource URI does not resolve to a known resource."""

    def __init__(self, message: str):
        super().__init__(message, code="RESOURCE_NOT_FOUND")
