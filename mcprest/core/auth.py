"""Authentication strategies applied to every outgoing request.

A request configuration is a plain dict (``method``, ``url``, ``headers``,
``data``). Strategies never mutate the configuration they are given; they
return a copy whose ``headers`` mapping is a fresh dict.
"""

import base64
from typing import Any, Mapping, Protocol, runtime_checkable

from .errors import AuthConfigurationError


@runtime_checkable
class AuthenticationStrategy(Protocol):
    """Capability set every authentication variant provides."""

    def apply_auth(self, config: Mapping[str, Any]) -> dict:
        """Return a new request configuration with credentials applied."""
        ...

    def get_auth_type(self) -> str:
        """Return "basic", "token" or "none"."""
        ...

    def validate(self) -> None:
        """Raise AuthConfigurationError if the held credentials are unusable."""
        ...


def clone_config(config: Mapping[str, Any], extra_headers: Mapping[str, str] = None) -> dict:
    """Copy a request configuration, cloning its headers and merging extra_headers."""
    headers = dict(config.get("headers") or {})
    if extra_headers:
        headers.update(extra_headers)
    return {**config, "headers": headers}


class NoAuthHandler:
    """Unauthenticated requests."""

    def apply_auth(self, config: Mapping[str, Any]) -> dict:
        return clone_config(config)

    def get_auth_type(self) -> str:
        return "none"

    def validate(self) -> None:
        return None

    def __repr__(self) -> str:
        return "NoAuthHandler()"


class BasicAuthHandler:
    """HTTP basic authentication (``Authorization: Basic <base64(user:pass)>``)."""

    def __init__(self, username: Any, password: Any):
        self._username = username
        self._password = password

    def apply_auth(self, config: Mapping[str, Any]) -> dict:
        raw = f"{self._username}:{self._password}".encode("utf-8")
        credentials = base64.b64encode(raw).decode("ascii")
        return clone_config(config, {"Authorization": f"Basic {credentials}"})

    def get_auth_type(self) -> str:
        return "basic"

    def validate(self) -> None:
        if not isinstance(self._username, str) or not self._username:
            raise AuthConfigurationError("Basic authentication requires a valid username")
        if not isinstance(self._password, str) or not self._password:
            raise AuthConfigurationError("Basic authentication requires a valid password")

    def __repr__(self) -> str:
        return f"BasicAuthHandler(username={self._username!r})"


class TokenAuthHandler:
    """Bearer token authentication (``Authorization: Bearer <token>``)."""

    def __init__(self, token: Any):
        self._token = token

    def apply_auth(self, config: Mapping[str, Any]) -> dict:
        return clone_config(config, {"Authorization": f"Bearer {self._token}"})

    def get_auth_type(self) -> str:
        return "token"

    def validate(self) -> None:
        if not isinstance(self._token, str) or not self._token:
            raise AuthConfigurationError("Token authentication requires a valid token")
        if not self._token.strip():
            raise AuthConfigurationError("Token authentication requires a non-empty token")

    def __repr__(self) -> str:
        return "TokenAuthHandler(token=***)"


def create_authentication_strategy(config) -> AuthenticationStrategy:
    """
    Build the strategy selected by a ServerConfig.

    The strategy is not validated here; callers run validate() once at startup.
    """
    if config.auth_type == "basic":
        return BasicAuthHandler(config.basic_auth.username, config.basic_auth.password)
    if config.auth_type == "token":
        return TokenAuthHandler(config.auth_token)
    return NoAuthHandler()
