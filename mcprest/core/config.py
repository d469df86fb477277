"""Server configuration loaded from environment variables."""

import logging
import os
from typing import Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, TypeAdapter, ValidationError, field_validator, model_validator

from .errors import ConfigurationError, describe_validation_errors

logger = logging.getLogger(__name__)

AuthType = Literal["basic", "token", "none"]

AUTH_TYPES = ("basic", "token", "none")

DEFAULT_TIMEOUT_SECS = 30

_URL_ADAPTER = TypeAdapter(HttpUrl)


def get_timeout_secs() -> int:
    """Get request timeout from env, default 30."""
    value = os.getenv("API_TIMEOUT_SECS", str(DEFAULT_TIMEOUT_SECS))
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError("API_TIMEOUT_SECS must be an integer", details={"value": value})


class BasicAuthConfig(BaseModel):
    """Username/password pair for basic authentication."""
    model_config = ConfigDict(frozen=True)

    username: str
    password: str = Field(repr=False)


class ServerConfig(BaseModel):
    """
    Validated server settings.

    Exactly one auxiliary credential field is populated, matching auth_type.
    """
    model_config = ConfigDict(frozen=True)

    base_url: str = Field(description="Absolute base URL of the REST API")
    auth_type: AuthType = Field(description="Authentication type: basic, token or none")
    auth_token: Optional[str] = Field(default=None, repr=False, description="Bearer token (token auth)")
    basic_auth: Optional[BasicAuthConfig] = Field(default=None, description="Credentials (basic auth)")

    @model_validator(mode="after")
    def _check_credentials(self):
        if self.auth_type == "token":
            if not self.auth_token:
                raise ValueError('auth_token is required when auth_type is "token"')
            if self.basic_auth is not None:
                raise ValueError('basic_auth must not be set when auth_type is "token"')
        elif self.auth_type == "basic":
            if self.basic_auth is None or not self.basic_auth.username or not self.basic_auth.password:
                raise ValueError('basic_auth username and password are required when auth_type is "basic"')
            if self.auth_token is not None:
                raise ValueError('auth_token must not be set when auth_type is "basic"')
        elif self.auth_token is not None or self.basic_auth is not None:
            raise ValueError('no credentials may be set when auth_type is "none"')
        return self


class EnvSettings(BaseModel):
    """Shape of the API_* environment variables."""
    model_config = ConfigDict(extra="ignore")

    API_BASE_URL: str
    API_AUTH_TYPE: str
    API_AUTH_TOKEN: Optional[str] = None
    API_BASIC_AUTH_USERNAME: Optional[str] = None
    API_BASIC_AUTH_PASSWORD: Optional[str] = None

    @field_validator("API_BASE_URL")
    @classmethod
    def _absolute_url(cls, value: str) -> str:
        try:
            _URL_ADAPTER.validate_python(value)
        except ValidationError:
            raise ValueError("API_BASE_URL must be a valid URL")
        return value

    @field_validator("API_AUTH_TYPE")
    @classmethod
    def _known_auth_type(cls, value: str) -> str:
        if value not in AUTH_TYPES:
            raise ValueError("API_AUTH_TYPE must be one of: basic, token, none")
        return value


def _conditional_errors(env: EnvSettings) -> list[str]:
    errors = []
    if env.API_AUTH_TYPE == "token" and not env.API_AUTH_TOKEN:
        errors.append('API_AUTH_TOKEN: API_AUTH_TOKEN is required when API_AUTH_TYPE is "token"')
    if env.API_AUTH_TYPE == "basic":
        if not env.API_BASIC_AUTH_USERNAME:
            errors.append('API_BASIC_AUTH_USERNAME: API_BASIC_AUTH_USERNAME is required when API_AUTH_TYPE is "basic"')
        if not env.API_BASIC_AUTH_PASSWORD:
            errors.append('API_BASIC_AUTH_PASSWORD: API_BASIC_AUTH_PASSWORD is required when API_AUTH_TYPE is "basic"')
    return errors


def parse_config(env: EnvSettings) -> ServerConfig:
    """Transform validated environment settings into a ServerConfig."""
    auth_token = None
    basic_auth = None
    if env.API_AUTH_TYPE == "token":
        auth_token = env.API_AUTH_TOKEN
    elif env.API_AUTH_TYPE == "basic":
        basic_auth = BasicAuthConfig(
            username=env.API_BASIC_AUTH_USERNAME,
            password=env.API_BASIC_AUTH_PASSWORD,
        )
    return ServerConfig(
        base_url=env.API_BASE_URL,
        auth_type=env.API_AUTH_TYPE,
        auth_token=auth_token,
        basic_auth=basic_auth,
    )


def load_config(env: Optional[Mapping[str, str]] = None) -> ServerConfig:
    """
    Load and validate configuration from environment variables.

    Args:
        env: Environment mapping (default: os.environ)

    Returns:
        Validated ServerConfig

    Raises:
        ConfigurationError: If any variable is missing or invalid
    """
    if env is None:
        env = os.environ

    try:
        settings = EnvSettings.model_validate(dict(env))
    except ValidationError as e:
        messages = ", ".join(f"{loc}: {msg}" for loc, msg in describe_validation_errors(e))
        raise ConfigurationError(f"Configuration validation failed: {messages}", details={"errors": e.errors()})

    errors = _conditional_errors(settings)
    if errors:
        raise ConfigurationError(f"Configuration validation failed: {', '.join(errors)}", details={"errors": errors})

    config = parse_config(settings)
    logger.debug(f"Configuration loaded: base_url={config.base_url}, auth_type={config.auth_type}")
    return config


def validate_required_env_vars(env: Optional[Mapping[str, str]] = None) -> list[str]:
    """Return the names of required variables that are missing or empty."""
    if env is None:
        env = os.environ
    return [name for name in ("API_BASE_URL", "API_AUTH_TYPE") if not env.get(name)]
