"""HTTP client with pluggable authentication and normalized responses."""

import asyncio
import json
import logging
from typing import Any, Mapping, Optional, Union
from urllib.parse import urlencode, urlsplit

import requests
from pydantic import BaseModel, ConfigDict, Field, model_validator

from .auth import AuthenticationStrategy
from .config import ServerConfig, get_timeout_secs
from .errors import ApiClientError

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}

_NO_BODY = object()


class ApiRequestOptions(BaseModel):
    """Per-call request options. ``body`` counts as given even when it is None."""
    model_config = ConfigDict(populate_by_name=True)

    path: str = Field(min_length=1, description="Path relative to the base URL")
    body: Any = Field(default=None, description="JSON-serializable request body")
    query_params: Optional[dict[str, Optional[str]]] = Field(default=None, alias="queryParams")
    headers: Optional[dict[str, str]] = None

    @property
    def has_body(self) -> bool:
        return "body" in self.model_fields_set


class ApiResponse(BaseModel):
    """Uniform outcome of every HTTP call."""

    success: bool
    status: int = Field(description="HTTP status, 0 when no response was received")
    data: Any = None
    error: Optional[str] = None
    headers: Optional[dict[str, str]] = None

    @model_validator(mode="after")
    def _check_outcome(self):
        if self.success and self.error is not None:
            raise ValueError("a successful response cannot carry an error")
        if not self.success and (self.error is None or self.data is not None):
            raise ValueError("a failed response needs an error and no data")
        return self


def build_query_string(params: Mapping[str, Optional[str]]) -> str:
    """Form-encode query parameters, skipping None values."""
    return urlencode([(key, str(value)) for key, value in params.items() if value is not None])


class ApiClient:
    """
    Single point through which every outbound HTTP call passes.

    Each verb method returns an ApiResponse; no exception escapes them.
    Calls are stateless and run in worker threads, so concurrent calls
    never wait on one another.
    """

    def __init__(self, config: ServerConfig, auth_strategy: AuthenticationStrategy, timeout: Optional[int] = None):
        self._base_url = config.base_url
        self._auth_strategy = auth_strategy
        self.timeout = timeout if timeout is not None else get_timeout_secs()
        self.default_headers = dict(DEFAULT_HEADERS)

    # ------------------------------------------------------------------
    # Interceptors
    # ------------------------------------------------------------------

    def _intercept_request(self, request_config: dict) -> dict:
        try:
            auth_config = self._auth_strategy.apply_auth(request_config)
        except Exception as e:
            raise ApiClientError("Authentication failed", code="AUTH_ERROR", original_error=e)
        return {**request_config, **auth_config}

    def _intercept_response(self, response: requests.Response, **kwargs) -> requests.Response:
        # Hooks fire before redirects are followed; the final hop is checked instead.
        if response.is_redirect:
            return response
        if not 200 <= response.status_code < 300:
            raise ApiClientError(
                f"HTTP {response.status_code}: {response.reason}",
                status=response.status_code,
                code="HTTP_ERROR",
            )
        return response

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _resolve_url(self, url: str) -> str:
        if urlsplit(url).scheme:
            return url
        return self._base_url.rstrip("/") + "/" + url.lstrip("/")

    def _request(self, method: str, url: str, config: Mapping[str, Any], body: Any = _NO_BODY) -> requests.Response:
        """Send one request through the interceptors (blocking)."""
        request_config = {
            "method": method,
            "url": url,
            "headers": {**self.default_headers, **(config.get("headers") or {})},
        }
        if body is not _NO_BODY:
            request_config["data"] = json.dumps(body)

        request_config = self._intercept_request(request_config)

        try:
            return requests.request(
                request_config["method"],
                self._resolve_url(request_config["url"]),
                headers=request_config["headers"],
                data=request_config.get("data"),
                timeout=self.timeout,
                hooks={"response": self._intercept_response},
            )
        except ApiClientError:
            raise
        except (requests.ConnectionError, requests.Timeout) as e:
            raise ApiClientError(f"Network error: {e}", code="NETWORK_ERROR", original_error=e)
        except requests.RequestException as e:
            raise ApiClientError(f"Request failed: {e}", code="REQUEST_ERROR", original_error=e)

    @staticmethod
    def _transform_response(response: requests.Response) -> ApiResponse:
        if not response.content:
            data = None
        else:
            try:
                data = response.json()
            except ValueError:
                data = response.text
        return ApiResponse(
            success=True,
            status=response.status_code,
            data=data,
            headers=dict(response.headers),
        )

    @staticmethod
    def _transform_error(method: str, error: Exception) -> ApiResponse:
        status = getattr(error, "status", None) if isinstance(error, ApiClientError) else None
        message = str(error) or "Unknown error"
        return ApiResponse(
            success=False,
            status=status or 0,
            error=f"{method} request failed: {message}",
        )

    @staticmethod
    def _call_config(options: ApiRequestOptions) -> dict:
        return {"headers": dict(options.headers)} if options.headers is not None else {}

    @staticmethod
    def _coerce(options: Union[ApiRequestOptions, Mapping[str, Any]]) -> ApiRequestOptions:
        if isinstance(options, ApiRequestOptions):
            return options
        return ApiRequestOptions.model_validate(options)

    async def _perform(self, method: str, build) -> ApiResponse:
        try:
            url, config, body = build()
            logger.debug(f"{method} {url}")
            response = await asyncio.to_thread(self._request, method, url, config, body)
            return self._transform_response(response)
        except Exception as e:
            result = self._transform_error(method, e)
            logger.warning(result.error)
            return result

    # ------------------------------------------------------------------
    # Verbs
    # ------------------------------------------------------------------

    async def get(self, options: Union[ApiRequestOptions, Mapping[str, Any]]) -> ApiResponse:
        """Perform GET, appending form-encoded query parameters to the path."""
        def build():
            opts = self._coerce(options)
            url = opts.path
            if opts.query_params:
                query = build_query_string(opts.query_params)
                if query:
                    url += ("&" if "?" in url else "?") + query
            return url, self._call_config(opts), _NO_BODY
        return await self._perform("GET", build)

    async def post(self, options: Union[ApiRequestOptions, Mapping[str, Any]]) -> ApiResponse:
        """Perform POST with an optional JSON body."""
        return await self._perform("POST", lambda: self._with_body(options))

    async def put(self, options: Union[ApiRequestOptions, Mapping[str, Any]]) -> ApiResponse:
        """Perform PUT with an optional JSON body."""
        return await self._perform("PUT", lambda: self._with_body(options))

    async def patch(self, options: Union[ApiRequestOptions, Mapping[str, Any]]) -> ApiResponse:
        """Perform PATCH with an optional JSON body."""
        return await self._perform("PATCH", lambda: self._with_body(options))

    async def delete(self, options: Union[ApiRequestOptions, Mapping[str, Any]]) -> ApiResponse:
        """Perform DELETE (no body)."""
        def build():
            opts = self._coerce(options)
            return opts.path, self._call_config(opts), _NO_BODY
        return await self._perform("DELETE", build)

    def _with_body(self, options):
        opts = self._coerce(options)
        body = opts.body if opts.has_body else _NO_BODY
        return opts.path, self._call_config(opts), body

    def get_base_url(self) -> str:
        return self._base_url

    def get_auth_type(self) -> str:
        return self._auth_strategy.get_auth_type()
