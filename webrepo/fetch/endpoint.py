"""Endpoint descriptors: how one logical API call becomes a request."""

from typing import Annotated, Any, Protocol, runtime_checkable

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from webrepo.fetch.encoding import to_query_params
from webrepo.fetch.errors import InvalidEndpointError


ALLOWED_SCHEMES = frozenset({"http", "https"})
ALLOWED_METHODS = frozenset({"GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"})


@runtime_checkable
class EndpointDescriptor(Protocol):
    """Anything that can build a concrete request against a base URL."""

    def build_request(self, base_url: str) -> httpx.Request:
        """Build the request.

        Raises:
            DescriptorError: If the request cannot be formed.
        """
        ...


def join_url(base_url: str, path: str) -> httpx.URL:
    """Join a base URL and an endpoint path.

    The base URL's own path is kept: ``https://api.test/v1`` joined with
    ``users/1`` gives ``https://api.test/v1/users/1``.

    Raises:
        InvalidEndpointError: If the result is not an absolute http(s) URL.
    """
    raw = f"{base_url.rstrip('/')}/{path.lstrip('/')}" if path else base_url
    try:
        url = httpx.URL(raw)
    except httpx.InvalidURL as e:
        raise InvalidEndpointError(raw, str(e)) from e
    if url.scheme not in ALLOWED_SCHEMES:
        raise InvalidEndpointError(raw, "scheme must be http or https")
    if not url.host:
        raise InvalidEndpointError(raw, "missing host")
    return url


class APICall(BaseModel):
    """Declarative description of one API call.

    ``query`` accepts a mapping or any encodable value (a pydantic model or
    dataclass); it is flattened into query parameters.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    path: str = ""
    method: Annotated[str, Field(min_length=1)] = "GET"
    query: Any = None
    headers: dict[str, str] = Field(default_factory=dict)
    json_body: Any = None
    content: bytes | None = None

    @field_validator("method")
    @classmethod
    def validate_method(cls, v: str) -> str:
        """Normalize and validate the HTTP method."""
        method = v.upper()
        if method not in ALLOWED_METHODS:
            msg = f"Unsupported HTTP method: {v}"
            raise ValueError(msg)
        return method

    @model_validator(mode="after")
    def validate_body(self) -> "APICall":
        """Ensure at most one body is given."""
        if self.json_body is not None and self.content is not None:
            msg = "json_body and content are mutually exclusive"
            raise ValueError(msg)
        return self

    def build_request(self, base_url: str) -> httpx.Request:
        """Build the concrete request.

        Args:
            base_url: Base URL of the API.

        Returns:
            An httpx.Request ready to send.

        Raises:
            InvalidEndpointError: If base URL and path do not form a valid URL.
        """
        url = join_url(base_url, self.path)
        params = to_query_params(self.query)
        if params:
            url = url.copy_merge_params(params)
        return httpx.Request(
            self.method,
            url,
            headers=self.headers,
            json=self.json_body,
            content=self.content,
        )
