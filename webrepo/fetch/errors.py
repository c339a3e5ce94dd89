"""Error taxonomy for the call executor.

Descriptor and transport errors are never wrapped: they reach the caller as
raised by the endpoint descriptor or by httpx. Everything the executor
decides on its own is an ``APIError``.
"""

from collections.abc import Mapping
from enum import Enum


class APIErrorKind(str, Enum):
    """Classification of executor-raised errors."""

    UNEXPECTED_RESPONSE = "unexpected_response"
    HTTP_CODE = "http_code"
    DECODE_FAILURE = "decode_failure"


class APIError(Exception):
    """Base exception for failures shaped by the executor."""

    kind: APIErrorKind


class UnexpectedResponseError(APIError):
    """Raised when the transport returned a response without a status code."""

    kind = APIErrorKind.UNEXPECTED_RESPONSE

    def __init__(self, message: str = "Response carried no HTTP status code") -> None:
        """Initialize the error.

        Args:
            message: Human-readable error message.
        """
        super().__init__(message)


class HttpCodeError(APIError):
    """Raised when the status code is not in the call's acceptance set.

    Carries everything a caller needs to branch on the failure, for
    instance to tell an expired session (401) from a missing resource (404).
    """

    kind = APIErrorKind.HTTP_CODE

    def __init__(self, code: int, reason: str, headers: Mapping[str, str]) -> None:
        """Initialize the error.

        Args:
            code: HTTP status code reported by the transport.
            reason: Best-effort rendering of the response body.
            headers: Raw response headers.
        """
        self.code = code
        self.reason = reason
        self.headers = dict(headers)
        super().__init__(f"HTTP {code}: {reason}" if reason else f"HTTP {code}")


class DecodeFailureError(APIError):
    """Raised when the body cannot be materialized into the requested type."""

    kind = APIErrorKind.DECODE_FAILURE

    def __init__(self, underlying: Exception, result_type: object) -> None:
        """Initialize the error.

        Args:
            underlying: The decoder's own exception.
            result_type: The type the caller asked for.
        """
        self.underlying = underlying
        self.result_type = result_type
        name = getattr(result_type, "__name__", repr(result_type))
        super().__init__(f"Failed to decode response as {name}: {underlying}")


class DescriptorError(Exception):
    """Base exception for endpoint descriptors that cannot build a request."""


class InvalidEndpointError(DescriptorError):
    """Raised when base URL and path do not form a valid request URL."""

    def __init__(self, url: str, detail: str) -> None:
        """Initialize the error.

        Args:
            url: The URL that failed validation.
            detail: Why it is invalid.
        """
        self.url = url
        super().__init__(f"Invalid endpoint URL '{url}': {detail}")
