"""Transports: send a request, return the raw exchange."""

from types import TracebackType
from typing import Protocol, Self

import httpx

from webrepo.fetch.constants import (
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
    HTTP_STATUS_MAX,
    HTTP_STATUS_MIN,
)
from webrepo.fetch.models import RawExchange


class Transport(Protocol):
    """Sends one request and returns status, headers and body.

    Connectivity, TLS and timeout failures are raised as-is; callers
    of the executor see them unchanged.
    """

    async def send(self, request: httpx.Request) -> RawExchange:
        """Send the request."""
        ...


def exchange_from_response(response: httpx.Response, body: bytes) -> RawExchange:
    """Build a RawExchange from an httpx response.

    Status codes outside the HTTP range are treated as missing.
    """
    status: int | None = response.status_code
    if not isinstance(status, int) or not HTTP_STATUS_MIN <= status <= HTTP_STATUS_MAX:
        status = None
    return RawExchange(status=status, headers=dict(response.headers), body=body)


class HttpxTransport:
    """Transport over a shared ``httpx.AsyncClient``.

    Connection pooling and timeouts belong to the client. A client passed in
    by the caller is not closed by this transport.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        user_agent: str = DEFAULT_USER_AGENT,
        follow_redirects: bool = True,
    ) -> None:
        """Initialize the transport.

        Args:
            client: Existing client to reuse; one is created when omitted.
            timeout: Request timeout in seconds for a created client.
            user_agent: User-Agent header for a created client.
            follow_redirects: Whether a created client follows redirects.
        """
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=follow_redirects,
            headers={"User-Agent": user_agent},
        )

    @property
    def client(self) -> httpx.AsyncClient:
        """Get the underlying client."""
        return self._client

    async def send(self, request: httpx.Request) -> RawExchange:
        """Send the request and read the full body.

        The client's default headers fill in any the request does not set.
        Cancellation of the awaiting task aborts the in-flight request.
        """
        for key, value in self._client.headers.items():
            request.headers.setdefault(key, value)
        response = await self._client.send(request)
        try:
            body = await response.aread()
        finally:
            await response.aclose()
        return exchange_from_response(response, body)

    async def aclose(self) -> None:
        """Close the client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()
