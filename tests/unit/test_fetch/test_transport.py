"""Unit tests for the httpx transport."""

import httpx
import pytest

from tests.helpers.transport import json_handler, mock_transport
from webrepo.fetch.transport import HttpxTransport, exchange_from_response


class TestExchangeFromResponse:
    """Tests for exchange_from_response."""

    def test_copies_status_headers_body(self) -> None:
        """Test the mapping of an httpx response."""
        response = httpx.Response(418, headers={"X-Tea": "yes"}, content=b"short and stout")

        exchange = exchange_from_response(response, b"short and stout")

        assert exchange.status == 418
        assert exchange.headers["x-tea"] == "yes"
        assert exchange.body == b"short and stout"


class TestHttpxTransport:
    """Tests for HttpxTransport."""

    @pytest.mark.asyncio
    async def test_send_reads_body(self) -> None:
        """Test that send returns the full exchange."""
        transport = mock_transport(json_handler(200, b'{"ok": true}', {"X-Id": "1"}))
        request = httpx.Request("GET", "https://api.example.test/ping")

        exchange = await transport.send(request)

        assert exchange.status == 200
        assert exchange.body == b'{"ok": true}'
        assert exchange.headers["x-id"] == "1"

    @pytest.mark.asyncio
    async def test_owned_client_is_closed(self) -> None:
        """Test that a transport closes the client it created."""
        async with HttpxTransport(timeout=1) as transport:
            client = transport.client

        assert client.is_closed

    @pytest.mark.asyncio
    async def test_borrowed_client_stays_open(self) -> None:
        """Test that a caller's client is left open."""
        client = httpx.AsyncClient()
        async with HttpxTransport(client=client):
            pass

        assert not client.is_closed
        await client.aclose()

    @pytest.mark.asyncio
    async def test_user_agent_reaches_server(self) -> None:
        """Test that the client's User-Agent is sent with built requests."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(204)

        client = httpx.AsyncClient(
            transport=httpx.MockTransport(handler),
            headers={"User-Agent": "webrepo-test/1"},
        )
        async with HttpxTransport(client=client) as transport:
            await transport.send(httpx.Request("GET", "https://api.example.test/ping"))
        await client.aclose()

        assert seen[0].headers["User-Agent"] == "webrepo-test/1"

    @pytest.mark.asyncio
    async def test_request_headers_win_over_defaults(self) -> None:
        """Test that headers set on the request are not overwritten."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(204)

        client = httpx.AsyncClient(
            transport=httpx.MockTransport(handler),
            headers={"User-Agent": "webrepo-test/1"},
        )
        request = httpx.Request(
            "GET", "https://api.example.test/ping", headers={"User-Agent": "custom/2"}
        )
        async with HttpxTransport(client=client) as transport:
            await transport.send(request)
        await client.aclose()

        assert seen[0].headers["User-Agent"] == "custom/2"

    @pytest.mark.asyncio
    async def test_created_client_uses_user_agent(self) -> None:
        """Test that user_agent configures a created client."""
        async with HttpxTransport(user_agent="webrepo-test/3") as transport:
            assert transport.client.headers["User-Agent"] == "webrepo-test/3"
