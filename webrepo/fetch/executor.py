"""Typed call executor with status validation, stage logging and decoding."""

import asyncio
from typing import Any, TypeVar

import structlog

from webrepo.fetch.config import CallConfig
from webrepo.fetch.constants import (
    EVENT_DATA,
    EVENT_ERROR,
    EVENT_FALLBACK,
    EVENT_REQUEST,
    EVENT_RESPONSE,
)
from webrepo.fetch.decode import Decoder, decode_text, render_body
from webrepo.fetch.endpoint import EndpointDescriptor
from webrepo.fetch.errors import (
    APIError,
    DecodeFailureError,
    HttpCodeError,
    UnexpectedResponseError,
)
from webrepo.fetch.models import AcceptanceSet, DecodeMode, LogOption
from webrepo.fetch.redact import redact_headers, redact_url
from webrepo.fetch.stream import CallStream
from webrepo.fetch.transport import Transport


logger = structlog.get_logger()

T = TypeVar("T")


class CallExecutor:
    """Executes endpoint descriptors and decodes their responses.

    One algorithm backs both surfaces:
    - ``execute`` / ``execute_text`` suspend until the value is ready
    - ``stream`` / ``stream_text`` return a lazy single-value CallStream

    The executor holds no per-call state; one instance may serve any
    number of concurrent calls.
    """

    def __init__(
        self,
        transport: Transport,
        base_url: str,
        config: CallConfig | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            transport: Transport used to send requests.
            base_url: Base URL handed to every endpoint descriptor.
            config: Default call configuration.
        """
        self._transport = transport
        self._base_url = base_url
        self._config = config or CallConfig()

    @property
    def base_url(self) -> str:
        """Get the base URL."""
        return self._base_url

    @property
    def config(self) -> CallConfig:
        """Get the default call configuration."""
        return self._config

    async def execute(
        self,
        endpoint: EndpointDescriptor,
        result_type: type[T],
        *,
        accept: AcceptanceSet | None = None,
        config: CallConfig | None = None,
        mode: DecodeMode = DecodeMode.STRICT,
    ) -> T:
        """Execute a call and decode the body into ``result_type``.

        Args:
            endpoint: Descriptor building the request.
            result_type: Type to decode the body into.
            accept: Status codes treated as success, overriding the config.
            config: Call configuration, defaults to the executor's.
            mode: Decode failure policy.

        Returns:
            The decoded value.

        Raises:
            DescriptorError: If the request cannot be built.
            httpx.HTTPError: If the transport fails.
            APIError: For a missing or unaccepted status, or a decode failure.
        """
        call_config = self._resolve(result_type, accept, config, mode)
        return await self._execute_once(endpoint, result_type, call_config, mode)

    async def execute_text(
        self,
        endpoint: EndpointDescriptor,
        *,
        accept: AcceptanceSet | None = None,
        config: CallConfig | None = None,
    ) -> str:
        """Execute a call, falling back to the raw body text.

        A JSON string body decodes to its value; any other body is
        returned as text instead of failing.
        """
        return await self.execute(
            endpoint,
            str,
            accept=accept,
            config=config,
            mode=DecodeMode.TEXT_OR_DECODE,
        )

    def stream(
        self,
        endpoint: EndpointDescriptor,
        result_type: type[T],
        *,
        accept: AcceptanceSet | None = None,
        config: CallConfig | None = None,
        mode: DecodeMode = DecodeMode.STRICT,
    ) -> CallStream[T]:
        """Describe a call as a lazy single-value stream.

        Nothing is sent until the stream is subscribed. All failures,
        including descriptor errors, arrive through the error channel.
        Decoding runs in a worker thread.
        """
        call_config = self._resolve(result_type, accept, config, mode)

        async def source() -> T:
            return await self._execute_once(
                endpoint, result_type, call_config, mode, offload_decode=True
            )

        return CallStream(source)

    def stream_text(
        self,
        endpoint: EndpointDescriptor,
        *,
        accept: AcceptanceSet | None = None,
        config: CallConfig | None = None,
    ) -> CallStream[str]:
        """Streaming counterpart of ``execute_text``."""
        return self.stream(
            endpoint,
            str,
            accept=accept,
            config=config,
            mode=DecodeMode.TEXT_OR_DECODE,
        )

    def _resolve(
        self,
        result_type: Any,
        accept: AcceptanceSet | None,
        config: CallConfig | None,
        mode: DecodeMode,
    ) -> CallConfig:
        if mode == DecodeMode.TEXT_OR_DECODE and result_type is not str:
            msg = f"Text fallback requires str as result type, got {result_type!r}"
            raise TypeError(msg)
        call_config = config or self._config
        if accept is not None:
            call_config = call_config.model_copy(update={"accept": accept})
        return call_config

    async def _execute_once(
        self,
        endpoint: EndpointDescriptor,
        result_type: type[T],
        config: CallConfig,
        mode: DecodeMode,
        offload_decode: bool = False,
    ) -> T:
        log = logger.bind(component="call", endpoint=type(endpoint).__name__)
        try:
            request = endpoint.build_request(self._base_url)
            log = log.bind(method=request.method, url=redact_url(request.url))
            if config.logs(LogOption.REQUEST):
                log.info(EVENT_REQUEST, headers=redact_headers(request.headers))

            exchange = await self._transport.send(request)
            if config.logs(LogOption.RESPONSE):
                log.info(
                    EVENT_RESPONSE,
                    status=exchange.status,
                    headers=redact_headers(exchange.headers),
                    bytes=exchange.body_size,
                )

            if exchange.status is None:
                raise UnexpectedResponseError

            # Rendered before the status check: HTTP errors carry it as reason
            rendered = render_body(exchange.body)
            if exchange.status not in config.accept:
                raise HttpCodeError(exchange.status, rendered, exchange.headers)

            if config.logs(LogOption.DATA):
                log.info(EVENT_DATA, status=exchange.status, body=rendered)

            decoder = Decoder(config.decoder)
            if offload_decode:
                return await asyncio.to_thread(
                    _decode, decoder, exchange.body, result_type, mode, log
                )
            return _decode(decoder, exchange.body, result_type, mode, log)

        except Exception as e:
            if config.logs(LogOption.ERROR):
                log.error(
                    EVENT_ERROR,
                    error=str(e),
                    error_type=type(e).__name__,
                    error_kind=e.kind.value if isinstance(e, APIError) else None,
                )
            raise


def _decode(
    decoder: Decoder,
    body: bytes,
    result_type: type[T],
    mode: DecodeMode,
    log: structlog.stdlib.BoundLogger,
) -> T:
    try:
        return decoder.decode(body, result_type)
    except ValueError as e:
        if mode == DecodeMode.TEXT_OR_DECODE:
            log.warning(EVENT_FALLBACK, error=str(e))
            return decode_text(body)  # type: ignore[return-value]
        raise DecodeFailureError(e, result_type) from e
