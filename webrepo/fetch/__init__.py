"""Typed HTTP call execution.

This module provides one correctness contract for every network call:
- Request construction from endpoint descriptors
- Status validation against per-call acceptance sets
- Opt-in logging of the request, response, data and error stages
- Typed decoding with an explicit textual fallback
- Single-shot (await) and streaming (subscribe) execution
"""

from webrepo.fetch.config import CallConfig, DecoderConfig, KeyStrategy
from webrepo.fetch.decode import Decoder, render_body
from webrepo.fetch.encoding import encodable_to_dict, to_query_params
from webrepo.fetch.endpoint import APICall, EndpointDescriptor
from webrepo.fetch.errors import (
    APIError,
    APIErrorKind,
    DecodeFailureError,
    DescriptorError,
    HttpCodeError,
    InvalidEndpointError,
    UnexpectedResponseError,
)
from webrepo.fetch.executor import CallExecutor
from webrepo.fetch.models import (
    AcceptanceSet,
    DecodeMode,
    LogOption,
    RawExchange,
    parse_log_options,
)
from webrepo.fetch.redact import redact_headers, redact_url
from webrepo.fetch.stream import CallStream, Subscription
from webrepo.fetch.transport import HttpxTransport, Transport


__all__ = [
    # Executor
    "CallExecutor",
    "CallStream",
    "Subscription",
    # Endpoints
    "APICall",
    "EndpointDescriptor",
    # Transport
    "HttpxTransport",
    "Transport",
    # Config
    "CallConfig",
    "DecoderConfig",
    "KeyStrategy",
    # Models
    "AcceptanceSet",
    "DecodeMode",
    "LogOption",
    "RawExchange",
    "parse_log_options",
    # Errors
    "APIError",
    "APIErrorKind",
    "DecodeFailureError",
    "DescriptorError",
    "HttpCodeError",
    "InvalidEndpointError",
    "UnexpectedResponseError",
    # Decoding and encoding
    "Decoder",
    "render_body",
    "encodable_to_dict",
    "to_query_params",
    # Redaction
    "redact_headers",
    "redact_url",
]
