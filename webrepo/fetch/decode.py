"""Body rendering and typed decoding."""

import json
import re
from functools import lru_cache
from typing import Any, TypeVar

from pydantic import TypeAdapter

from webrepo.fetch.config import DecoderConfig, KeyStrategy
from webrepo.fetch.constants import EMPTY_RENDERING


T = TypeVar("T")

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def render_body(body: bytes) -> str:
    """Render a body as human-readable text.

    JSON bodies are re-serialized with sorted keys and indentation. Other
    bodies are returned as UTF-8 text, or an empty string if they are not
    valid UTF-8. Used both for HTTP error reasons and for data records.

    Args:
        body: Raw response body.

    Returns:
        Rendered text.
    """
    try:
        parsed = json.loads(body)
    except ValueError:
        try:
            return body.decode("utf-8")
        except UnicodeDecodeError:
            return EMPTY_RENDERING
    return json.dumps(parsed, indent=2, sort_keys=True, ensure_ascii=False)


def decode_text(body: bytes) -> str:
    """Interpret a body as text, replacing undecodable bytes."""
    return body.decode("utf-8", errors="replace")


def camel_to_snake(name: str) -> str:
    """Convert ``camelCase`` to ``snake_case``."""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def convert_keys(value: Any) -> Any:
    """Recursively rewrite JSON object keys from camelCase to snake_case."""
    if isinstance(value, dict):
        return {camel_to_snake(key): convert_keys(item) for key, item in value.items()}
    if isinstance(value, list):
        return [convert_keys(item) for item in value]
    return value


@lru_cache(maxsize=256)
def _adapter(result_type: Any) -> TypeAdapter[Any]:
    return TypeAdapter(result_type)


class Decoder:
    """Materializes JSON bodies into caller-specified types.

    Any type pydantic can validate is accepted: models, dataclasses,
    TypedDicts, builtins and generic aliases such as ``list[Item]``.
    """

    def __init__(self, config: DecoderConfig | None = None) -> None:
        """Initialize the decoder.

        Args:
            config: Decoder settings, defaults apply when omitted.
        """
        self._config = config or DecoderConfig()

    @property
    def config(self) -> DecoderConfig:
        """Get the decoder settings."""
        return self._config

    def decode(self, body: bytes, result_type: type[T]) -> T:
        """Decode a body into ``result_type``.

        A ``None`` result type accepts an empty body, for endpoints that
        answer 204 No Content.

        Args:
            body: Raw response body.
            result_type: Requested type.

        Returns:
            The decoded value.

        Raises:
            ValueError: If the body is not valid JSON or does not validate
                against the type (pydantic.ValidationError is a ValueError).
        """
        if result_type in (None, type(None)) and not body.strip():
            return None  # type: ignore[return-value]

        adapter = _adapter(result_type)
        if self._config.key_strategy == KeyStrategy.CONVERT_FROM_CAMEL_CASE:
            body = json.dumps(convert_keys(json.loads(body))).encode("utf-8")
        return adapter.validate_json(body, strict=self._config.strict)
