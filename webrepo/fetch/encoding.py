"""Helpers that turn encodable values into plain mappings."""

from typing import Any

from pydantic import PydanticSchemaGenerationError, TypeAdapter
from pydantic_core import PydanticSerializationError


def encodable_to_dict(value: Any) -> dict[str, Any]:
    """Encode a value to a JSON-compatible dictionary.

    Accepts pydantic models, dataclasses, TypedDicts and plain mappings.
    Values that do not encode to a JSON object yield an empty dict.

    Args:
        value: Value to encode.

    Returns:
        Dictionary of JSON-compatible values.
    """
    if value is None:
        return {}
    try:
        encoded = TypeAdapter(type(value)).dump_python(value, mode="json")
    except (PydanticSchemaGenerationError, PydanticSerializationError):
        return {}
    if not isinstance(encoded, dict):
        return {}
    return encoded


def to_query_params(value: Any) -> dict[str, str]:
    """Flatten an encodable value into query parameters.

    Nested values are dropped; booleans render as ``true``/``false``,
    None values are skipped.
    """
    params: dict[str, str] = {}
    for key, item in encodable_to_dict(value).items():
        if item is None or isinstance(item, dict | list):
            continue
        if isinstance(item, bool):
            params[key] = "true" if item else "false"
        else:
            params[key] = str(item)
    return params
