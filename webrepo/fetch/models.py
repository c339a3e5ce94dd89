"""Data models for the call executor."""

from collections.abc import Iterable
from enum import Enum
from typing import Annotated, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator

from webrepo.fetch.constants import (
    HTTP_STATUS_MAX,
    HTTP_STATUS_MIN,
    HTTP_STATUS_OK_MAX,
    HTTP_STATUS_OK_MIN,
)


class LogOption(str, Enum):
    """Pipeline stages that can emit a log record.

    - REQUEST: the concrete request was built
    - RESPONSE: the transport returned status and headers
    - DATA: the body passed the acceptance check
    - ERROR: the call failed
    """

    REQUEST = "request"
    RESPONSE = "response"
    DATA = "data"
    ERROR = "error"


DEFAULT_LOG_STAGES: frozenset[LogOption] = frozenset({LogOption.ERROR})


def parse_log_options(value: str | Iterable[str | LogOption]) -> frozenset[LogOption]:
    """Parse log stages from a comma-separated string or an iterable.

    Args:
        value: e.g. "request,data" or ["request", LogOption.DATA].

    Returns:
        Frozen set of log options.

    Raises:
        ValueError: If a stage name is unknown.
    """
    items = value.split(",") if isinstance(value, str) else value
    stages: set[LogOption] = set()
    for item in items:
        name = item.value if isinstance(item, LogOption) else item.strip().lower()
        if not name:
            continue
        try:
            stages.add(LogOption(name))
        except ValueError as e:
            valid = ", ".join(option.value for option in LogOption)
            msg = f"Unknown log stage '{name}' (expected one of: {valid})"
            raise ValueError(msg) from e
    return frozenset(stages)


class DecodeMode(str, Enum):
    """How a call treats a body that cannot be decoded.

    - STRICT: decode failure fails the call
    - TEXT_OR_DECODE: textual results fall back to the raw body text
    """

    STRICT = "strict"
    TEXT_OR_DECODE = "text_or_decode"


class AcceptanceSet(BaseModel):
    """Status codes treated as success for a call.

    Membership is a frozenset lookup, so non-contiguous sets such as
    ``{200, 304, 404}`` cost the same as the default 2xx range.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    codes: Annotated[frozenset[int], Field(min_length=1)]

    @field_validator("codes")
    @classmethod
    def validate_codes(cls, v: frozenset[int]) -> frozenset[int]:
        """Reject codes outside the HTTP status range."""
        invalid = sorted(code for code in v if not HTTP_STATUS_MIN <= code <= HTTP_STATUS_MAX)
        if invalid:
            msg = f"Invalid HTTP status codes: {invalid}"
            raise ValueError(msg)
        return v

    @classmethod
    def success(cls) -> Self:
        """The conventional 200-299 range."""
        return cls.between(HTTP_STATUS_OK_MIN, HTTP_STATUS_OK_MAX)

    @classmethod
    def of(cls, *codes: int) -> Self:
        """Build a set from individual codes."""
        return cls(codes=frozenset(codes))

    @classmethod
    def between(cls, first: int, last: int) -> Self:
        """Build a set from an inclusive range of codes."""
        return cls(codes=frozenset(range(first, last + 1)))

    @classmethod
    def parse(cls, value: str) -> Self:
        """Parse codes and inclusive ranges such as "200-204,304".

        Raises:
            ValueError: If an item is not a code or a range.
        """
        codes: set[int] = set()
        for item in value.split(","):
            item = item.strip()
            if not item:
                continue
            first, sep, last = item.partition("-")
            try:
                if sep:
                    codes.update(range(int(first), int(last) + 1))
                else:
                    codes.add(int(first))
            except ValueError as e:
                msg = f"Invalid status code or range: '{item}'"
                raise ValueError(msg) from e
        return cls(codes=frozenset(codes))

    def __contains__(self, code: object) -> bool:
        return code in self.codes

    def __or__(self, other: "AcceptanceSet") -> "AcceptanceSet":
        return AcceptanceSet(codes=self.codes | other.codes)


class RawExchange(BaseModel):
    """Transport-level result of one call attempt."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    status: int | None = Field(
        default=None, description="HTTP status code, None if not discernible"
    )
    headers: dict[str, str] = Field(
        default_factory=dict, description="Response headers"
    )
    body: bytes = Field(default=b"", description="Response body")

    @property
    def body_size(self) -> int:
        """Get the size of the response body in bytes."""
        return len(self.body)
