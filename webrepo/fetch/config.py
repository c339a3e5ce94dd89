"""Configuration models for the call executor."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from webrepo.fetch.models import (
    DEFAULT_LOG_STAGES,
    AcceptanceSet,
    LogOption,
    parse_log_options,
)


class KeyStrategy(str, Enum):
    """How JSON object keys are mapped before validation.

    - USE_KEYS: keys are used as sent
    - CONVERT_FROM_CAMEL_CASE: ``createdAt`` becomes ``created_at``
    """

    USE_KEYS = "use_keys"
    CONVERT_FROM_CAMEL_CASE = "convert_from_camel_case"


class DecoderConfig(BaseModel):
    """Settings for materializing response bodies."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    strict: bool = Field(
        default=False,
        description="Use pydantic strict mode (no coercion of '1' to 1)",
    )
    key_strategy: KeyStrategy = KeyStrategy.USE_KEYS


class CallConfig(BaseModel):
    """Per-call configuration.

    Everything that decides how a call is validated, logged and decoded.
    Instances are immutable and may be shared between concurrent calls.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    log_stages: frozenset[LogOption] = Field(default=DEFAULT_LOG_STAGES)
    accept: AcceptanceSet = Field(default_factory=AcceptanceSet.success)
    decoder: DecoderConfig = Field(default_factory=DecoderConfig)

    @field_validator("log_stages", mode="before")
    @classmethod
    def parse_stages(cls, v: object) -> object:
        """Allow "request,data" style strings."""
        if isinstance(v, str):
            return parse_log_options(v)
        return v

    def logs(self, stage: LogOption) -> bool:
        """Check whether a stage emits a record."""
        return stage in self.log_stages
