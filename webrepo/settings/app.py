"""Application settings powered by Pydantic BaseSettings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from webrepo.fetch.config import CallConfig, DecoderConfig, KeyStrategy
from webrepo.fetch.constants import DEFAULT_TIMEOUT_SECONDS, DEFAULT_USER_AGENT
from webrepo.fetch.models import parse_log_options


class AppSettings(BaseSettings):
    """Centralized environment configuration."""

    model_config = SettingsConfigDict(
        env_prefix="WEBREPO_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    base_url: str | None = None
    log_stages: str = Field(
        default="error", description="Comma-separated stages: request,response,data,error"
    )
    timeout_seconds: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0, le=300)
    user_agent: str = Field(default=DEFAULT_USER_AGENT, min_length=1)
    decode_strict: bool = False
    key_strategy: KeyStrategy = KeyStrategy.USE_KEYS
    credentials_db: Path | None = None

    def call_config(self) -> CallConfig:
        """Build the default call configuration from settings."""
        return CallConfig(
            log_stages=parse_log_options(self.log_stages),
            decoder=DecoderConfig(
                strict=self.decode_strict,
                key_strategy=self.key_strategy,
            ),
        )


def get_settings() -> AppSettings:
    """Get a settings instance."""
    return AppSettings()
