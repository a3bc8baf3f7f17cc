"""Application configuration module."""

from __future__ import annotations

import os
from typing import Any

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_FORMATS = ("json", "text")


class AppSettings(BaseSettings):
    """Application settings with environment variable support."""

    _use_env_file = "PYTEST_CURRENT_TEST" not in os.environ
    model_config = SettingsConfigDict(
        env_file=(".env" if _use_env_file else None),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application settings
    app_name: str = Field(default="sns-subscribe", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")

    # Logging settings
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="text", description="Log format (json or text)")

    # Callback listener settings
    callback_host: str = Field(
        default="0.0.0.0",  # nosec B104 - the provider must reach the listener
        description="Bind address for the confirmation callback listener",
        validation_alias=AliasChoices("CALLBACK_HOST"),
    )
    callback_port: int = Field(
        default=80,
        ge=0,
        le=65535,
        description="Default port for the confirmation callback listener",
        validation_alias=AliasChoices("CALLBACK_PORT"),
    )

    # Provider settings
    aws_endpoint_url: str | None = Field(
        default=None,
        description="Override for the SNS API endpoint (e.g. LocalStack)",
        validation_alias=AliasChoices("AWS_ENDPOINT_URL", "SNS_ENDPOINT_URL"),
    )

    # Handshake settings
    confirmation_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Timeout for the GET issued against the SubscribeURL",
        validation_alias=AliasChoices("CONFIRMATION_TIMEOUT_SECONDS"),
    )
    handshake_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Maximum wait for the confirmation callback (unset waits forever)",
        validation_alias=AliasChoices("HANDSHAKE_TIMEOUT_SECONDS"),
    )

    @field_validator("log_format")
    @classmethod
    def _normalise_log_format(cls, value: str) -> str:
        lowered = value.strip().lower()
        return lowered if lowered in _LOG_FORMATS else "text"

    def to_dict(self) -> dict[str, Any]:
        """Convert settings to dictionary."""
        return self.model_dump()


# Global settings instance
settings = AppSettings()


def get_settings() -> AppSettings:
    """Get application settings."""
    return settings
