"""Environment-based configuration using pydantic-settings.

Provides type-safe, validated configuration from environment variables
with sensible defaults. Supports .env files.

Example:
    >>> from midaz_gateway.foundation.config import get_settings
    >>> settings = get_settings()
    >>> settings.backend.onboarding_url
    'http://localhost:3000'
    >>> settings.retry.max_retries
    3

    # Or with environment variables:
    # MIDAZ_ONBOARDING_URL=https://onboarding.example.com
    # MIDAZ_CLIENT_ID=... MIDAZ_CLIENT_SECRET=...
    # MIDAZ_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Literal, Self

from pydantic import (
    AliasChoices,
    Field,
    NonNegativeFloat,
    PositiveFloat,
    SecretStr,
    computed_field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ONBOARDING_URL = "http://localhost:3000"
DEFAULT_TRANSACTION_URL = "http://localhost:3001"


class BackendSettings(BaseSettings):
    """Base URLs of the two ledger services and the OAuth token endpoint."""

    model_config = SettingsConfigDict(
        env_prefix="MIDAZ_BACKEND_",
        extra="ignore",
        populate_by_name=True,
    )

    onboarding_url: str = Field(
        default=DEFAULT_ONBOARDING_URL,
        validation_alias=AliasChoices("MIDAZ_ONBOARDING_URL", "MIDAZ_BACKEND_ONBOARDING_URL"),
    )
    transaction_url: str = Field(
        default=DEFAULT_TRANSACTION_URL,
        validation_alias=AliasChoices("MIDAZ_TRANSACTION_URL", "MIDAZ_BACKEND_TRANSACTION_URL"),
    )
    auth_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("MIDAZ_AUTH_URL", "MIDAZ_BACKEND_AUTH_URL"),
        description="OAuth server base URL (defaults to the onboarding URL)",
    )
    legacy_url: str | None = Field(
        default=None,
        validation_alias=AliasChoices("MIDAZ_BACKEND_URL"),
        description="Single URL for both services (older deployments)",
        repr=False,
    )
    timeout: PositiveFloat = Field(default=10.0, description="HTTP timeout in seconds")

    @field_validator("onboarding_url", "transaction_url", "auth_url", "legacy_url", mode="after")
    @classmethod
    def _normalize_url(cls, v: str | None) -> str | None:
        if v is None:
            return v
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"URL must start with http:// or https://: {v!r}")
        return v.rstrip("/")

    @model_validator(mode="after")
    def _apply_legacy_url(self) -> Self:
        """A legacy single URL fills in whichever service URL was not set explicitly."""
        if self.legacy_url:
            if "onboarding_url" not in self.model_fields_set:
                self.onboarding_url = self.legacy_url
            if "transaction_url" not in self.model_fields_set:
                self.transaction_url = self.legacy_url
        return self

    @computed_field
    @property
    def token_url(self) -> str:
        """Client-credentials token endpoint."""
        return f"{self.auth_url or self.onboarding_url}/oauth/token"


class AuthSettings(BaseSettings):
    """Credentials for the ledger API. Secrets never appear in repr or logs."""

    model_config = SettingsConfigDict(
        env_prefix="MIDAZ_",
        extra="ignore",
        populate_by_name=True,
    )

    client_id: str | None = None
    client_secret: SecretStr | None = None
    api_key: SecretStr | None = None
    cache_encryption_key: SecretStr | None = Field(
        default=None,
        validation_alias=AliasChoices("MIDAZ_CACHE_ENCRYPTION_KEY", "CACHE_ENCRYPTION_KEY"),
        description="Key protecting cached bearer tokens (random per process if unset)",
    )

    @computed_field
    @property
    def has_client_credentials(self) -> bool:
        return bool(self.client_id and self.client_secret and self.client_secret.get_secret_value())


class CacheSettings(BaseSettings):
    """Token cache configuration."""

    model_config = SettingsConfigDict(
        env_prefix="MIDAZ_CACHE_",
        extra="ignore",
    )

    token_ttl: PositiveFloat = Field(default=300.0, description="Cached token lifetime in seconds")


class RetrySettings(BaseSettings):
    """Retry/backoff configuration for resource calls."""

    model_config = SettingsConfigDict(
        env_prefix="MIDAZ_RETRY_",
        extra="ignore",
        populate_by_name=True,
    )

    max_retries: Annotated[int, Field(
        ge=0,
        le=10,
        validation_alias=AliasChoices("MIDAZ_RETRY_MAX_RETRIES", "MIDAZ_BACKEND_RETRIES"),
    )] = 3
    base_delay: PositiveFloat = Field(default=1.0, description="Base delay in seconds")
    max_delay: PositiveFloat = Field(default=10.0, description="Maximum delay in seconds")
    jitter_max: NonNegativeFloat = Field(default=0.2, description="Upper bound of additive jitter in seconds")


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="MIDAZ_LOG_",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["console", "json", "none"] = "console"

    @field_validator("level", mode="before")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class GatewaySettings(BaseSettings):
    """Root settings for the gateway.

    Loads configuration from environment variables with the MIDAZ_ prefix.

    Example environment variables:
        MIDAZ_ONBOARDING_URL=http://localhost:3000
        MIDAZ_TRANSACTION_URL=http://localhost:3001
        MIDAZ_CLIENT_ID=svc  MIDAZ_CLIENT_SECRET=...
        MIDAZ_API_KEY=...            # static key, used when no client pair is set
        CACHE_ENCRYPTION_KEY=...
        MIDAZ_RETRY_MAX_RETRIES=3
        MIDAZ_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="MIDAZ_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_default=True,
    )

    server_name: str = "midaz-gateway"

    backend: BackendSettings = Field(default_factory=BackendSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    retry: RetrySettings = Field(default_factory=RetrySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> GatewaySettings:
    """Get the global settings instance (cached)."""
    return GatewaySettings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing).

    After calling this, the next get_settings() call will
    reload configuration from environment.
    """
    get_settings.cache_clear()
