"""Configuration management using pydantic-settings.

Provides environment-based configuration with type safety and validation.
"""

from .settings import (
    AuthSettings,
    BackendSettings,
    CacheSettings,
    GatewaySettings,
    LoggingSettings,
    RetrySettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    "AuthSettings",
    "BackendSettings",
    "CacheSettings",
    "GatewaySettings",
    "LoggingSettings",
    "RetrySettings",
    "clear_settings_cache",
    "get_settings",
]
