"""Centralized configuration using pydantic-settings.

All configuration is loaded from environment variables and .env files.
For nested settings, use double underscore: CURRENCY__CODE=EUR
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Settings(BaseSettings):
    """Prorated renewals settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_nested_delimiter="__",
        extra="ignore",
    )

    app_name: str = Field("prorated-renewals", description="Application name")

    # ============================================================
    # Cache Configuration
    # ============================================================

    class CacheSettings(BaseModel):
        """Cache configuration."""

        backend: str = Field(
            "memory",
            pattern="^(memory|redis|null)$",
            description="Cache backend type: memory, redis, or null",
        )
        redis_url: str = Field("redis://localhost:6379/1", description="Redis cache URL")
        key_prefix: str = Field("prorate", description="Prefix for all cache keys")
        max_size: int = Field(1000, gt=0, description="Max entries for the memory backend")

        # TTLs (in seconds)
        flag_ttl: int = Field(3600, gt=0, description="TTL for opt-in flag lookups")
        cycle_ttl: int = Field(3600, gt=0, description="TTL for days-in-cycle lookups")
        amount_ttl: int = Field(1800, gt=0, description="TTL for prorated amounts")

    cache: CacheSettings = CacheSettings()  # type: ignore[call-arg]

    # ============================================================
    # Currency Configuration
    # ============================================================

    class CurrencySettings(BaseModel):
        """Active currency - single currency support."""

        code: str = Field("USD", description="Active currency code")
        decimal_places: int | None = Field(
            None, description="Price decimals override (defaults to the currency's ISO precision)"
        )
        locale: str = Field("en_US", description="Locale for price formatting")

    currency: CurrencySettings = CurrencySettings()  # type: ignore[call-arg]

    # ============================================================
    # Proration Configuration
    # ============================================================

    class ProrationSettings(BaseModel):
        """Opt-in flag and price string configuration."""

        meta_key: str = Field("_enable_proration", description="Product meta key of the flag")
        enabled_value: str = Field("yes", description="Meta value meaning enabled")
        disabled_value: str = Field("no", description="Meta value written when disabled")
        due_today_suffix: str = Field(
            ", {amount} due today", description="Appended to subscription price strings"
        )

    proration: ProrationSettings = ProrationSettings()  # type: ignore[call-arg]

    # ============================================================
    # Observability
    # ============================================================

    class ObservabilitySettings(BaseModel):
        """Logging configuration."""

        log_level: LogLevel = Field(LogLevel.INFO, description="Log level")
        log_format: str = Field("json", description="Log format (json or console)")

    observability: ObservabilitySettings = ObservabilitySettings()  # type: ignore[call-arg]


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the settings instance, loading it on first use."""
    global _settings
    if _settings is None:
        _settings = Settings()  # type: ignore
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call reloads the environment."""
    global _settings
    _settings = None


settings = get_settings()
