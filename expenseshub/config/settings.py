"""
Configuration Management for ExpensesHub

Every tunable value is read from the environment (or a .env file)
through pydantic-settings.

DESIGN DECISION: One module owns configuration. The only external
dependency is MongoDB, and it is optional: without MONGODB_URI the
API starts in degraded mode instead of refusing to boot.
"""

from functools import lru_cache
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class MongoSettings(BaseSettings):
    """MongoDB document store configuration."""

    model_config = SettingsConfigDict(
        env_prefix="MONGODB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    uri: Optional[str] = Field(
        default=None,
        description="MongoDB connection string. Unset means degraded mode."
    )
    db_name: str = Field(
        default="expenseshub_dev",
        description="Database name"
    )
    max_pool_size: int = Field(
        default=10,
        ge=1,
        le=200,
        description="Connection pool size"
    )
    server_selection_timeout_ms: int = Field(
        default=5000,
        ge=100,
        description="How long to wait for a reachable server"
    )
    socket_timeout_ms: int = Field(
        default=45000,
        ge=100,
        description="Socket timeout for individual operations"
    )

    @property
    def is_configured(self) -> bool:
        return bool(self.uri)


class AppSettings(BaseSettings):
    """
    Process-wide settings: environment, logging, time zone, HTTP.

    Bad values (unknown zone, unknown log level) fail at load time.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="development, staging or production"
    )
    app_name: str = Field(
        default="expenseshub",
        description="Short application name, used in export filenames"
    )
    debug_mode: bool = Field(
        default=False,
        description="Auto-reload the API server"
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level"
    )

    # Period boundaries are computed in this zone
    app_timezone: str = Field(
        default="UTC",
        description="IANA time zone used for period boundaries"
    )

    # HTTP
    api_host: str = Field(
        default="127.0.0.1",
        description="Interface the API server binds to"
    )
    api_port: int = Field(
        default=8000,
        ge=1,
        le=65535,
    )
    api_base_url: str = Field(
        default="http://localhost:8000",
        description="Base URL the dashboard uses to reach the API"
    )
    cors_origins: str = Field(
        default="http://localhost:8501,http://localhost:3000",
        description="Comma-separated list of allowed CORS origins"
    )

    @field_validator('app_timezone')
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Reject unknown zone names at startup rather than at the first request."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown time zone: {v}")
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def tzinfo(self) -> ZoneInfo:
        """Configured zone as a tzinfo object."""
        return ZoneInfo(self.app_timezone)

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.app_environment == "production"


class Settings(BaseSettings):
    """
    Entry point for configuration.

    Sub-settings are read on access, so env changes in tests are seen.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    @property
    def mongo(self) -> MongoSettings:
        return MongoSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Process-wide settings instance (cached; see get_settings.cache_clear).
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Report which parts of the configuration are usable.

    Returns:
        {"mongo": bool, "app": bool} plus "<name>_error" entries
    """
    results = {}

    settings = get_settings()

    try:
        mongo = settings.mongo
        results["mongo"] = mongo.is_configured
        if not mongo.is_configured:
            results["mongo_error"] = "MONGODB_URI is not set"
    except Exception as e:
        results["mongo"] = False
        results["mongo_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
