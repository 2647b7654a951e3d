"""
Configuration management for IPO Data Hub.

This module provides environment-based configuration using Pydantic BaseSettings,
allowing the registrar transport, resolution caches and aggregator endpoints to
be tuned per deployment without code changes.

Environment variables are loaded with the IDH_ prefix, e.g. IDH_HTTP_TIMEOUT=15.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

import structlog
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = structlog.get_logger(__name__)

# Determine project root for resolving .env by default
PROJECT_ROOT = Path(__file__).resolve().parents[3]
DEFAULT_ENV_FILE = PROJECT_ROOT / ".env"
ENV_FILE_OVERRIDE = os.getenv("IDH_ENV_FILE")
if ENV_FILE_OVERRIDE:
    env_file_candidate = Path(ENV_FILE_OVERRIDE).expanduser()
    if not env_file_candidate.is_absolute():
        env_file_candidate = PROJECT_ROOT / env_file_candidate
    SETTINGS_ENV_FILE = env_file_candidate
else:
    SETTINGS_ENV_FILE = DEFAULT_ENV_FILE

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    Uppercase fields (ENVIRONMENT, LOG_LEVEL) are read without prefix so that
    the logging bootstrap can share them with other tooling; everything else
    uses the IDH_ prefix.
    """

    ENVIRONMENT: Literal["dev", "staging", "prod"] = Field(
        default="dev",
        validation_alias="ENVIRONMENT",
        description="Deployment environment",
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Logging level (uppercase)",
    )

    app_name: str = Field(default="IPODataHub", description="Application name")

    # Registrar transport
    http_timeout: int = Field(
        default=30, description="Per-request timeout for registrar calls in seconds"
    )
    http_retry_max: int = Field(
        default=0,
        description="Retry attempts on connection errors and 5xx responses",
    )
    http_user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        description="Browser-like User-Agent sent to registrar sites",
    )

    # Identifier resolution caches
    resolution_cache_ttl_hours: int = Field(
        default=24, description="Lifetime of a resolved company code in hours"
    )
    resolution_cache_max_entries: int = Field(
        default=1000, description="Maximum cached names per registrar"
    )

    registrar_overrides_file: Optional[str] = Field(
        default="./config/registrars.yml",
        description="Optional YAML file overriding registrar base URLs/endpoints",
    )

    # Allotment aggregator
    aggregator_base_url: str = Field(
        default="https://iponinjaapi.matalia.co.in/api/v1",
        description="Base URL of the allotment aggregator API",
    )

    @field_validator("http_timeout", "resolution_cache_ttl_hours", "resolution_cache_max_entries")
    @classmethod
    def _must_be_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be a positive integer")
        return value

    @field_validator("http_retry_max")
    @classmethod
    def _must_not_be_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("must not be negative")
        return value

    @property
    def resolution_cache_ttl_seconds(self) -> float:
        return self.resolution_cache_ttl_hours * 3600.0

    model_config = SettingsConfigDict(
        env_prefix="IDH_",
        env_file=str(SETTINGS_ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings instance with loaded configuration
    """
    return Settings()
