"""Configuration with pydantic-settings.

Every field has a default so the CLI works against a local backend without
any environment. Values are read from the environment (or a ``.env`` file)
by the alias names below.

Usage:
    from pouch_admin.config import get_settings

    settings = get_settings()
    settings.api_url
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Pouch admin CLI configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # === Key-management API ===

    api_url: str = Field(
        default="http://localhost:8080/v1",
        alias="POUCH_API_URL",
        description="Base URL of the key-management API (including the /v1 prefix)",
        examples=["http://pouch:8080/v1"],
    )
    request_timeout: float = Field(
        default=30.0,
        gt=0,
        alias="POUCH_REQUEST_TIMEOUT",
        description="HTTP request timeout in seconds",
    )

    # === Logging ===

    service_name: str = Field(
        default="pouch-admin",
        alias="SERVICE_NAME",
        description="Service name for structured logging",
    )
    log_format: Literal["json", "console"] = Field(
        default="console",
        alias="LOG_FORMAT",
        description="Log output format",
    )
    log_level: str = Field(
        default="WARNING",
        alias="LOG_LEVEL",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )

    # === New key defaults ===

    default_provider: str = Field(
        default="openai",
        alias="POUCH_DEFAULT_PROVIDER",
        description="Provider selected for new keys",
    )
    default_budget_limit: float = Field(
        default=5.0,
        ge=0,
        alias="POUCH_DEFAULT_BUDGET_LIMIT",
        description="Budget limit in USD for new keys, 0 for unlimited",
    )
    default_reset_period: int = Field(
        default=2592000,
        ge=0,
        alias="POUCH_DEFAULT_RESET_PERIOD",
        description="Budget reset period in seconds for new keys (default 30 days)",
    )

    @field_validator("api_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return upper_v


@lru_cache
def get_settings() -> Settings:
    return Settings()
