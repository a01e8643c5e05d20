"""
Configuration Management for Finance Compass

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Storage keys and history bounds live in one place so the persisted blob
layout can be read off this file.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class FinanceSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from FINANCE_COMPASS_* environment variables
    and the .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="FINANCE_COMPASS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Log at DEBUG level regardless of log_level"
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum level for structured logs"
    )

    # Storage
    storage_dir: str = Field(
        default=".finance_compass",
        description="Directory holding the persisted key-value files"
    )
    state_key: str = Field(
        default="finance-compass-v3",
        description="Storage key for the serialized app state"
    )
    audit_key: str = Field(
        default="finance-compass-budget-audit-v2",
        description="Storage key for the serialized audit entries"
    )

    # Bounds
    history_limit: int = Field(
        default=150,
        ge=1,
        le=10000,
        description="Maximum snapshots kept on each of the undo and redo stacks"
    )
    audit_limit: int = Field(
        default=400,
        ge=1,
        le=100000,
        description="Maximum audit entries kept (newest first)"
    )
    projection_months: int = Field(
        default=12,
        ge=1,
        le=120,
        description="Months projected forward in the net worth trend"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Only accept standard logging level names."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        level = v.strip().upper()
        if level not in allowed:
            raise ValueError(f"Unsupported log level: {v}. Allowed: {allowed}")
        return level

    @property
    def effective_log_level(self) -> str:
        """DEBUG whenever debug_mode is on, else log_level."""
        return "DEBUG" if self.debug_mode else self.log_level


@lru_cache()
def get_settings() -> FinanceSettings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return FinanceSettings()
