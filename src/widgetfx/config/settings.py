"""
Settings - Pydantic-based Configuration Management

Provides centralized configuration management using Pydantic Settings.
Values come from environment variables (WIDGETFX_* aliases) or a local
.env file, with validation.

Files that USE this module:
- widgetfx.app (builds the store, gateway, session and scheduler from settings)
- widgetfx.cli (logging options and defaults)
- widgetfx.adapters.providers.* (provider URLs and HTTP timeout defaults)

Files that this module USES:
- widgetfx.shared.validators (validation functions for settings)
"""

from __future__ import annotations  # Enable postponed evaluation of annotations

from pathlib import Path  # Object-oriented filesystem paths
from typing import Optional  # Type hints for optional values

from pydantic import Field, field_validator  # Data validation and field configuration
from pydantic_settings import BaseSettings, SettingsConfigDict  # Settings management with Pydantic

from widgetfx.shared.validators import (
    normalize_currency_code,  # Uppercase and validate currency codes
    validate_namespace,  # Validate shared storage namespace
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # --- Shared store ---
    data_dir: Path = Field(default=Path("./data"), alias="WIDGETFX_DATA_DIR")
    app_group: str = Field(default="group.widgetfx", alias="WIDGETFX_APP_GROUP")
    widget_kind: str = Field(default="WidgetFXRate", alias="WIDGETFX_WIDGET_KIND")

    # --- Rate providers ---
    latest_rates_url: str = Field(
        default="https://api.exchangerate.host/latest", alias="WIDGETFX_LATEST_RATES_URL"
    )
    timeseries_url: str = Field(
        default="https://api.exchangerate.host/timeseries", alias="WIDGETFX_TIMESERIES_URL"
    )
    open_er_url: str = Field(
        default="https://open.er-api.com/v6/latest", alias="WIDGETFX_OPEN_ER_URL"
    )

    # --- HTTP Settings ---
    http_timeout_seconds: int = Field(default=10, alias="HTTP_TIMEOUT_SECONDS", ge=1, le=60)

    # --- Widget timeline ---
    widget_refresh_minutes: int = Field(default=15, alias="WIDGETFX_REFRESH_MINUTES", ge=1, le=1440)
    widget_poll_seconds: float = Field(default=1.0, alias="WIDGETFX_POLL_SECONDS", gt=0, le=60)

    # --- Converter ---
    trend_days: int = Field(default=7, alias="WIDGETFX_TREND_DAYS", ge=1, le=365)
    max_amount_length: int = Field(default=9, alias="WIDGETFX_MAX_AMOUNT_LENGTH", ge=1, le=32)
    max_presets: int = Field(default=6, alias="WIDGETFX_MAX_PRESETS", ge=1, le=24)
    default_base: str = Field(default="USD", alias="WIDGETFX_DEFAULT_BASE")
    default_target: str = Field(default="EUR", alias="WIDGETFX_DEFAULT_TARGET")
    default_amount: str = Field(default="100", alias="WIDGETFX_DEFAULT_AMOUNT")

    # --- Logging ---
    log_dir: Optional[str] = Field(default=None, alias="LOG_DIR")
    log_max_bytes: int = Field(default=10 * 1024 * 1024, alias="LOG_MAX_BYTES")  # 10MB
    log_backup_count: int = Field(default=5, alias="LOG_BACKUP_COUNT")

    @property
    def store_dir(self) -> Path:
        """Directory shared by every execution context."""
        return self.data_dir / self.app_group

    @field_validator("default_base", "default_target")
    @classmethod
    def validate_currency(cls, v: str) -> str:
        """Validate and normalize default currency codes."""
        code = normalize_currency_code(v)
        if code is None:
            raise ValueError(f"Invalid currency code: {v!r}")
        return code

    @field_validator("app_group")
    @classmethod
    def validate_app_group(cls, v: str) -> str:
        """Validate the shared namespace identifier."""
        if not validate_namespace(v):
            raise ValueError("WIDGETFX_APP_GROUP must be a plain directory name")
        return v


# Global settings instance
settings = Settings()
