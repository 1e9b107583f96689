"""Application configuration via Pydantic Settings v2."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

SUPPORTED_CONFIDENCE_LEVELS = frozenset({0.8, 0.9, 0.95, 0.99})


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = "TrendCast"
    app_env: Literal["development", "testing", "staging", "production"] = "development"
    debug: bool = False

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    # API
    api_host: str = "0.0.0.0"  # noqa: S104
    api_port: int = 8123

    # Trend classification
    trend_stable_threshold: float = 0.02  # fraction of the series mean per period

    # Forecasting
    forecast_default_periods: int = Field(default=30, ge=1)
    forecast_max_periods: int = Field(default=365, ge=1)
    forecast_default_confidence_level: float = 0.95

    # Series limits
    series_max_points: int = Field(default=3650, ge=2)
    series_max_lookback_days: int = Field(default=730, ge=1)

    @field_validator("trend_stable_threshold")
    @classmethod
    def validate_threshold(cls, v: float) -> float:
        """Reject negative stability bands.

        Args:
            v: Threshold value.

        Returns:
            Validated threshold.

        Raises:
            ValueError: If the threshold is negative.
        """
        if v < 0:
            raise ValueError(f"trend_stable_threshold must be >= 0, got {v}")
        return v

    @field_validator("forecast_default_confidence_level")
    @classmethod
    def validate_confidence_level(cls, v: float) -> float:
        """Restrict the default interval to the supported z-score table."""
        if v not in SUPPORTED_CONFIDENCE_LEVELS:
            raise ValueError(
                f"forecast_default_confidence_level must be one of "
                f"{sorted(SUPPORTED_CONFIDENCE_LEVELS)}, got {v}"
            )
        return v

    @model_validator(mode="after")
    def validate_periods(self) -> "Settings":
        """Ensure the default horizon fits under the maximum."""
        if self.forecast_default_periods > self.forecast_max_periods:
            raise ValueError(
                f"forecast_default_periods ({self.forecast_default_periods}) exceeds "
                f"forecast_max_periods ({self.forecast_max_periods})"
            )
        return self

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.app_env == "testing"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton."""
    return Settings()
