from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Centralised pricing engine configuration with type validation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_env: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_dir: Optional[str] = Field(default=None, description="Enables the rotating file log when set.")

    # Calculation audit log
    audit_log_max_entries: int = Field(default=1000, ge=1, le=1_000_000)
    audit_log_default_limit: int = Field(default=100, ge=1, le=10_000)
    audit_log_retention_days: int = Field(default=30, ge=1, le=3650)

    # Overhead
    default_fixed_overhead_rate: float = Field(default=0.15, ge=0.0, le=1.0)

    # Legacy scoring
    legacy_risk_rate_per_point: float = Field(default=0.02, ge=0.0, le=1.0)
    legacy_win_probability_per_point: float = Field(default=8.0, ge=0.0, le=10.0)
    minimum_win_probability: float = Field(default=10.0, ge=0.0, le=100.0)
    default_win_probability: float = Field(default=50.0, ge=0.0, le=100.0)

    # Market data
    market_data_recent_days: int = Field(default=365, ge=1, le=3650)

    # Risk factor input validation
    unusual_numeric_threshold: float = Field(default=1000.0, gt=0)
    max_input_string_length: int = Field(default=1000, ge=1, le=100_000)

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"


@lru_cache
def get_settings() -> Settings:
    """Cached singleton so .env is read once per process."""
    return Settings()


settings = get_settings()
