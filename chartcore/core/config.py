"""
Library Configuration

Defaults loaded from environment variables (prefix CHARTCORE_).
"""

from functools import lru_cache
from typing import Literal
from pydantic import Field
from pydantic_settings import BaseSettings

from chartcore.schemas.indicators import MAKind


class Settings(BaseSettings):
    """Library settings from environment variables."""

    # Application
    app_name: str = "chartcore"
    app_version: str = "0.1.0"
    debug: bool = False

    # Moving averages
    ma_period: int = Field(default=20, gt=0)
    # Default overlay set drawn on the price panel
    ma_periods: list[int] = [7, 25, 99]
    ma_overlay_kind: MAKind = MAKind.EMA

    # Oscillators
    rsi_period: int = Field(default=14, gt=0)
    rsi_neutral_value: float = Field(default=50.0, ge=0, le=100)
    macd_fast_period: int = Field(default=12, gt=0)
    macd_slow_period: int = Field(default=26, gt=0)
    macd_signal_period: int = Field(default=9, gt=0)
    stoch_fast_k_period: int = Field(default=5, gt=0)
    stoch_slow_k_period: int = Field(default=3, gt=0)
    stoch_slow_d_period: int = Field(default=3, gt=0)
    kdj_fast_k_period: int = Field(default=9, gt=0)
    kdj_slow_k_period: int = Field(default=3, gt=0)
    kdj_slow_d_period: int = Field(default=3, gt=0)
    williams_r_period: int = Field(default=14, gt=0)
    stoch_rsi_period: int = Field(default=14, gt=0)
    stoch_rsi_fast_k_period: int = Field(default=3, gt=0)
    stoch_rsi_fast_d_period: int = Field(default=3, gt=0)

    # Bands
    bb_period: int = Field(default=20, gt=0)
    bb_dev_up: float = Field(default=2.0, ge=0)
    bb_dev_down: float = Field(default=2.0, ge=0)

    # Volume
    volume_ma_short_period: int = Field(default=5, gt=0)
    volume_ma_long_period: int = Field(default=10, gt=0)

    # Zero-range high/low windows: "neutral" substitutes 50 / -50, "raise" fails
    degenerate_window_policy: Literal["neutral", "raise"] = "neutral"

    # Axes
    axis_target_steps: int = Field(default=4, gt=0)
    axis_labels_count: int = Field(default=4, ge=0)

    # Sample data
    sample_bar_count: int = Field(default=1000, gt=0)

    class Config:
        env_prefix = "CHARTCORE_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
