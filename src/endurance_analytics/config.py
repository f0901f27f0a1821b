"""Configuration settings for the endurance analytics engine."""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


# __file__ = src/endurance_analytics/config.py
PACKAGE_ROOT = Path(__file__).parent
PROJECT_ROOT = PACKAGE_ROOT.parent.parent


class Settings(BaseSettings):
    """Analytics thresholds and windows loaded from environment variables.

    The pure metric functions take these values as keyword arguments; the
    services read them here and pass them through.
    """

    model_config = SettingsConfigDict(
        env_prefix="ENDURANCE_",
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "INFO"

    # Fitness load model
    ctl_time_constant: int = 42
    atl_time_constant: int = 7

    # Load balance windows (days)
    acute_window_days: int = 7
    chronic_window_days: int = 28
    load_history_days: int = 90  # read back this far to tell rest days from missing history

    # Goal progress
    goal_session_lookback_days: int = 7

    # Efficiency analysis
    efficiency_min_sessions: int = 5
    efficiency_default_days: int = 90
    efficiency_max_days: int = 180
    efficiency_trend_band_pct: float = 3.0

    # Race and competitor analysis
    min_races_for_trend: int = 6
    race_history_limit: int = 200
    default_min_races_together: int = 2


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Apply the configured log level to the package logger.

    Handlers are left to the host application.
    """
    package_logger = logging.getLogger("endurance_analytics")
    package_logger.setLevel((level or get_settings().log_level).upper())
    return package_logger
