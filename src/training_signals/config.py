"""Configuration settings for training signal computation."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


# __file__ = src/training_signals/config.py
PACKAGE_ROOT = Path(__file__).parent
PROJECT_ROOT = PACKAGE_ROOT.parent.parent


class Settings(BaseSettings):
    """Settings loaded from environment variables (prefix TRAINING_SIGNALS_)."""

    model_config = SettingsConfigDict(
        env_prefix="TRAINING_SIGNALS_",
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Heart rate context used when the athlete profile is incomplete
    default_resting_hr: int = 60
    default_max_hr: int = 185

    # Training load
    default_rpe: float = 5.0
    acute_window_days: int = 7
    chronic_window_days: int = 28

    # Trend windows
    fitness_trend_weeks: int = 8
    fatigue_window_days: int = 14

    # Batch jobs
    batch_progress_interval: int = 50

    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
