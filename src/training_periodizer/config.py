"""Configuration settings for the periodization engine."""

from pathlib import Path
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


PACKAGE_ROOT = Path(__file__).parent.parent.parent


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PERIODIZER_",
        env_file=str(PACKAGE_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: str = "INFO"

    # Scheduler limits
    min_rest_days: int = 1
    max_duration_weeks: int = 52

    # Fatigue thresholds (rolling stress, 0-100)
    fatigue_elevated_threshold: float = 40.0
    fatigue_high_threshold: float = 70.0
    consecutive_high_sessions: int = 3
    fatigue_window_days: int = 7
    stress_per_set: float = 3.0
    trend_tolerance: float = 2.0

    # Technique annotation
    techniques_per_session: int = 1

    # Optional SQLite file for fatigue state persistence
    sqlite_path: Path | None = None

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
