"""Centralized configuration using pydantic-settings.

All configuration values are loaded from environment variables with sensible defaults.
Environment variables can be set in .env file or directly in the environment.

Usage:
    from live_football.config import get_settings
    settings = get_settings()
    print(settings.proxy_url)
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEMO_TOKEN = "DEMO_MODE"


def _get_default_home() -> Path:
    """Get the per-user directory for state and logs."""
    return Path.home() / ".live_football"


class ReconciliationStrategy(str, Enum):
    """How the main betting line is picked out of an odds history."""

    FREQUENCY_POINTS = "frequency_points"  # most frequent handicap in the last N quotes
    FREQUENCY_MINUTES = "frequency_minutes"  # most frequent handicap in the last N minutes
    LATEST = "latest"  # chronologically last quote
    MAX_MINUTE = "max_minute"  # quote with the highest minute


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore extra env vars
    )

    # ==========================================================================
    # Database
    # ==========================================================================
    database_url: str = Field(
        default_factory=lambda: f"sqlite:///{_get_default_home() / 'data' / 'live_football.db'}",
        description="SQLAlchemy database URL"
    )

    # ==========================================================================
    # Odds API
    # ==========================================================================
    b365_token: Optional[str] = Field(
        default=None,
        description="b365api.com token; DEMO_MODE disables network access"
    )
    proxy_url: str = Field(
        default="https://muddy-wave-d0bc.phanvietlinh-0b1.workers.dev/",
        description="Caching proxy; the upstream URL is passed as ?target="
    )
    inplay_url: str = Field(
        default="https://api.b365api.com/v3/events/inplay",
        description="Upstream in-play events endpoint"
    )
    odds_url: str = Field(
        default="https://api.b365api.com/v2/event/odds",
        description="Upstream event odds endpoint"
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        description="HTTP timeout for upstream calls"
    )

    # ==========================================================================
    # Rate Limiting
    # ==========================================================================
    min_api_call_interval_seconds: float = Field(
        default=45.0,
        description="Minimum spacing between two upstream calls"
    )
    max_retries: int = Field(
        default=3,
        description="Retries after a 429 response"
    )
    initial_retry_delay_seconds: float = Field(
        default=2.0,
        description="First backoff delay after a 429, doubled on each retry"
    )

    # ==========================================================================
    # Polling
    # ==========================================================================
    poll_interval_seconds: float = Field(
        default=45.0,
        description="Delay between two monitor cycles"
    )
    history_retention_minutes: int = Field(
        default=90,
        description="Odds quotes older than this (from the latest quote) are dropped"
    )

    # ==========================================================================
    # Main Line Reconciliation
    # ==========================================================================
    reconciliation_strategy: ReconciliationStrategy = Field(
        default=ReconciliationStrategy.FREQUENCY_POINTS,
        description="Main line heuristic"
    )
    reconciliation_window_points: int = Field(
        default=15,
        description="Quote window for the frequency_points strategy"
    )
    reconciliation_window_minutes: int = Field(
        default=7,
        description="Minute window for the frequency_minutes strategy"
    )

    # ==========================================================================
    # Pressure Scoring
    # ==========================================================================
    score_weight_on_target: float = Field(default=3.0)
    score_weight_off_target: float = Field(default=1.0)
    score_weight_corners: float = Field(default=0.7)
    score_weight_dangerous_attacks: float = Field(default=0.1)
    tension_window: int = Field(
        default=5,
        description="Number of trailing minutes summed into the tension level"
    )
    tension_scale: float = Field(
        default=2.0,
        description="Multiplier applied to the summed absolute gap"
    )
    tension_floor: float = Field(default=10.0)
    tension_ceiling: float = Field(default=100.0)
    tension_default: float = Field(
        default=20.0,
        description="Tension reported before the window is full"
    )
    highlight_gap_threshold: float = Field(
        default=5.0,
        description="Absolute API gap that opens a highlight band"
    )

    # ==========================================================================
    # AI Insight
    # ==========================================================================
    gemini_api_key: Optional[str] = Field(
        default=None,
        description="Google Generative Language API key"
    )
    gemini_model: str = Field(default="gemini-3-flash-preview")
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta"
    )
    gemini_timeout_seconds: float = Field(default=60.0)

    # ==========================================================================
    # Notifications
    # ==========================================================================
    sheet_webhook_url: Optional[str] = Field(
        default=None,
        description="Spreadsheet webhook receiving exported tickets"
    )

    # ==========================================================================
    # Paths
    # ==========================================================================
    data_dir: Path = Field(
        default_factory=lambda: _get_default_home() / "data",
        description="Directory for the database and exports"
    )
    logs_dir: Path = Field(
        default_factory=lambda: _get_default_home() / "logs",
        description="Directory for log files"
    )

    # ==========================================================================
    # Logging
    # ==========================================================================
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )
    log_to_file: bool = Field(
        default=True,
        description="Whether to write logs to file"
    )

    # ==========================================================================
    # Validators
    # ==========================================================================
    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return v_upper

    @field_validator(
        "min_api_call_interval_seconds",
        "initial_retry_delay_seconds",
        "poll_interval_seconds",
    )
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("intervals must not be negative")
        return v

    @field_validator(
        "reconciliation_window_points",
        "reconciliation_window_minutes",
        "tension_window",
        "history_retention_minutes",
    )
    @classmethod
    def validate_window(cls, v: int) -> int:
        if v < 1:
            raise ValueError("window sizes must be at least 1")
        return v

    @field_validator("max_retries")
    @classmethod
    def validate_retries(cls, v: int) -> int:
        if v < 0:
            raise ValueError("max_retries must not be negative")
        return v

    # ==========================================================================
    # Computed Properties
    # ==========================================================================
    @property
    def db_path(self) -> Optional[Path]:
        """SQLite database file, None for other backends or in-memory databases."""
        if self.database_url.startswith("sqlite:///") and ":memory:" not in self.database_url:
            return Path(self.database_url.replace("sqlite:///", ""))
        return None

    @property
    def demo_mode(self) -> bool:
        """True when no live token is configured."""
        return not self.b365_token or self.b365_token == DEMO_TOKEN

    def ensure_directories(self) -> None:
        """Create all required directories if they don't exist."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.logs_dir.mkdir(parents=True, exist_ok=True)
        if self.db_path is not None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are loaded once and cached for performance.
    Call get_settings.cache_clear() to reload.
    """
    settings = Settings()
    settings.ensure_directories()
    return settings
