"""Configuration data models."""

from dataclasses import dataclass
from pathlib import Path

from .banners import STANDARD_POOL_NAMES


@dataclass(frozen=True)
class AppConfig:
    """Application configuration settings."""
    repo_url: str
    token: str
    data_directory: Path
    request_delay: float
    log_level: str
    utc_offset_hours: int = 8
    session_window_days: int = 14
    session_lookback_months: int = 6
    standard_pool_names: tuple[str, ...] = STANDARD_POOL_NAMES
    sync_tolerance_seconds: float = 60.0
    game_data_updated: str | None = None  # Last remote commit time of neko_game.db
    gacha_data_updated: str | None = None  # Last remote commit time of gacha_data.db
