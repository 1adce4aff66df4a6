"""Data models for the Neko Companion application."""

from .banners import BANNER_MAPPINGS, BANNER_ORDER, STANDARD_POOL_NAMES, BannerMapping, BannerType
from .config import AppConfig
from .records import QUALITY_LEVELS, TIMESTAMP_FORMAT, DrawRecord, GameSummary, SessionRecord, parse_timestamp
from .reports import (
    BannerReport,
    DailyDuration,
    GameTimeReport,
    LuckTier,
    PullDetailGroup,
    PullGap,
)
from .sync import RepoLocation, RepoPlatform, SyncAction, SyncResult

__all__ = [
    "AppConfig",
    "BANNER_MAPPINGS",
    "BANNER_ORDER",
    "BannerMapping",
    "BannerReport",
    "BannerType",
    "DailyDuration",
    "DrawRecord",
    "GameSummary",
    "GameTimeReport",
    "LuckTier",
    "PullDetailGroup",
    "PullGap",
    "QUALITY_LEVELS",
    "RepoLocation",
    "RepoPlatform",
    "STANDARD_POOL_NAMES",
    "SessionRecord",
    "SyncAction",
    "SyncResult",
    "TIMESTAMP_FORMAT",
    "parse_timestamp",
]
