"""Analysis result data models."""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from .records import DrawRecord, GameSummary, SessionRecord


class LuckTier(Enum):
    """Severity band for a gap or an average."""
    GOOD = "good"
    NORMAL = "normal"
    POOR = "poor"


@dataclass(frozen=True)
class PullGap:
    """A pull together with the number of draws it took."""
    record: DrawRecord
    draws: int | None  # None for 3-star pulls, which are not measured
    tier: LuckTier | None
    progress: float = 0.0  # 0-100, scaled to the 80-draw bar


@dataclass(frozen=True)
class PullDetailGroup:
    """All pulls of one banner made on one calendar date."""
    date: str
    entries: list[PullGap] = field(default_factory=list)


@dataclass(frozen=True)
class BannerReport:
    """Pull statistics for one (player, banner) pair."""
    banner: str
    label: str
    total_pulls: int
    five_star_pulls: list[PullGap]
    average_gap: float
    average_tier: LuckTier | None
    four_star_average: float
    four_star_tier: LuckTier | None
    featured_average: float | None = None  # Character event banner only
    featured_tier: LuckTier | None = None


@dataclass(frozen=True)
class DailyDuration:
    """Total seconds played on one calendar date."""
    date: date
    seconds: int


@dataclass(frozen=True)
class GameTimeReport:
    """Playtime statistics for one title."""
    game: GameSummary
    total_seconds: int
    average_daily_seconds: float
    daily: list[DailyDuration]
    sessions: list[SessionRecord]
