"""Record data models read from the synced databases."""

from dataclasses import dataclass
from datetime import date, datetime


TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

# Valid rarity tiers for a pull (5 = rarest)
QUALITY_LEVELS: frozenset[int] = frozenset({3, 4, 5})


def parse_timestamp(value: str) -> datetime:
    """Parse a ``YYYY-MM-DD HH:MM:SS`` timestamp string."""
    return datetime.strptime(value, TIMESTAMP_FORMAT)


@dataclass(frozen=True)
class DrawRecord:
    """A single gacha pull."""
    id: int
    player_id: str
    name: str
    quality_level: int
    card_pool_type: str  # Banner identifier, or the raw name for unknown banners
    timestamp: str

    @property
    def pull_date(self) -> str:
        """Calendar date part of the pull timestamp."""
        return self.timestamp.split(" ")[0]


@dataclass(frozen=True)
class SessionRecord:
    """A single play session of one title."""
    id: int
    game_id: int
    start_time: str
    end_time: str | None  # None while the session is still open
    duration: int  # Seconds

    @property
    def start_date(self) -> date:
        """Calendar date the session started on."""
        return parse_timestamp(self.start_time).date()

    @property
    def is_open(self) -> bool:
        return self.end_time is None


@dataclass(frozen=True)
class GameSummary:
    """Aggregate playtime for one title."""
    id: int
    name: str
    icon: str | None
    total_time: int  # Seconds, summed over all sessions
