"""Repository sync data models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class RepoPlatform(Enum):
    """Supported git hosting platforms."""
    GITHUB = "github"
    GITEE = "gitee"


class SyncAction(Enum):
    """What a sync pass did with one file."""
    DOWNLOADED = "downloaded"
    UP_TO_DATE = "up_to_date"
    LOCAL_NEWER = "local_newer"
    MISSING_REMOTE = "missing_remote"


@dataclass(frozen=True)
class RepoLocation:
    """Owner and name of a hosted repository."""
    owner: str
    repo: str
    platform: RepoPlatform


@dataclass(frozen=True)
class SyncResult:
    """Outcome of syncing a single database file."""
    file_name: str
    action: SyncAction
    remote_updated: datetime | None = None  # Timezone-aware commit time
