"""Service layer: analysis, storage, sync and application plumbing."""

from .banners import banner_label, classify, is_known_banner, normalize_banner_name
from .config import ConfigurationService, ValidationResult
from .errors import (
    AppError,
    BannerMismatchError,
    ConfigurationError,
    DataIntegrityError,
    ErrorCategory,
    ErrorHandlingService,
    ErrorSeverity,
    FileSystemError,
    NetworkError,
    StorageError,
    SyncError,
    UserFriendlyError,
    ValidationError,
    get_error_service,
    handle_error,
)
from .filesystem import FileSystemService
from .http_client import HttpClientService
from .luck import tier_for_average, tier_for_gap
from .pull_gaps import average_featured_gap, average_gap, featured_gaps, gaps_for_quality
from .repo_sync import RepoSyncService, decide_sync_action, parse_repo_url
from .reports import build_banner_reports, build_game_time_report, build_pull_details, format_hours
from .sessions import average_daily_play_seconds, daily_durations, total_time
from .storage import RecordStoreService, session_since_date

__all__ = [
    "AppError",
    "BannerMismatchError",
    "ConfigurationError",
    "ConfigurationService",
    "DataIntegrityError",
    "ErrorCategory",
    "ErrorHandlingService",
    "ErrorSeverity",
    "FileSystemError",
    "FileSystemService",
    "HttpClientService",
    "NetworkError",
    "RecordStoreService",
    "RepoSyncService",
    "StorageError",
    "SyncError",
    "UserFriendlyError",
    "ValidationError",
    "ValidationResult",
    "average_daily_play_seconds",
    "average_featured_gap",
    "average_gap",
    "banner_label",
    "build_banner_reports",
    "build_game_time_report",
    "build_pull_details",
    "classify",
    "daily_durations",
    "decide_sync_action",
    "featured_gaps",
    "format_hours",
    "gaps_for_quality",
    "get_error_service",
    "handle_error",
    "is_known_banner",
    "normalize_banner_name",
    "parse_repo_url",
    "session_since_date",
    "tier_for_average",
    "tier_for_gap",
    "total_time",
]
