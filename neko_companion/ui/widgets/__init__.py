"""Custom widgets for the TUI application."""

from .luck import (
    AverageBlock,
    PullGapRow,
    format_average,
    tier_class,
)

__all__ = [
    "AverageBlock",
    "PullGapRow",
    "format_average",
    "tier_class",
]
