"""Report builders combining classification, gap analysis and luck tiers.

These are the objects the UI and the text report render. Building a report
does no I/O; records must already be loaded and validated.
"""

from collections.abc import Collection, Sequence
from datetime import date

import structlog

from ..models.banners import STANDARD_POOL_NAMES, BannerType
from ..models.records import DrawRecord, GameSummary, SessionRecord
from ..models.reports import BannerReport, GameTimeReport, PullDetailGroup, PullGap
from .banners import banner_label, classify
from .luck import AVERAGE_GAP_THRESHOLDS, FEATURED_GAP_THRESHOLDS, tier_for_average, tier_for_gap
from .pull_gaps import average_featured_gap, average_gap, gaps_for_quality
from .sessions import DEFAULT_UTC_OFFSET_HOURS, DEFAULT_WINDOW_DAYS, average_daily_play_seconds, daily_durations

log = structlog.stdlib.get_logger()

# Draw count that fills a pull bar
PITY_BAR_DRAWS = 80


def format_hours(seconds: float) -> str:
    """Render seconds as hours with two decimals."""
    return f"{seconds / 3600:.2f}"


def format_minutes(seconds: float) -> str:
    """Render seconds as minutes with two decimals, as session lists show them."""
    return f"{seconds / 60:.2f}"


def _progress(draws: int) -> float:
    return min(draws / PITY_BAR_DRAWS * 100, 100.0)


def build_five_star_pulls(records: Sequence[DrawRecord]) -> list[PullGap]:
    """Every 5-star pull of one banner with the draws it took, most recent first."""
    hits = [record for record in records if record.quality_level == 5]
    gaps = gaps_for_quality(records, 5)
    return [
        PullGap(record=record, draws=draws, tier=tier_for_gap(draws, 5), progress=_progress(draws))
        for record, draws in zip(hits, gaps)
    ]


def build_banner_report(
    banner: str,
    records: Sequence[DrawRecord],
    standard_pool_names: Collection[str] = STANDARD_POOL_NAMES,
) -> BannerReport:
    """Statistics for one banner's records."""
    five_star_pulls = build_five_star_pulls(records)
    average = average_gap(records, 5)
    four_star_average = average_gap(records, 4)

    featured_average: float | None = None
    featured_tier = None
    if banner == BannerType.CHARACTER_EVENT.value:
        featured_average = average_featured_gap(records, standard_pool_names)
        # Gaps are at least 1, so 0 only means no featured pull
        if featured_average:
            featured_tier = tier_for_average(featured_average, *FEATURED_GAP_THRESHOLDS)

    return BannerReport(
        banner=banner,
        label=banner_label(banner),
        total_pulls=len(records),
        five_star_pulls=five_star_pulls,
        average_gap=average,
        average_tier=tier_for_average(average, *AVERAGE_GAP_THRESHOLDS) if average else None,
        four_star_average=four_star_average,
        four_star_tier=tier_for_gap(four_star_average, 4) if four_star_average else None,
        featured_average=featured_average,
        featured_tier=featured_tier,
    )


def build_banner_reports(
    records: Sequence[DrawRecord],
    standard_pool_names: Collection[str] = STANDARD_POOL_NAMES,
) -> list[BannerReport]:
    """One report per banner of a player's full draw history, in tab order."""
    reports = [
        build_banner_report(banner, banner_records, standard_pool_names)
        for banner, banner_records in classify(records).items()
    ]
    log.debug("Banner reports built", records=len(records), banners=len(reports))
    return reports


def build_pull_details(records: Sequence[DrawRecord]) -> list[PullDetailGroup]:
    """Group one banner's pulls by date, most recent date first.

    4 and 5-star pulls carry their gap measured in the whole banner sequence,
    so a streak spanning several days is counted in full.
    """
    gap_at: dict[int, int] = {}
    for quality in (4, 5):
        positions = [i for i, r in enumerate(records) if r.quality_level == quality]
        gap_at.update(zip(positions, gaps_for_quality(records, quality)))

    groups: dict[str, list[PullGap]] = {}
    for index, record in enumerate(records):
        draws = gap_at.get(index)
        if draws is None:
            entry = PullGap(record=record, draws=None, tier=None)
        else:
            entry = PullGap(
                record=record,
                draws=draws,
                tier=tier_for_gap(draws, record.quality_level),
                progress=_progress(draws),
            )
        groups.setdefault(record.pull_date, []).append(entry)

    return [PullDetailGroup(date=day, entries=entries) for day, entries in groups.items()]


def build_game_time_report(
    game: GameSummary,
    sessions: Sequence[SessionRecord],
    window_days: int = DEFAULT_WINDOW_DAYS,
    reference_date: date | None = None,
    utc_offset_hours: int = DEFAULT_UTC_OFFSET_HOURS,
) -> GameTimeReport:
    """Playtime statistics for one title.

    Args:
        game: Summary with the all-time total
        sessions: Recent sessions of the title
        window_days: Length of the daily chart
        reference_date: Last day of the chart (defaults to local today)
        utc_offset_hours: Offset used to find today
    """
    return GameTimeReport(
        game=game,
        total_seconds=game.total_time,
        average_daily_seconds=average_daily_play_seconds(sessions),
        daily=daily_durations(sessions, window_days, reference_date, utc_offset_hours),
        sessions=list(sessions),
    )


def sort_games_by_time(games: Sequence[GameSummary]) -> list[GameSummary]:
    """Games with the most playtime first."""
    return sorted(games, key=lambda g: g.total_time, reverse=True)
