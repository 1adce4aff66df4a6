"""Tests for report builders."""

from datetime import date

import pytest
from hypothesis import given, strategies as st

from neko_companion.models import BANNER_ORDER, DrawRecord, GameSummary, LuckTier, SessionRecord
from neko_companion.services.pull_gaps import average_featured_gap, average_gap
from neko_companion.services.reports import (
    build_banner_report,
    build_banner_reports,
    build_five_star_pulls,
    build_game_time_report,
    build_pull_details,
    format_hours,
    format_minutes,
    sort_games_by_time,
)

EVENT = "character-event-wish"


def make_records(rows: list[tuple[int, str, str]], banner: str = EVENT) -> list[DrawRecord]:
    """(quality, name, date) tuples in pull order, most recent first."""
    total = len(rows)
    return [
        DrawRecord(
            id=total - index,
            player_id="100000001",
            name=name,
            quality_level=quality,
            card_pool_type=banner,
            timestamp=f"{day} 12:00:00",
        )
        for index, (quality, name, day) in enumerate(rows)
    ]


def filler(count: int, day: str = "2024-05-01") -> list[tuple[int, str, str]]:
    return [(3, "Sword", day)] * count


class TestBannerReport:

    def test_empty_banner_has_no_tiers(self) -> None:
        report = build_banner_report(EVENT, [])

        assert report.total_pulls == 0
        assert report.five_star_pulls == []
        assert report.average_gap == 0
        assert report.average_tier is None
        assert report.four_star_tier is None
        assert report.featured_average == 0
        assert report.featured_tier is None

    def test_character_event_statistics(self) -> None:
        rows = [(5, "Featured", "2024-05-02")] + filler(39) + [(5, "Standard", "2024-05-01")] + filler(19)
        report = build_banner_report(EVENT, make_records(rows), {"Standard"})

        assert [pull.draws for pull in report.five_star_pulls] == [40, 20]
        assert report.average_gap == 30
        assert report.average_tier is LuckTier.GOOD
        assert report.featured_average == 60
        assert report.featured_tier is LuckTier.NORMAL
        assert report.four_star_tier is None

    def test_featured_statistics_only_on_character_event(self) -> None:
        report = build_banner_report("weapon-event-wish", make_records([(5, "Blade", "2024-05-01")], "weapon-event-wish"))

        assert report.featured_average is None
        assert report.featured_tier is None
        assert report.label == "Weapon Event"

    def test_five_star_progress_is_capped(self) -> None:
        pulls = build_five_star_pulls(make_records([(5, "Featured", "2024-05-01")] + filler(99)))

        assert pulls[0].draws == 100
        assert pulls[0].tier is LuckTier.POOR
        assert pulls[0].progress == 100.0

    def test_reports_follow_tab_order(self) -> None:
        records = make_records([(4, "Bow", "2024-05-01")], "beginner-wish") + make_records(filler(2))
        reports = build_banner_reports(records)

        assert [r.banner for r in reports] == list(BANNER_ORDER)
        beginner = next(r for r in reports if r.banner == "beginner-wish")
        assert beginner.four_star_average == 1
        assert beginner.four_star_tier is LuckTier.GOOD

    @given(st.lists(st.tuples(st.sampled_from([3, 4, 5]), st.sampled_from(["Featured", "Standard"])), max_size=60))
    def test_averages_match_the_analyzer(self, pulls: list[tuple[int, str]]) -> None:
        records = make_records([(quality, name, "2024-05-01") for quality, name in pulls])
        report = build_banner_report(EVENT, records, {"Standard"})

        assert report.average_gap == average_gap(records, 5)
        assert report.four_star_average == average_gap(records, 4)
        assert report.featured_average == average_featured_gap(records, {"Standard"})
        assert (report.average_tier is None) == (not report.five_star_pulls)
        assert (report.four_star_tier is None) == all(r.quality_level != 4 for r in records)
        assert (report.featured_tier is None) == all(
            r.quality_level != 5 or r.name == "Standard" for r in records
        )


class TestPullDetails:

    def test_groups_by_date_most_recent_first(self) -> None:
        rows = [
            (4, "Bow", "2024-05-03"),
            (3, "Sword", "2024-05-03"),
            (5, "Featured", "2024-05-02"),
            (3, "Sword", "2024-05-01"),
            (4, "Bow", "2024-05-01"),
        ]
        groups = build_pull_details(make_records(rows))

        assert [g.date for g in groups] == ["2024-05-03", "2024-05-02", "2024-05-01"]
        assert [len(g.entries) for g in groups] == [2, 1, 2]

    def test_gaps_span_the_whole_sequence(self) -> None:
        rows = [
            (4, "Bow", "2024-05-03"),
            (3, "Sword", "2024-05-02"),
            (3, "Sword", "2024-05-02"),
            (4, "Bow", "2024-05-01"),
        ]
        groups = build_pull_details(make_records(rows))

        latest = groups[0].entries[0]
        assert latest.draws == 3
        assert latest.tier is LuckTier.GOOD
        assert groups[1].entries[0].draws is None
        assert groups[1].entries[0].tier is None
        assert groups[2].entries[0].draws == 1


class TestGameTime:

    def test_game_time_report(self) -> None:
        game = GameSummary(id=1, name="Neko Quest", icon=None, total_time=36000)
        sessions = [
            SessionRecord(1, 1, "2024-05-14 08:00:00", "2024-05-14 09:00:00", 3600),
            SessionRecord(2, 1, "2024-05-10 08:00:00", "2024-05-10 08:30:00", 1800),
        ]
        report = build_game_time_report(game, sessions, 14, date(2024, 5, 14))

        assert report.total_seconds == 36000
        assert report.average_daily_seconds == 2700
        assert len(report.daily) == 14
        assert report.daily[-1].seconds == 3600
        assert report.sessions == sessions

    def test_sort_games_by_time(self) -> None:
        games = [
            GameSummary(1, "A", None, 10),
            GameSummary(2, "B", None, 300),
            GameSummary(3, "C", None, 0),
        ]

        assert [g.name for g in sort_games_by_time(games)] == ["B", "A", "C"]

    @pytest.mark.parametrize(("seconds", "expected"), [(0, "0.00"), (5400, "1.50"), (3599, "1.00")])
    def test_format_hours(self, seconds: int, expected: str) -> None:
        assert format_hours(seconds) == expected

    @pytest.mark.parametrize(("seconds", "expected"), [(0, "0.00"), (90, "1.50"), (5400, "90.00")])
    def test_format_minutes(self, seconds: int, expected: str) -> None:
        assert format_minutes(seconds) == expected
