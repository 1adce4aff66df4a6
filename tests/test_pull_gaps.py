"""Property-based tests for pull-gap analysis."""

import pytest
from hypothesis import given, strategies as st

from neko_companion.models import DrawRecord
from neko_companion.services.errors import BannerMismatchError
from neko_companion.services.pull_gaps import (
    average_featured_gap,
    average_gap,
    featured_gaps,
    gaps_for_quality,
    is_featured_pull,
)

EVENT = "character-event-wish"


def make_records(qualities: list[int], banner: str = EVENT, names: list[str] | None = None) -> list[DrawRecord]:
    """Records in pull order, index 0 = most recent (highest id)."""
    total = len(qualities)
    return [
        DrawRecord(
            id=total - index,
            player_id="100000001",
            name=names[index] if names else f"item-{index}",
            quality_level=quality,
            card_pool_type=banner,
            timestamp="2024-05-01 12:00:00",
        )
        for index, quality in enumerate(qualities)
    ]


qualities_strategy = st.lists(st.sampled_from([3, 4, 5]), max_size=200)


class TestGapProperties:
    """Gap arithmetic over arbitrary pull sequences."""

    @given(qualities=qualities_strategy, quality=st.sampled_from([3, 4, 5]))
    def test_one_gap_per_match_each_positive(self, qualities: list[int], quality: int) -> None:
        records = make_records(qualities)
        gaps = gaps_for_quality(records, quality)

        assert len(gaps) == qualities.count(quality)
        assert all(gap >= 1 for gap in gaps)
        assert sum(gaps) <= len(records)

    @given(qualities=qualities_strategy, quality=st.sampled_from([3, 4, 5]))
    def test_gaps_cover_sequence_from_most_recent_match(self, qualities: list[int], quality: int) -> None:
        """Gaps tile the sequence from the most recent match to the end."""
        records = make_records(qualities)
        gaps = gaps_for_quality(records, quality)

        if quality in qualities:
            assert sum(gaps) == len(records) - qualities.index(quality)
        else:
            assert gaps == []

    @given(qualities=qualities_strategy)
    def test_average_is_mean_of_gaps(self, qualities: list[int]) -> None:
        records = make_records(qualities)
        gaps = gaps_for_quality(records, 5)

        if gaps:
            assert average_gap(records, 5) == pytest.approx(sum(gaps) / len(gaps))
        else:
            assert average_gap(records, 5) == 0


class TestGapScenarios:
    """Worked examples."""

    def test_alternating_sequence(self) -> None:
        records = make_records([5, 3, 5, 3])

        assert gaps_for_quality(records, 5) == [2, 2]
        assert average_gap(records, 5) == 2.0

    def test_oldest_gap_runs_to_end(self) -> None:
        records = make_records([3, 5, 3, 3, 3])

        assert gaps_for_quality(records, 5) == [4]

    def test_no_matches_yields_zero_average(self) -> None:
        records = make_records([3, 3, 4])

        assert gaps_for_quality(records, 5) == []
        assert average_gap(records, 5) == 0

    def test_empty_sequence(self) -> None:
        assert gaps_for_quality([], 4) == []
        assert average_gap([], 4) == 0


class TestFeaturedGaps:
    """Featured 5-star gaps on the character event banner."""

    def test_standard_pool_pull_is_not_a_hit(self) -> None:
        # 0: featured, 1: 3-star, 2: standard-pool 5-star, 3: 3-star, 4: featured, 5: 3-star
        records = make_records(
            [5, 3, 5, 3, 5, 3],
            names=["Featured A", "x", "Standard", "x", "Featured B", "x"],
        )

        assert gaps_for_quality(records, 5) == [2, 2, 2]
        assert featured_gaps(records, {"Standard"}) == [4, 2]
        assert average_featured_gap(records, {"Standard"}) == 3.0

    def test_standard_pull_still_occupies_position(self) -> None:
        """Removing the standard pull from the sequence shortens the gap."""
        names = ["Featured A", "Standard", "Featured B"]
        kept = make_records([5, 5, 5], names=names)
        removed = make_records([5, 5], names=["Featured A", "Featured B"])

        assert featured_gaps(kept, {"Standard"}) == [2, 1]
        assert featured_gaps(removed, {"Standard"}) == [1, 1]

    def test_only_standard_pulls_yields_zero(self) -> None:
        records = make_records([5, 3, 5], names=["Standard", "x", "Standard"])

        assert featured_gaps(records, {"Standard"}) == []
        assert average_featured_gap(records, {"Standard"}) == 0

    def test_other_banner_is_rejected(self) -> None:
        records = make_records([5, 3], banner="weapon-event-wish")

        with pytest.raises(BannerMismatchError):
            featured_gaps(records)

    def test_mixed_banners_are_rejected(self) -> None:
        records = make_records([5, 3]) + make_records([5], banner="beginner-wish")

        with pytest.raises(BannerMismatchError):
            average_featured_gap(records)

    def test_mismatch_is_a_value_error(self) -> None:
        assert issubclass(BannerMismatchError, ValueError)

    @given(name=st.text(min_size=1, max_size=10), quality=st.sampled_from([3, 4, 5]))
    def test_is_featured_pull(self, name: str, quality: int) -> None:
        record = make_records([quality], names=[name])[0]

        assert is_featured_pull(record, {"Standard"}) == (quality == 5 and name != "Standard")
