"""Pull-gap analysis: draws between consecutive pulls of the same quality.

All functions take one banner's records in pull order with index 0 being the
most recent pull (descending id order, as read from storage). Gaps are
measured in positions of that full sequence, never in time.
"""

from collections.abc import Callable, Collection, Sequence

from ..models.banners import STANDARD_POOL_NAMES, BannerType
from ..models.records import DrawRecord
from .errors import BannerMismatchError


def _hit_positions(records: Sequence[DrawRecord], is_hit: Callable[[DrawRecord], bool]) -> list[int]:
    return [index for index, record in enumerate(records) if is_hit(record)]


def _gaps_between(positions: list[int], total: int) -> list[int]:
    """Distances from each hit to the next older hit.

    The oldest hit has no older hit to measure against, so its gap runs to
    the end of the sequence.
    """
    boundaries = positions[1:] + [total]
    return [boundary - position for position, boundary in zip(positions, boundaries)]


def _mean(values: list[int]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)


def gaps_for_quality(records: Sequence[DrawRecord], quality: int) -> list[int]:
    """Gap for every pull of the given quality, most recent first.

    Args:
        records: One banner's records, index 0 = most recent
        quality: Quality level to measure (3, 4 or 5)

    Returns:
        One gap per matching record, in sequence order
    """
    positions = _hit_positions(records, lambda r: r.quality_level == quality)
    return _gaps_between(positions, len(records))


def average_gap(records: Sequence[DrawRecord], quality: int) -> float:
    """Mean gap for a quality level.

    Returns 0 when no record of that quality exists. This is a placeholder,
    not a real average; callers must not read it as "zero draws needed".
    """
    return _mean(gaps_for_quality(records, quality))


def is_featured_pull(record: DrawRecord, standard_pool_names: Collection[str] = STANDARD_POOL_NAMES) -> bool:
    """Whether a record is a featured 5-star from the character event banner."""
    return (
        record.quality_level == 5
        and record.card_pool_type == BannerType.CHARACTER_EVENT.value
        and record.name not in standard_pool_names
    )


def featured_gaps(
    records: Sequence[DrawRecord],
    standard_pool_names: Collection[str] = STANDARD_POOL_NAMES,
) -> list[int]:
    """Gaps between featured 5-star pulls on the character event banner.

    A standard-pool 5-star is not a hit, but it still occupies its position,
    so the draws it consumed count toward the next featured pull.

    Raises:
        BannerMismatchError: If any record belongs to another banner
    """
    for record in records:
        if record.card_pool_type != BannerType.CHARACTER_EVENT.value:
            raise BannerMismatchError(
                f"Featured gaps only apply to the {BannerType.CHARACTER_EVENT.value} banner, "
                f"got a record from {record.card_pool_type!r} (id {record.id})"
            )

    positions = _hit_positions(records, lambda r: is_featured_pull(r, standard_pool_names))
    return _gaps_between(positions, len(records))


def average_featured_gap(
    records: Sequence[DrawRecord],
    standard_pool_names: Collection[str] = STANDARD_POOL_NAMES,
) -> float:
    """Mean gap between featured pulls; 0 when there are none."""
    return _mean(featured_gaps(records, standard_pool_names))
