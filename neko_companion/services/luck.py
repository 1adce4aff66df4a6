"""Luck tier classification for gaps and averages."""

from ..models.reports import LuckTier

# Upper bounds (inclusive) for GOOD and NORMAL, per quality level
GAP_THRESHOLDS: dict[int, tuple[int, int]] = {
    5: (35, 67),
    4: (3, 7),
}

# (low, high) pairs for averaged statistics
AVERAGE_GAP_THRESHOLDS: tuple[float, float] = (45, 65)
FEATURED_GAP_THRESHOLDS: tuple[float, float] = (55, 83)


def tier_for_gap(value: float, quality: int) -> LuckTier:
    """Classify a single gap (or a per-quality average) for 4 and 5 stars.

    Raises:
        ValueError: If the quality level has no thresholds
    """
    thresholds = GAP_THRESHOLDS.get(quality)
    if thresholds is None:
        raise ValueError(f"No luck thresholds for quality level {quality}")

    good, normal = thresholds
    if value <= good:
        return LuckTier.GOOD
    if value <= normal:
        return LuckTier.NORMAL
    return LuckTier.POOR


def tier_for_average(value: float, low: float, high: float) -> LuckTier:
    """Classify an averaged statistic against caller-supplied thresholds.

    Note the lower bound is exclusive here, unlike tier_for_gap.
    """
    if value < low:
        return LuckTier.GOOD
    if value <= high:
        return LuckTier.NORMAL
    return LuckTier.POOR
