"""Banner classification for draw histories.

Draw records arrive from the gacha database with the in-game (localized)
banner name. They are normalized to stable banner identifiers when read and
partitioned here into one ordered sequence per banner.
"""

from collections.abc import Sequence

import structlog

from ..models.banners import BANNER_MAPPINGS, BANNER_ORDER, BannerMapping
from ..models.records import DrawRecord

log = structlog.stdlib.get_logger()

_BY_LOCALIZED_NAME: dict[str, BannerMapping] = {m.localized_name: m for m in BANNER_MAPPINGS}
_BY_IDENTIFIER: dict[str, BannerMapping] = {m.banner.value: m for m in BANNER_MAPPINGS}


def normalize_banner_name(name: str) -> str:
    """Return the stable identifier for a banner name.

    Localized names and identifiers both map to the identifier. Unknown
    names are returned unchanged so their records are never lost.
    """
    mapping = _BY_LOCALIZED_NAME.get(name) or _BY_IDENTIFIER.get(name)
    if mapping:
        return mapping.banner.value
    return name


def banner_label(banner: str) -> str:
    """Human-readable label for a banner identifier."""
    mapping = _BY_IDENTIFIER.get(banner)
    if mapping:
        return mapping.label
    return banner


def is_known_banner(banner: str) -> bool:
    return banner in _BY_IDENTIFIER


def classify(records: Sequence[DrawRecord]) -> dict[str, list[DrawRecord]]:
    """Partition a draw history by banner, keeping relative order.

    Every known banner is present in the result, in tab order, even when it
    has no records. Unknown banners follow in the order they first appear.

    Args:
        records: A player's draw history in pull order

    Returns:
        Mapping of banner identifier to that banner's records
    """
    groups: dict[str, list[DrawRecord]] = {banner: [] for banner in BANNER_ORDER}

    for record in records:
        groups.setdefault(record.card_pool_type, []).append(record)

    unknown = [banner for banner in groups if not is_known_banner(banner)]
    if unknown:
        log.warning("Unknown banner types in draw history", banners=unknown)

    return groups
