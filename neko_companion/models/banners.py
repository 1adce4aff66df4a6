"""Banner (card pool) definitions."""

from dataclasses import dataclass
from enum import Enum


class BannerType(Enum):
    """Banner categories, in tab order."""
    CHARACTER_EVENT = "character-event-wish"
    WEAPON_EVENT = "weapon-event-wish"
    CHARACTER_STANDARD = "character-standard-wish"
    WEAPON_STANDARD = "weapon-standard-wish"
    BEGINNER = "beginner-wish"
    BEGINNER_CHOICE = "beginner-choice-wish"
    GRATITUDE = "gratitude-wish"


@dataclass(frozen=True)
class BannerMapping:
    """Mapping between a banner identifier and its in-game name."""

    banner: BannerType
    localized_name: str
    label: str


BANNER_MAPPINGS: tuple[BannerMapping, ...] = (
    BannerMapping(BannerType.CHARACTER_EVENT, "角色活动唤取", "Character Event"),
    BannerMapping(BannerType.WEAPON_EVENT, "武器活动唤取", "Weapon Event"),
    BannerMapping(BannerType.CHARACTER_STANDARD, "角色常驻唤取", "Character Standard"),
    BannerMapping(BannerType.WEAPON_STANDARD, "武器常驻唤取", "Weapon Standard"),
    BannerMapping(BannerType.BEGINNER, "新手唤取", "Beginner"),
    BannerMapping(BannerType.BEGINNER_CHOICE, "新手自选唤取", "Beginner Choice"),
    BannerMapping(BannerType.GRATITUDE, "感恩定向唤取", "Gratitude"),
)

BANNER_ORDER: tuple[str, ...] = tuple(m.banner.value for m in BANNER_MAPPINGS)

# Characters that can drop from the character event banner without being the
# featured (rate-up) item. Updated with game content, not by users.
STANDARD_POOL_NAMES: tuple[str, ...] = ("安可", "卡卡罗", "凌阳", "鉴心", "维里奈")
