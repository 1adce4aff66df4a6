"""Screen components for the TUI application."""

from .base import BaseScreen
from .gacha import GachaScreen
from .game_time import GameTimeScreen
from .main_menu import MainMenuScreen
from .settings import SettingsScreen
from .sync import SyncScreen

# Screen registry for navigation
_SCREEN_REGISTRY: dict[str, type[BaseScreen]] = {
    "main_menu": MainMenuScreen,
    "gacha": GachaScreen,
    "game_time": GameTimeScreen,
    "sync": SyncScreen,
    "settings": SettingsScreen,
}


def get_screen_by_name(name: str) -> BaseScreen | None:
    """Get a new instance of the screen registered under a name, or None."""
    screen_class = _SCREEN_REGISTRY.get(name)
    if screen_class:
        return screen_class()
    return None


def register_screen(name: str, screen_class: type[BaseScreen]) -> None:
    """Register a screen class with a name for navigation."""
    _SCREEN_REGISTRY[name] = screen_class


def get_registered_screens() -> list[str]:
    return list(_SCREEN_REGISTRY.keys())


__all__ = [
    "BaseScreen",
    "GachaScreen",
    "GameTimeScreen",
    "MainMenuScreen",
    "SettingsScreen",
    "SyncScreen",
    "get_registered_screens",
    "get_screen_by_name",
    "register_screen",
]
