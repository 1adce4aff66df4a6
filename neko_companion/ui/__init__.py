"""User interface components using Textual framework."""

from .app import AppState, NekoCompanionApp
from .screens import (
    BaseScreen,
    MainMenuScreen,
    get_registered_screens,
    get_screen_by_name,
    register_screen,
)

__all__ = [
    "AppState",
    "BaseScreen",
    "MainMenuScreen",
    "NekoCompanionApp",
    "get_registered_screens",
    "get_screen_by_name",
    "register_screen",
]
