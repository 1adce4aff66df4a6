"""Main menu screen for the TUI application."""

from typing import ClassVar

from typing_extensions import override

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, Vertical
from textual.widgets import Button, Static

import structlog

from .base import BaseScreen

log = structlog.stdlib.get_logger()


class MainMenuScreen(BaseScreen):
    """Entry screen linking to every section of the application."""

    SCREEN_TITLE: ClassVar[str] = "Main Menu"
    SCREEN_NAME: ClassVar[str] = "main_menu"

    CSS: ClassVar[str] = """
    MainMenuScreen {
        align: center middle;
    }

    #menu-container {
        width: 60;
        height: auto;
        padding: 2 4;
        border: solid $primary;
        background: $surface;
    }

    #menu-title {
        text-align: center;
        text-style: bold;
        color: $primary;
        margin-bottom: 1;
    }

    #menu-subtitle {
        text-align: center;
        color: $text-muted;
        margin-bottom: 2;
    }

    .menu-button {
        width: 100%;
        margin-bottom: 1;
    }
    """

    BINDINGS: ClassVar[list[Binding]] = [
        Binding("1", "navigate('gacha')", "Pull History", show=False),
        Binding("2", "navigate('game_time')", "Play Time", show=False),
        Binding("3", "navigate('sync')", "Sync", show=False),
        Binding("4", "navigate('settings')", "Settings", show=False),
    ]

    # (option id, button label, target screen)
    MENU_OPTIONS: ClassVar[list[tuple[str, str, str]]] = [
        ("gacha", "1. Pull History", "gacha"),
        ("game_time", "2. Play Time", "game_time"),
        ("sync", "3. Sync Data", "sync"),
        ("settings", "4. Settings", "settings"),
    ]

    @override
    def compose(self) -> ComposeResult:
        with Container(id="menu-container"):
            yield Static("🐾 Neko Companion", id="menu-title")
            yield Static("Pull history and play time from your synced data", id="menu-subtitle")

            with Vertical(id="menu-buttons"):
                for option_id, label, _ in self.MENU_OPTIONS:
                    yield Button(label, id=f"btn-{option_id}", classes="menu-button")

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id
        if not button_id:
            return

        option = button_id.removeprefix("btn-")
        for opt_id, _, target in self.MENU_OPTIONS:
            if opt_id == option:
                log.info("Menu option selected", option=option, target=target)
                await self.action_navigate(target)
                return

        log.warning("Unknown menu option", button_id=button_id)

    async def action_navigate(self, screen_name: str) -> None:
        """Open a section by its registered screen name."""
        await self.companion_app.push_screen_with_tracking(screen_name)

    @override
    async def action_go_back(self) -> None:
        """Back from the main menu quits the application."""
        log.info("Quit requested from main menu")
        self.companion_app.exit()
