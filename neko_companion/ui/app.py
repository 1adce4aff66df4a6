"""Main Textual application with screen management and reactive state."""

from dataclasses import dataclass, field, replace
from typing import Any, ClassVar

from typing_extensions import override

from textual.app import App, ComposeResult
from textual.binding import Binding, BindingType
from textual.reactive import reactive
from textual.widgets import Footer, Header

import structlog

from neko_companion.models import AppConfig, DrawRecord, SyncResult
from neko_companion.services.config import ConfigurationService
from neko_companion.services.storage import RecordStoreService


log = structlog.stdlib.get_logger()


@dataclass
class AppState:
    """Application state shared between screens."""

    current_config: AppConfig | None = None
    player_id: str | None = None
    draw_history: list[DrawRecord] = field(default_factory=list)
    sync_active: bool = False
    last_sync: list[SyncResult] = field(default_factory=list)


class NekoCompanionApp(App[None]):
    """Root Textual application for browsing pull history and playtime.

    Screens are pushed by registered name and tracked in a navigation stack
    so escape always returns to the screen that opened the current one.
    """

    CSS: ClassVar[str] = """
    Screen {
        background: $surface;
    }

    .title {
        text-align: center;
        text-style: bold;
        color: $primary;
        margin-bottom: 1;
    }
    """

    BINDINGS: ClassVar[list[BindingType]] = [
        Binding("q", "quit", "Quit", show=True, priority=True),
        Binding("escape", "go_back", "Back", show=True),
        Binding("?", "show_help", "Help", show=True),
    ]

    app_state: reactive[AppState] = reactive(AppState, init=False)

    _config_service: ConfigurationService | None
    _navigation_stack: list[str]
    _app_context: Any  # ApplicationContext from neko_companion.main (avoid circular import)

    def __init__(self, config_service: ConfigurationService | None = None) -> None:
        super().__init__()
        self.title = "Neko Companion"  # type: ignore[assignment]
        self.sub_title = "Pull history & play time"  # type: ignore[assignment]
        self._config_service = config_service
        self._navigation_stack = []
        self._app_context = None
        self.app_state = AppState()

        log.info("NekoCompanionApp initialized")

    @property
    def app_context(self) -> Any:
        return self._app_context

    def set_app_context(self, context: Any) -> None:
        self._app_context = context

    @property
    def config_service(self) -> ConfigurationService | None:
        return self._config_service

    @property
    def config(self) -> AppConfig:
        """Current configuration, loading defaults if nothing was loaded yet."""
        if self.app_state.current_config is None:
            service = self._config_service or ConfigurationService()
            self.update_state(current_config=service.load_config())
        assert self.app_state.current_config is not None
        return self.app_state.current_config

    @property
    def record_store(self) -> RecordStoreService:
        """Record store for the configured data directory."""
        if self._app_context is not None:
            return self._app_context.record_store
        return RecordStoreService(self.config.data_directory)

    @property
    def navigation_stack(self) -> list[str]:
        return self._navigation_stack.copy()

    @override
    def compose(self) -> ComposeResult:
        yield Header()
        yield Footer()

    async def on_mount(self) -> None:
        """Load configuration and open the main menu."""
        if self._config_service:
            config = self._config_service.load_config()
            self.update_state(current_config=config)
            log.info("Configuration loaded", data_directory=str(config.data_directory))

        await self.push_screen_with_tracking("main_menu")

    async def push_screen_with_tracking(self, screen_name: str) -> None:
        """Push a registered screen and track it in the navigation stack."""
        from neko_companion.ui.screens import get_screen_by_name

        screen = get_screen_by_name(screen_name)
        if screen:
            self._navigation_stack.append(screen_name)
            await self.push_screen(screen)
            log.info("Screen pushed", screen=screen_name, stack_depth=len(self._navigation_stack))
        else:
            log.warning("Unknown screen requested", screen=screen_name)

    async def action_go_back(self) -> None:
        """Navigate back to the previous screen."""
        if len(self._navigation_stack) > 1:
            current = self._navigation_stack.pop()
            log.info("Navigating back", from_screen=current, stack_depth=len(self._navigation_stack))
            _ = self.pop_screen()
        else:
            log.debug("Already at root screen, cannot go back")

    async def action_show_help(self) -> None:
        self.notify("1-4 open a section from the menu, escape goes back, q quits")

    def update_state(self, **changes: Any) -> None:
        """Replace the application state with some fields changed."""
        self.app_state = replace(self.app_state, **changes)
        log.debug("Application state updated", fields=sorted(changes))

    def apply_config(self, config: AppConfig) -> None:
        """Adopt a newly saved configuration.

        Services bound to the old data directory or repository are rebuilt.
        """
        self.update_state(current_config=config, player_id=None, draw_history=[])
        if self._app_context is not None:
            self._app_context.reload_config(config)
