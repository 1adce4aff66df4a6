"""Base screen class with common functionality for all screens."""

from collections.abc import Callable
from typing import TYPE_CHECKING, ClassVar, TypeVar

from textual.binding import Binding
from textual.screen import Screen
from textual.widgets import Static

import structlog

from neko_companion.services.errors import (
    AppError,
    ErrorSeverity,
    UserFriendlyError,
    get_error_service,
    handle_error,
)

if TYPE_CHECKING:
    from neko_companion.ui.app import NekoCompanionApp

log = structlog.stdlib.get_logger()

T = TypeVar("T")


class BaseScreen(Screen[None]):
    """Base class for all application screens.

    Provides back navigation, access to the parent application and its
    services, and turns service errors into notifications.
    """

    BINDINGS: ClassVar[list[Binding]] = [
        Binding("escape", "go_back", "Back", show=True),
    ]

    SCREEN_TITLE: ClassVar[str] = "Screen"
    SCREEN_NAME: ClassVar[str] = "base"

    _is_active: bool

    def __init__(self, name: str | None = None) -> None:
        super().__init__(name=name or self.SCREEN_NAME)
        self._is_active = False

    @property
    def companion_app(self) -> "NekoCompanionApp":
        """The parent NekoCompanionApp.

        Raises:
            RuntimeError: If the screen is not attached to a NekoCompanionApp
        """
        from neko_companion.ui.app import NekoCompanionApp

        if isinstance(self.app, NekoCompanionApp):
            return self.app
        raise RuntimeError("Screen is not attached to a NekoCompanionApp")

    @property
    def screen_is_active(self) -> bool:
        return self._is_active

    async def on_mount(self) -> None:
        log.info("Screen mounted", screen=self.SCREEN_NAME)
        self._is_active = True

    async def on_unmount(self) -> None:
        log.debug("Screen unmounted", screen=self.SCREEN_NAME)
        self._is_active = False

    def on_screen_resume(self) -> None:
        """Called when the screen becomes active again.

        Override to refresh data after returning from another screen.
        """
        self._is_active = True

    def on_screen_suspend(self) -> None:
        self._is_active = False

    async def action_go_back(self) -> None:
        await self.companion_app.action_go_back()

    def create_title_widget(self, title: str | None = None) -> Static:
        return Static(title or self.SCREEN_TITLE, classes="title")

    def notify_error(self, message: str) -> None:
        self.notify(message, severity="error")
        log.error("User notification", message=message, screen=self.SCREEN_NAME)

    def notify_success(self, message: str) -> None:
        self.notify(message, severity="information")
        log.info("User notification", message=message, screen=self.SCREEN_NAME)

    def notify_warning(self, message: str) -> None:
        self.notify(message, severity="warning")
        log.warning("User notification", message=message, screen=self.SCREEN_NAME)

    def handle_exception(
        self,
        error: Exception,
        operation: str,
        context: dict[str, str | int | float | bool] | None = None,
    ) -> UserFriendlyError:
        """Convert an exception to a user-friendly error and notify the user.

        Args:
            error: The exception that occurred
            operation: Description of the operation that failed
            context: Additional context information

        Returns:
            UserFriendlyError with message and suggested actions
        """
        user_error = handle_error(
            error=error,
            operation=operation,
            component=self.SCREEN_NAME,
            context=context,
        )

        message = get_error_service().create_user_message(user_error, include_suggestions=True)
        if user_error.severity == ErrorSeverity.WARNING:
            self.notify_warning(message)
        else:
            self.notify_error(message)

        return user_error

    def load_guarded(self, operation: str, loader: Callable[[], T]) -> T | None:
        """Run a storage read, reporting application errors instead of raising.

        Returns:
            The loader's result, or None if it raised an AppError
        """
        try:
            return loader()
        except AppError as e:
            self.handle_exception(e, operation)
            return None
