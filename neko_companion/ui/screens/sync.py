"""Sync screen: download the latest data files from the repository."""

import asyncio
from typing import Any, ClassVar

from typing_extensions import override

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal
from textual.widgets import Button, DataTable, LoadingIndicator, Static
from textual.worker import Worker

import structlog

from neko_companion.models import AppConfig, SyncAction, SyncResult
from neko_companion.services.errors import ConfigurationError
from neko_companion.services.repo_sync import format_update_time, parse_repo_url

from .base import BaseScreen

log = structlog.stdlib.get_logger()

ACTION_LABELS: dict[SyncAction, str] = {
    SyncAction.DOWNLOADED: "Downloaded",
    SyncAction.UP_TO_DATE: "Up to date",
    SyncAction.LOCAL_NEWER: "Local copy is newer",
    SyncAction.MISSING_REMOTE: "Not in repository",
}


def repository_label(config: AppConfig) -> str:
    """One-line description of the configured repository."""
    if not config.repo_url:
        return "No repository configured. Set one in Settings."
    try:
        location = parse_repo_url(config.repo_url)
    except ConfigurationError:
        return f"Invalid repository URL: {config.repo_url}"
    return f"{location.platform.value}: {location.owner}/{location.repo}"


def result_row(result: SyncResult, utc_offset_hours: int) -> tuple[str, str, str]:
    remote = format_update_time(result.remote_updated, utc_offset_hours) if result.remote_updated else "-"
    return result.file_name, ACTION_LABELS[result.action], remote


class SyncScreen(BaseScreen):
    """Run a sync and show what happened to each data file."""

    SCREEN_TITLE: ClassVar[str] = "Sync Data"
    SCREEN_NAME: ClassVar[str] = "sync"

    CSS: ClassVar[str] = """
    SyncScreen {
        align: center middle;
    }

    #sync-container {
        width: 80;
        height: auto;
        padding: 1 2;
        border: solid $primary;
        background: $surface;
    }

    .sync-info {
        height: 1;
        color: $text-muted;
    }

    #sync-loading {
        height: 1;
        display: none;
    }

    #results-table {
        height: auto;
        max-height: 8;
        margin-top: 1;
    }

    #button-row {
        margin-top: 1;
        height: auto;
        align: center middle;
    }

    #button-row Button {
        margin: 0 1;
    }
    """

    BINDINGS: ClassVar[list[Binding]] = [
        Binding("escape", "go_back", "Back", show=True),
        Binding("s", "start_sync", "Sync", show=True),
    ]

    _sync_worker: Worker[None] | None

    def __init__(self) -> None:
        super().__init__()
        self._sync_worker = None

    @override
    def compose(self) -> ComposeResult:
        with Container(id="sync-container"):
            yield self.create_title_widget()
            yield Static("", id="repo-label", classes="sync-info")
            yield Static("", id="game-updated", classes="sync-info")
            yield Static("", id="gacha-updated", classes="sync-info")
            yield LoadingIndicator(id="sync-loading")
            yield DataTable(id="results-table", cursor_type="none")
            with Horizontal(id="button-row"):
                yield Button("Start Sync", id="btn-sync", variant="primary")
                yield Button("Back", id="btn-back")

    @override
    async def on_mount(self) -> None:
        await super().on_mount()
        self.query_one("#results-table", DataTable).add_columns("File", "Result", "Repository updated")
        self._refresh_info()

    @override
    def on_screen_resume(self) -> None:
        super().on_screen_resume()
        self._refresh_info()

    def _refresh_info(self) -> None:
        config = self.companion_app.config
        self.query_one("#repo-label", Static).update(repository_label(config))
        self.query_one("#game-updated", Static).update(f"Game data updated: {config.game_data_updated or '-'}")
        self.query_one("#gacha-updated", Static).update(f"Pull data updated: {config.gacha_data_updated or '-'}")
        self.query_one("#btn-sync", Button).disabled = self.companion_app.app_state.sync_active

    def _set_running(self, running: bool) -> None:
        self.companion_app.update_state(sync_active=running)
        self.query_one("#sync-loading", LoadingIndicator).display = running
        self.query_one("#btn-sync", Button).disabled = running

    def action_start_sync(self) -> None:
        if self.companion_app.app_state.sync_active:
            self.notify_warning("A sync is already running")
            return
        context = self.companion_app.app_context
        if context is None:
            self.notify_error("Sync is not available in this session")
            return

        self._set_running(True)
        self._sync_worker = self.run_worker(self._run_sync(context), name="sync_worker", exclusive=True)

    async def _run_sync(self, context: Any) -> None:
        try:
            results: list[SyncResult] = await context.run_sync()
        except asyncio.CancelledError:
            log.info("Sync worker cancelled")
            raise
        except Exception as e:
            self.handle_exception(e, "sync data files")
        else:
            self.companion_app.update_state(last_sync=results, current_config=context.config)
            self._show_results(results)
            downloaded = sum(1 for r in results if r.action is SyncAction.DOWNLOADED)
            self.notify_success(f"Sync finished, {downloaded} file(s) downloaded")
        finally:
            self._set_running(False)
            self._refresh_info()

    def _show_results(self, results: list[SyncResult]) -> None:
        table = self.query_one("#results-table", DataTable)
        table.clear()
        offset = self.companion_app.config.utc_offset_hours
        for result in results:
            table.add_row(*result_row(result, offset))

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-sync":
            self.action_start_sync()
        elif event.button.id == "btn-back":
            await self.action_go_back()
