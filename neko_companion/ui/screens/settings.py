"""Settings screen for configuring application settings."""

from dataclasses import replace
from pathlib import Path
from typing import ClassVar

from typing_extensions import override

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, Vertical
from textual.widgets import Button, Input, Label, Select, Static

import structlog

from neko_companion.models import AppConfig
from neko_companion.services.config import VALID_LOG_LEVELS, ConfigurationService
from neko_companion.services.errors import ConfigurationError
from neko_companion.services.repo_sync import parse_repo_url

from .base import BaseScreen

log = structlog.stdlib.get_logger()


LOG_LEVELS: list[tuple[str, str]] = [(level, level) for level in VALID_LOG_LEVELS]


def validate_settings(values: dict[str, str]) -> dict[str, str]:
    """Check raw form values; returns field name to error message."""
    errors: dict[str, str] = {}

    repo_url = values["repo_url"].strip()
    if repo_url:
        try:
            parse_repo_url(repo_url)
        except ConfigurationError:
            errors["repo_url"] = "Use https://github.com/<owner>/<repo> or https://gitee.com/<owner>/<repo>"

    data_dir = values["data_directory"].strip()
    if not data_dir:
        errors["data_directory"] = "Data directory cannot be empty"
    elif not Path(data_dir).expanduser().is_absolute():
        errors["data_directory"] = "Path must be absolute"

    try:
        delay = float(values["request_delay"])
        if not 0 <= delay <= 60:
            errors["request_delay"] = "Must be between 0 and 60 seconds"
    except ValueError:
        errors["request_delay"] = "Must be a valid number"

    try:
        offset = int(values["utc_offset_hours"])
        if not -12 <= offset <= 14:
            errors["utc_offset_hours"] = "Must be between -12 and 14"
    except ValueError:
        errors["utc_offset_hours"] = "Must be a whole number of hours"

    if values["log_level"] not in VALID_LOG_LEVELS:
        errors["log_level"] = f"Must be one of: {', '.join(VALID_LOG_LEVELS)}"

    return errors


class SettingsScreen(BaseScreen):
    """Form for the repository, token, data directory and display settings."""

    SCREEN_TITLE: ClassVar[str] = "Settings"
    SCREEN_NAME: ClassVar[str] = "settings"

    CSS: ClassVar[str] = """
    SettingsScreen {
        align: center middle;
    }

    #settings-container {
        width: 80;
        height: auto;
        max-height: 95%;
        padding: 1 2;
        border: solid $primary;
        background: $surface;
    }

    .form-group {
        margin-bottom: 1;
        height: auto;
    }

    .form-input {
        width: 100%;
    }

    .form-hint {
        color: $text-muted;
        text-style: italic;
    }

    .validation-error {
        color: $error;
    }

    .validation-success {
        color: $success;
    }

    #button-row {
        margin-top: 1;
        height: auto;
        align: center middle;
    }

    #button-row Button {
        margin: 0 1;
    }

    #validation-status {
        text-align: center;
        height: 1;
    }
    """

    BINDINGS: ClassVar[list[Binding]] = [
        Binding("escape", "go_back", "Back", show=True),
        Binding("ctrl+s", "save_settings", "Save", show=True),
        Binding("ctrl+r", "reset_settings", "Reset", show=True),
    ]

    # (field, label, hint, input kwargs)
    FIELDS: ClassVar[list[tuple[str, str, str, dict[str, object]]]] = [
        ("repo_url", "Repository URL:", "GitHub or Gitee repository holding NekoGame/", {"placeholder": "https://github.com/owner/repo"}),
        ("token", "Access Token:", "Personal access token, stored readable only by you", {"password": True}),
        ("data_directory", "Data Directory:", "Where the synced databases are kept", {}),
        ("request_delay", "Request Delay (seconds):", "Minimum delay between API requests (0-60)", {"type": "number"}),
        ("utc_offset_hours", "UTC Offset (hours):", "Time zone of the recorded timestamps", {"type": "integer"}),
    ]

    _original_config: AppConfig | None
    _has_changes: bool

    def __init__(self) -> None:
        super().__init__()
        self._original_config = None
        self._has_changes = False

    @override
    def compose(self) -> ComposeResult:
        with Container(id="settings-container"):
            yield self.create_title_widget("⚙️ Settings")

            with Vertical(id="settings-form"):
                for field_name, label, hint, options in self.FIELDS:
                    with Vertical(classes="form-group"):
                        yield Label(label)
                        yield Input(id=f"input-{field_name}", classes="form-input", **options)  # type: ignore[arg-type]
                        yield Static(hint, classes="form-hint")

                with Vertical(classes="form-group"):
                    yield Label("Log Level:")
                    yield Select(LOG_LEVELS, id="select-log_level", allow_blank=False, value="INFO")

            yield Static("", id="validation-status")

            with Horizontal(id="button-row"):
                yield Button("Save", id="btn-save", variant="primary")
                yield Button("Reset", id="btn-reset")
                yield Button("Cancel", id="btn-cancel", variant="error")

    @override
    async def on_mount(self) -> None:
        await super().on_mount()
        config_service = self.companion_app.config_service or ConfigurationService()
        self._original_config = config_service.load_config()
        self._populate_form(self._original_config)

    def _populate_form(self, config: AppConfig) -> None:
        self.query_one("#input-repo_url", Input).value = config.repo_url
        self.query_one("#input-token", Input).value = config.token
        self.query_one("#input-data_directory", Input).value = str(config.data_directory)
        self.query_one("#input-request_delay", Input).value = str(config.request_delay)
        self.query_one("#input-utc_offset_hours", Input).value = str(config.utc_offset_hours)
        self.query_one("#select-log_level", Select).value = config.log_level  # type: ignore[type-arg]
        self._has_changes = False
        self._update_validation_status()

    def _get_form_values(self) -> dict[str, str]:
        values = {name: self.query_one(f"#input-{name}", Input).value for name, *_ in self.FIELDS}
        log_value = self.query_one("#select-log_level", Select).value  # type: ignore[type-arg]
        values["log_level"] = str(log_value) if log_value else "INFO"
        return values

    def _update_validation_status(self) -> None:
        status_widget = self.query_one("#validation-status", Static)
        errors = validate_settings(self._get_form_values())

        _ = status_widget.remove_class("validation-error", "validation-success")
        if errors:
            status_widget.update(f"✗ {next(iter(errors.values()))}")
            _ = status_widget.add_class("validation-error")
        elif self._has_changes:
            status_widget.update("✓ Valid - Press Save to apply changes")
            _ = status_widget.add_class("validation-success")
        else:
            status_widget.update("")

    def _build_config_from_form(self) -> AppConfig | None:
        values = self._get_form_values()
        if validate_settings(values) or self._original_config is None:
            return None

        return replace(
            self._original_config,
            repo_url=values["repo_url"].strip(),
            token=values["token"].strip(),
            data_directory=Path(values["data_directory"].strip()).expanduser(),
            request_delay=float(values["request_delay"]),
            utc_offset_hours=int(values["utc_offset_hours"]),
            log_level=values["log_level"],
        )

    async def on_input_changed(self, event: Input.Changed) -> None:
        self._has_changes = True
        self._update_validation_status()

    async def on_select_changed(self, event: Select.Changed) -> None:
        self._has_changes = True
        self._update_validation_status()

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id
        if button_id == "btn-save":
            await self.action_save_settings()
        elif button_id == "btn-reset":
            await self.action_reset_settings()
        elif button_id == "btn-cancel":
            if self._has_changes:
                log.info("Discarding unsaved settings changes")
            await self.action_go_back()

    async def action_save_settings(self) -> None:
        config = self._build_config_from_form()
        if not config:
            self.notify_error("Cannot save: Please fix validation errors")
            return

        config_service = self.companion_app.config_service
        if config_service is None:
            self.notify_warning("Settings updated for this session only")
        else:
            try:
                config_service.save_config(config)
            except (ConfigurationError, OSError) as e:
                self.handle_exception(e, "save settings", {"path": str(config_service.config_path)})
                return

        self._original_config = config
        self._has_changes = False
        self.companion_app.apply_config(config)
        self._update_validation_status()
        self.notify_success("Settings saved")

    async def action_reset_settings(self) -> None:
        if self._original_config:
            self._populate_form(self._original_config)
            self.notify_success("Settings reset to last saved values")
