"""Play time screen: titles by total time with a per-title detail panel."""

from datetime import date
from typing import ClassVar

from typing_extensions import override

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, Vertical
from textual.widgets import DataTable, Sparkline, Static

import structlog

from neko_companion.models import GameSummary, GameTimeReport, SessionRecord
from neko_companion.services.reports import build_game_time_report, format_hours, format_minutes, sort_games_by_time
from neko_companion.services.sessions import local_today
from neko_companion.services.storage import session_since_date

from .base import BaseScreen

log = structlog.stdlib.get_logger()


def session_row(session: SessionRecord) -> tuple[str, str, str]:
    """Start, end and minutes of one session; open sessions show as playing."""
    return (
        session.start_time,
        session.end_time or "playing",
        format_minutes(session.duration),
    )


def chart_caption(report: GameTimeReport) -> str:
    if not report.daily:
        return ""
    first, last = report.daily[0].date, report.daily[-1].date
    return f"{first:%m-%d} to {last:%m-%d}, {format_hours(max(d.seconds for d in report.daily))} h peak"


class GameTimeScreen(BaseScreen):
    """Browse playtime per title."""

    SCREEN_TITLE: ClassVar[str] = "Play Time"
    SCREEN_NAME: ClassVar[str] = "game_time"

    CSS: ClassVar[str] = """
    #time-container {
        width: 100%;
        height: 100%;
        padding: 1 2;
    }

    #games-table {
        width: 2fr;
        height: 100%;
    }

    #detail-panel {
        width: 3fr;
        height: 100%;
        padding: 0 1;
        border: solid $secondary;
    }

    .detail-title {
        text-style: bold;
        color: $secondary;
        margin-bottom: 1;
    }

    .detail-stat {
        height: 1;
    }

    #daily-chart {
        height: 5;
        margin-top: 1;
    }

    #chart-caption {
        color: $text-muted;
        margin-bottom: 1;
    }

    #sessions-table {
        height: 1fr;
    }

    #no-data {
        text-align: center;
        color: $text-muted;
        padding: 2;
        display: none;
    }
    """

    BINDINGS: ClassVar[list[Binding]] = [
        Binding("escape", "go_back", "Back", show=True),
        Binding("r", "reload", "Reload", show=True),
    ]

    _games: list[GameSummary]

    def __init__(self) -> None:
        super().__init__()
        self._games = []

    @override
    def compose(self) -> ComposeResult:
        with Container(id="time-container"):
            yield self.create_title_widget()
            yield Static("No play sessions found. Run a sync first.", id="no-data")
            with Horizontal():
                yield DataTable(id="games-table", cursor_type="row")
                with Vertical(id="detail-panel"):
                    yield Static("Select a game", id="detail-name", classes="detail-title")
                    yield Static("", id="detail-total", classes="detail-stat")
                    yield Static("", id="detail-average", classes="detail-stat")
                    yield Sparkline([], id="daily-chart", summary_function=max)
                    yield Static("", id="chart-caption")
                    yield DataTable(id="sessions-table", cursor_type="row")

    @override
    async def on_mount(self) -> None:
        await super().on_mount()
        self.query_one("#games-table", DataTable).add_columns("Game", "Hours")
        self.query_one("#sessions-table", DataTable).add_columns("Start", "End", "Minutes")
        self._load_games()

    def _load_games(self) -> None:
        games = self.load_guarded("load games", self.companion_app.record_store.fetch_game_summaries)
        self._games = sort_games_by_time(games or [])
        self.query_one("#no-data", Static).display = not self._games

        table = self.query_one("#games-table", DataTable)
        table.clear()
        for game in self._games:
            table.add_row(game.name, format_hours(game.total_time), key=str(game.id))
        log.info("Games loaded", count=len(self._games))

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        if event.data_table.id != "games-table" or event.row_key.value is None:
            return
        self._show_game(int(event.row_key.value))

    def _show_game(self, game_id: int) -> None:
        config = self.companion_app.config
        store = self.companion_app.record_store
        today = local_today(config.utc_offset_hours)
        since: date = session_since_date(today, config.session_lookback_months)

        def load() -> tuple[GameSummary | None, list[SessionRecord]]:
            return store.fetch_game_summary(game_id), store.fetch_sessions(game_id, since)

        loaded = self.load_guarded("load sessions", load)
        if loaded is None:
            return
        summary, sessions = loaded
        if summary is None:
            self.notify_warning(f"Game {game_id} no longer exists in the data file")
            return

        report = build_game_time_report(
            summary,
            sessions,
            window_days=config.session_window_days,
            reference_date=today,
        )
        self._render_report(report)

    def _render_report(self, report: GameTimeReport) -> None:
        self.query_one("#detail-name", Static).update(report.game.name)
        self.query_one("#detail-total", Static).update(f"Total: {format_hours(report.total_seconds)} h")
        self.query_one("#detail-average", Static).update(
            f"Average per play day: {format_hours(report.average_daily_seconds)} h"
        )
        self.query_one("#daily-chart", Sparkline).data = [d.seconds / 3600 for d in report.daily]
        self.query_one("#chart-caption", Static).update(chart_caption(report))

        sessions_table = self.query_one("#sessions-table", DataTable)
        sessions_table.clear()
        for session in report.sessions:
            sessions_table.add_row(*session_row(session))

    def action_reload(self) -> None:
        self._load_games()
