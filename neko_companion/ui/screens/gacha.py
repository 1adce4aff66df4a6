"""Pull history screen: per-banner averages, pull gaps and daily details."""

from typing import ClassVar

from typing_extensions import override

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, VerticalScroll
from textual.widgets import Button, DataTable, Select, Static, Tab, Tabs

import structlog

from neko_companion.models import BannerReport, BannerType, DrawRecord, PullDetailGroup
from neko_companion.services.banners import classify
from neko_companion.services.reports import build_banner_report, build_pull_details
from neko_companion.ui.widgets import AverageBlock, PullGapRow

from .base import BaseScreen

log = structlog.stdlib.get_logger()


def detail_rows(groups: list[PullDetailGroup]) -> list[tuple[str, str, str, str]]:
    """Table rows for the details view.

    The date is printed only on the first row of each day. 3-star pulls have
    no draw count.
    """
    rows = []
    for group in groups:
        for index, entry in enumerate(group.entries):
            rows.append((
                group.date if index == 0 else "",
                entry.record.name,
                "★" * entry.record.quality_level,
                "" if entry.draws is None else str(entry.draws),
            ))
    return rows


def banner_tab_id(index: int) -> str:
    # Unknown banners keep their raw name, which is not a valid widget id
    return f"banner-{index}"


class GachaScreen(BaseScreen):
    """Browse one player's pull history banner by banner."""

    SCREEN_TITLE: ClassVar[str] = "Pull History"
    SCREEN_NAME: ClassVar[str] = "gacha"

    CSS: ClassVar[str] = """
    #gacha-container {
        width: 100%;
        height: 100%;
        padding: 1 2;
    }

    #gacha-toolbar {
        height: 3;
    }

    #player-select {
        width: 1fr;
    }

    #btn-toggle {
        margin-left: 1;
    }

    #averages {
        height: 4;
        margin: 1 0;
    }

    #total-pulls {
        color: $text-muted;
        margin-bottom: 1;
    }

    #overview, #details {
        height: 1fr;
    }

    #details {
        display: none;
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
        Binding("v", "toggle_view", "Overview/Details", show=True),
        Binding("r", "reload", "Reload", show=True),
    ]

    _records_by_banner: dict[str, list[DrawRecord]]
    _reports: list[BannerReport]
    _show_details: bool

    def __init__(self) -> None:
        super().__init__()
        self._records_by_banner = {}
        self._reports = []
        self._show_details = False

    @override
    def compose(self) -> ComposeResult:
        with Container(id="gacha-container"):
            yield self.create_title_widget()
            with Horizontal(id="gacha-toolbar"):
                yield Select([], id="player-select", prompt="Player UID")
                yield Button("Details", id="btn-toggle")
            yield Tabs(id="banner-tabs")
            with Horizontal(id="averages"):
                yield AverageBlock("5★ average", id="avg-five")
                yield AverageBlock("Featured 5★ average", id="avg-featured")
                yield AverageBlock("4★ average", id="avg-four")
            yield Static("", id="total-pulls")
            yield VerticalScroll(id="overview")
            yield DataTable(id="details", cursor_type="row")
            yield Static("No pull history found. Run a sync first.", id="no-data")

    @override
    async def on_mount(self) -> None:
        await super().on_mount()
        self.query_one("#details", DataTable).add_columns("Date", "Name", "Quality", "Draws")
        await self._load_players()

    async def _load_players(self) -> None:
        player_ids = self.load_guarded("load player ids", self.companion_app.record_store.fetch_player_ids)
        self.query_one("#no-data", Static).display = not player_ids
        if not player_ids:
            return

        select = self.query_one("#player-select", Select)
        select.set_options([(player_id, player_id) for player_id in player_ids])

        previous = self.companion_app.app_state.player_id
        target = previous if previous in player_ids else player_ids[0]
        if select.value == target:
            # No change event fires when the value is unchanged
            await self._load_history(target)
        else:
            select.value = target

    async def on_select_changed(self, event: Select.Changed) -> None:
        if event.select.id == "player-select" and isinstance(event.value, str):
            await self._load_history(event.value)

    async def _load_history(self, player_id: str) -> None:
        store = self.companion_app.record_store
        records = self.load_guarded("load draw history", lambda: store.fetch_draw_history(player_id))
        if records is None:
            return

        pool_names = self.companion_app.config.standard_pool_names
        self._records_by_banner = classify(records)
        self._reports = [
            build_banner_report(banner, banner_records, pool_names)
            for banner, banner_records in self._records_by_banner.items()
        ]
        self.companion_app.update_state(player_id=player_id, draw_history=records)
        log.info("Pull history loaded", player_id=player_id, records=len(records))

        tabs = self.query_one("#banner-tabs", Tabs)
        await tabs.clear()
        for index, report in enumerate(self._reports):
            await tabs.add_tab(Tab(report.label, id=banner_tab_id(index)))

    async def on_tabs_tab_activated(self, event: Tabs.TabActivated) -> None:
        if event.tab is None or event.tab.id is None:
            return
        index = int(event.tab.id.removeprefix("banner-"))
        if 0 <= index < len(self._reports):
            await self._show_report(self._reports[index])

    async def _show_report(self, report: BannerReport) -> None:
        self.query_one("#avg-five", AverageBlock).update_value(report.average_gap, report.average_tier)
        self.query_one("#avg-four", AverageBlock).update_value(report.four_star_average, report.four_star_tier)

        featured = self.query_one("#avg-featured", AverageBlock)
        featured.display = report.banner == BannerType.CHARACTER_EVENT.value
        featured.update_value(report.featured_average, report.featured_tier)

        self.query_one("#total-pulls", Static).update(f"Total pulls: {report.total_pulls}")

        overview = self.query_one("#overview", VerticalScroll)
        await overview.remove_children()
        if report.five_star_pulls:
            await overview.mount_all(PullGapRow(pull) for pull in report.five_star_pulls)
        else:
            await overview.mount(Static("No 5★ pulls on this banner yet."))

        table = self.query_one("#details", DataTable)
        table.clear()
        for row in detail_rows(build_pull_details(self._records_by_banner.get(report.banner, []))):
            table.add_row(*row)

    def _apply_view(self) -> None:
        self.query_one("#overview", VerticalScroll).display = not self._show_details
        self.query_one("#details", DataTable).display = self._show_details
        self.query_one("#btn-toggle", Button).label = "Overview" if self._show_details else "Details"

    def action_toggle_view(self) -> None:
        self._show_details = not self._show_details
        self._apply_view()

    async def action_reload(self) -> None:
        await self._load_players()

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-toggle":
            self.action_toggle_view()
