"""Widgets rendering pull statistics colored by luck tier."""

from typing import ClassVar

from typing_extensions import override

from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.css.query import NoMatches
from textual.widget import Widget
from textual.widgets import ProgressBar, Static

import structlog

from neko_companion.models import LuckTier, PullGap

log = structlog.stdlib.get_logger()

TIER_CLASSES: dict[LuckTier | None, str] = {
    LuckTier.GOOD: "tier-good",
    LuckTier.NORMAL: "tier-normal",
    LuckTier.POOR: "tier-poor",
    None: "tier-none",
}

# Shown in place of an average that has no data behind it
NO_DATA = "--"


def tier_class(tier: LuckTier | None) -> str:
    """CSS class for a luck tier."""
    return TIER_CLASSES[tier]


def format_average(value: float | None, tier: LuckTier | None) -> str:
    """Render an average, or the no-data marker for the 0 placeholder."""
    if value is None or tier is None:
        return NO_DATA
    return f"{value:.2f}"


def _set_tier(widget: Widget, tier: LuckTier | None) -> None:
    for css_class in TIER_CLASSES.values():
        _ = widget.remove_class(css_class)
    _ = widget.add_class(tier_class(tier))


class AverageBlock(Widget):
    """A labelled average whose value is colored by its tier."""

    DEFAULT_CSS: ClassVar[str] = """
    AverageBlock {
        width: 1fr;
        height: 4;
        padding: 0 1;
        border: solid $primary-darken-2;
    }

    AverageBlock .average-label {
        color: $text-muted;
    }

    AverageBlock .average-value {
        text-style: bold;
    }

    AverageBlock .tier-good { color: $success; }
    AverageBlock .tier-normal { color: $warning; }
    AverageBlock .tier-poor { color: $error; }
    AverageBlock .tier-none { color: $text-muted; }
    """

    def __init__(
        self,
        label: str,
        name: str | None = None,
        id: str | None = None,
        classes: str | None = None,
    ) -> None:
        super().__init__(name=name, id=id, classes=classes)
        self._label = label

    @override
    def compose(self) -> ComposeResult:
        yield Static(self._label, classes="average-label")
        yield Static(NO_DATA, classes="average-value tier-none")

    def update_value(self, value: float | None, tier: LuckTier | None) -> None:
        try:
            value_widget = self.query_one(".average-value", Static)
        except NoMatches:
            log.debug("Average block not composed yet", label=self._label)
            return
        value_widget.update(format_average(value, tier))
        _set_tier(value_widget, tier)


class PullGapRow(Widget):
    """One pull with the draws it took and a bar scaled to 80 draws."""

    DEFAULT_CSS: ClassVar[str] = """
    PullGapRow {
        height: 1;
    }

    PullGapRow .pull-name {
        width: 16;
    }

    PullGapRow .pull-draws {
        width: 6;
        text-align: right;
        margin-right: 1;
    }

    PullGapRow ProgressBar {
        width: 1fr;
    }

    PullGapRow .tier-good { color: $success; }
    PullGapRow .tier-normal { color: $warning; }
    PullGapRow .tier-poor { color: $error; }
    """

    def __init__(self, pull: PullGap, id: str | None = None) -> None:
        super().__init__(id=id)
        self.pull = pull

    @override
    def compose(self) -> ComposeResult:
        css_class = tier_class(self.pull.tier)
        with Horizontal():
            yield Static(self.pull.record.name, classes=f"pull-name {css_class}")
            yield Static(str(self.pull.draws), classes=f"pull-draws {css_class}")
            yield ProgressBar(total=100, show_eta=False, show_percentage=False)

    def on_mount(self) -> None:
        self.query_one(ProgressBar).update(progress=self.pull.progress)
