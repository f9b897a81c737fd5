"""Progress and activity widgets for analysis runs."""

from typing import ClassVar, override

from textual.app import ComposeResult
from textual.containers import Vertical
from textual.css.query import NoMatches
from textual.reactive import reactive
from textual.widgets import ProgressBar, Static
from textual.widget import Widget

import structlog

from steam_group_stats.models.progress import ProgressState

log = structlog.stdlib.get_logger()


def format_progress(progress: ProgressState) -> str:
    """Render ``processed / total`` with the percentage."""
    if progress.total == 0:
        return ""
    return f"Processed: {progress.processed}/{progress.total} members ({progress.percentage:.0f}%)"


class AnalysisProgressWidget(Widget):
    """Widget showing how many group members have been processed.

    The bar only moves once per wave; ``processed`` counts every attempted
    member, including private profiles and failed fetches.
    """

    DEFAULT_CSS: ClassVar[str] = """
    AnalysisProgressWidget {
        height: auto;
        padding: 1;
        border: solid $primary-darken-2;
        background: $surface;
    }

    AnalysisProgressWidget .progress-title {
        text-style: bold;
        color: $primary;
        margin-bottom: 1;
    }

    AnalysisProgressWidget .progress-status {
        margin-bottom: 1;
    }

    AnalysisProgressWidget .progress-bar-container {
        height: 3;
        margin-bottom: 1;
    }

    AnalysisProgressWidget .progress-details {
        color: $text-muted;
    }
    """

    status: reactive[str] = reactive("Ready", init=False)
    processed: reactive[int] = reactive(0, init=False)
    total: reactive[int] = reactive(0, init=False)

    def __init__(
        self,
        title: str = "Progress",
        name: str | None = None,
        id: str | None = None,
        classes: str | None = None,
    ) -> None:
        """Initialize the progress widget.

        Args:
            title: Title to display above the progress bar
            name: Widget name
            id: Widget ID
            classes: CSS classes
        """
        super().__init__(name=name, id=id, classes=classes)
        self._title: str = title
        self.status = "Ready"
        self.processed = 0
        self.total = 0

    @override
    def compose(self) -> ComposeResult:
        yield Static(f"📊 {self._title}", classes="progress-title")
        yield Static("Ready to start", id="progress-status", classes="progress-status")
        with Vertical(classes="progress-bar-container"):
            yield ProgressBar(id="progress-bar", total=None, show_eta=False)
        yield Static("", id="progress-details", classes="progress-details")

    def update_progress(self, progress: ProgressState) -> None:
        """Show the counters of the latest wave.

        Args:
            progress: Counters of the active run
        """
        self.processed = progress.processed
        self.total = progress.total
        if progress.total > 0:
            self.status = "Fetching player libraries..."
        self._refresh_display()

    def set_status(self, status: str) -> None:
        self.status = status
        self._refresh_display()

    def reset(self) -> None:
        """Reset the widget to its initial state."""
        self.status = "Ready"
        self.processed = 0
        self.total = 0
        self._refresh_display()

    def _refresh_display(self) -> None:
        try:
            self.query_one("#progress-status", Static).update(self.status)

            progress_bar = self.query_one("#progress-bar", ProgressBar)
            progress_bar.update(total=self.total or None, progress=self.processed)

            details = format_progress(ProgressState(processed=self.processed, total=self.total))
            self.query_one("#progress-details", Static).update(details)
        except NoMatches as e:
            log.debug("Failed to refresh progress display", error=str(e))


class ActivityLogWidget(Widget):
    """Widget listing the most recent activity lines of a run.

    Lines arrive one wave at a time, in the order the fetches settled.
    """

    DEFAULT_CSS: ClassVar[str] = """
    ActivityLogWidget {
        height: auto;
        max-height: 14;
        padding: 1;
        border: solid $secondary;
        background: $surface;
    }

    ActivityLogWidget .activity-title {
        text-style: bold;
        color: $secondary;
        margin-bottom: 1;
    }

    ActivityLogWidget .activity-list {
        color: $text-muted;
        overflow-y: auto;
    }
    """

    line_count: reactive[int] = reactive(0, init=False)

    _lines: list[str]
    _max_display: int

    def __init__(
        self,
        max_display: int = 8,
        name: str | None = None,
        id: str | None = None,
        classes: str | None = None,
    ) -> None:
        """Initialize the activity log widget.

        Args:
            max_display: Maximum number of lines to display
            name: Widget name
            id: Widget ID
            classes: CSS classes
        """
        super().__init__(name=name, id=id, classes=classes)
        self._lines = []
        self._max_display = max_display
        self.line_count = 0

    @override
    def compose(self) -> ComposeResult:
        yield Static("📝 Activity", classes="activity-title")
        yield Static("", id="activity-list", classes="activity-list")

    def add_lines(self, lines: list[str]) -> None:
        """Append the lines of one wave."""
        self._lines.extend(lines)
        self.line_count = len(self._lines)
        self._refresh_display()

    def clear_lines(self) -> None:
        self._lines.clear()
        self.line_count = 0
        self._refresh_display()

    def get_lines(self) -> list[str]:
        return self._lines.copy()

    def _refresh_display(self) -> None:
        try:
            list_widget = self.query_one("#activity-list", Static)
            if not self._lines:
                list_widget.update("")
                return
            recent = self._lines[-self._max_display:]
            text = "\n".join(f"• {line}" for line in recent)
            if len(self._lines) > self._max_display:
                text = f"... {len(self._lines) - self._max_display} earlier line(s)\n" + text
            list_widget.update(text)
        except NoMatches as e:
            log.debug("Failed to refresh activity display", error=str(e))
