"""Leaderboard screen for browsing the aggregated games of the last run."""

from typing import ClassVar, override

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, Vertical
from textual.widgets import Button, DataTable, Static

import structlog

from steam_group_stats.models.game import AggregatedGame
from steam_group_stats.models.view import SortDirection, SortField, SortState
from steam_group_stats.services.leaderboard import LeaderboardView

from .base import BaseScreen

log = structlog.stdlib.get_logger()

# (column key, title); sortable columns use the SortField value as key
COLUMNS: list[tuple[str, str]] = [
    ("rank", "#"),
    ("name", "Game"),
    (SortField.TOTAL_HOURS.value, "Total Hours"),
    (SortField.AVERAGE_HOURS.value, "Avg Hours"),
    (SortField.PLAYER_COUNT.value, "Players"),
]


def sort_indicator(state: SortState, field: SortField) -> str:
    """Arrow shown next to the active sort column, empty for the others."""
    if state.field is not field:
        return ""
    return "↑" if state.direction is SortDirection.ASCENDING else "↓"


def column_label(key: str, title: str, state: SortState) -> str:
    """Column header text including the sort arrow where applicable."""
    try:
        field = SortField(key)
    except ValueError:
        return title
    arrow = sort_indicator(state, field)
    return f"{title} {arrow}" if arrow else title


def format_game_row(rank: int, game: AggregatedGame) -> tuple[str, str, str, str, str]:
    """Table cells for one game; hours are shown with one decimal."""
    return (
        str(rank),
        game.name,
        f"{game.total_hours:.1f}",
        f"{game.average_hours:.1f}",
        str(game.player_count),
    )


def get_game_display_info(game: AggregatedGame) -> dict[str, str]:
    """Details shown for the highlighted game."""
    return {
        "name": game.name,
        "app_id": str(game.game_id),
        "total_hours": f"{game.total_hours:.1f}",
        "average_hours": f"{game.average_hours:.1f}",
        "player_count": str(game.player_count),
        "header_image": game.header_image_url,
    }


class LeaderboardScreen(BaseScreen):
    """Ranked table of the games played across the group.

    Clicking a sortable header toggles its direction; page buttons move
    through at most ten pages of twenty games.
    """

    SCREEN_TITLE: ClassVar[str] = "Leaderboard"
    SCREEN_NAME: ClassVar[str] = "leaderboard"

    CSS: ClassVar[str] = """
    LeaderboardScreen {
        align: center middle;
    }

    #leaderboard-container {
        width: 95%;
        height: 95%;
        padding: 1 2;
        border: solid $primary;
        background: $surface;
    }

    #leaderboard-title {
        text-align: center;
        text-style: bold;
        color: $primary;
        margin-bottom: 1;
    }

    #summary-row {
        height: auto;
        margin-bottom: 1;
    }

    .summary-stat {
        color: $text-muted;
        margin-right: 2;
    }

    #table-section {
        height: 1fr;
        border: solid $primary-darken-2;
    }

    #games-table {
        height: 100%;
    }

    #details-section {
        height: auto;
        padding: 0 1;
        border: solid $secondary;
        margin-top: 1;
        display: none;
    }

    #details-section.has-selection {
        display: block;
    }

    #pagination {
        height: auto;
        margin-top: 1;
        align: center middle;
    }

    #pagination Button {
        min-width: 5;
        margin: 0 0;
    }

    #pagination Button.active {
        background: $primary;
    }

    #button-row {
        margin-top: 1;
        height: auto;
        align: center middle;
    }

    #button-row Button {
        margin: 0 1;
    }

    #no-results {
        text-align: center;
        color: $text-muted;
        padding: 2;
    }
    """

    BINDINGS: ClassVar[list[Binding]] = [
        Binding("escape", "go_back", "Back", show=True),
        Binding("left", "previous_page", "Prev page", show=True),
        Binding("right", "next_page", "Next page", show=True),
        Binding("h", "sort_by('total_hours')", "Sort hours", show=True),
        Binding("a", "sort_by('average_hours')", "Sort avg", show=True),
        Binding("p", "sort_by('player_count')", "Sort players", show=True),
    ]

    _view: LeaderboardView

    def __init__(self) -> None:
        super().__init__()
        self._view = LeaderboardView()

    @property
    def view(self) -> LeaderboardView:
        return self._view

    @override
    def compose(self) -> ComposeResult:
        with Container(id="leaderboard-container"):
            yield Static("🏆 Most Played Games", id="leaderboard-title")

            with Horizontal(id="summary-row"):
                yield Static("Games: 0", id="stat-games", classes="summary-stat")
                yield Static("", id="stat-page", classes="summary-stat")

            with Vertical(id="table-section"):
                yield DataTable(id="games-table", cursor_type="row", zebra_stripes=True)

            with Vertical(id="details-section"):
                yield Static("", id="detail-name")
                yield Static("", id="detail-stats")
                yield Static("", id="detail-image")

            yield Static("No games yet. Run an analysis first!", id="no-results")

            yield Horizontal(id="pagination")

            with Horizontal(id="button-row"):
                yield Button("Analyze", id="btn-analyze", variant="primary")
                yield Button("Back", id="btn-back", variant="default")

    @override
    async def on_mount(self) -> None:
        """Load the games of the last completed run."""
        await super().on_mount()
        await self._load_games()

    @override
    def on_screen_resume(self) -> None:
        """Reload when coming back from a new run."""
        super().on_screen_resume()
        if self.game_app.app_state.games != self._view.games:
            self.run_worker(self._load_games(), name="leaderboard_reload", exclusive=True)

    async def _load_games(self) -> None:
        self._view.load(self.game_app.app_state.games)
        await self._refresh()
        log.info("Leaderboard loaded", total_games=len(self._view.games))

    async def _refresh(self) -> None:
        """Redraw the table, summary and page buttons from the view."""
        self._refresh_table()
        self._update_summary()
        self._update_no_results_visibility()
        await self._render_pagination()

    def _refresh_table(self) -> None:
        table = self.query_one("#games-table", DataTable)
        table.clear(columns=True)
        state = self._view.sort_state
        for key, title in COLUMNS:
            table.add_column(column_label(key, title, state), key=key)

        offset = self._view.page_offset
        for index, game in enumerate(self._view.page_items()):
            table.add_row(*format_game_row(offset + index + 1, game), key=game.name)

    def _update_summary(self) -> None:
        self.query_one("#stat-games", Static).update(f"Games: {len(self._view.games)}")
        page_text = (
            f"Page {self._view.current_page} of {self._view.total_pages}"
            if self._view.total_pages else ""
        )
        self.query_one("#stat-page", Static).update(page_text)

    def _update_no_results_visibility(self) -> None:
        has_games = self._view.total_pages > 0
        self.query_one("#no-results", Static).display = not has_games
        self.query_one("#table-section", Vertical).display = has_games
        if not has_games:
            _ = self.query_one("#details-section", Vertical).remove_class("has-selection")

    async def _render_pagination(self) -> None:
        """Rebuild the « 1 2 ... » page buttons; hidden for a single page."""
        pagination = self.query_one("#pagination", Horizontal)
        await pagination.remove_children()

        total = self._view.total_pages
        if total <= 1:
            return

        buttons: list[Button] = []
        if self._view.has_previous:
            buttons.append(Button("«", id="page-prev"))
        for number in range(1, total + 1):
            classes = "active" if number == self._view.current_page else ""
            buttons.append(Button(str(number), id=f"page-{number}", classes=classes))
        if self._view.has_next:
            buttons.append(Button("»", id="page-next"))
        await pagination.mount_all(buttons)

    def _show_game_details(self, game: AggregatedGame) -> None:
        info = get_game_display_info(game)
        self.query_one("#detail-name", Static).update(f"{info['name']} (app {info['app_id']})")
        self.query_one("#detail-stats", Static).update(
            f"Total: {info['total_hours']}h  Avg: {info['average_hours']}h  "
            f"Players: {info['player_count']}"
        )
        self.query_one("#detail-image", Static).update(f"Header image: {info['header_image']}")
        _ = self.query_one("#details-section", Vertical).add_class("has-selection")

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id or ""

        if button_id == "page-prev":
            await self.action_previous_page()
        elif button_id == "page-next":
            await self.action_next_page()
        elif button_id.startswith("page-"):
            self._view.go_to_page(int(button_id.removeprefix("page-")))
            await self._refresh()
        elif button_id == "btn-analyze":
            await self.game_app.push_screen_with_tracking("analysis")
        elif button_id == "btn-back":
            await self.action_go_back()

    async def on_data_table_header_selected(self, event: DataTable.HeaderSelected) -> None:
        """Clicking a sortable header toggles the sort."""
        key = str(event.column_key.value)
        try:
            field = SortField(key)
        except ValueError:
            log.debug("Header is not sortable", column=key)
            return
        await self.action_sort_by(field.value)

    def on_data_table_row_highlighted(self, event: DataTable.RowHighlighted) -> None:
        if event.row_key is None or event.row_key.value is None:
            return
        name = str(event.row_key.value)
        for game in self._view.page_items():
            if game.name == name:
                self._show_game_details(game)
                return
        log.warning("Highlighted game not found", game=name)

    async def action_sort_by(self, field_value: str) -> None:
        state = self._view.toggle_sort(SortField(field_value))
        log.info("Leaderboard sort changed", field=state.field.value, direction=state.direction.value)
        await self._refresh()

    async def action_next_page(self) -> None:
        if self._view.has_next:
            self._view.next_page()
            await self._refresh()

    async def action_previous_page(self) -> None:
        if self._view.has_previous:
            self._view.previous_page()
            await self._refresh()
