"""Sort and paginate aggregated game statistics for display."""

import math
from collections.abc import Sequence

import structlog

from ..models.game import AggregatedGame
from ..models.view import SortDirection, SortField, SortState

log = structlog.stdlib.get_logger()

PAGE_SIZE = 20
MAX_PAGES = 10


def next_sort_state(current: SortState, field: SortField) -> SortState:
    """Sort state after the user clicks ``field``.

    Clicking the active field flips its direction; any other field starts
    descending.
    """
    if current.field is field:
        return SortState(field=field, direction=current.direction.flipped())
    return SortState(field=field, direction=SortDirection.DESCENDING)


def sort_games(games: Sequence[AggregatedGame], state: SortState) -> list[AggregatedGame]:
    """Stable sort of ``games`` by the state's field and direction."""
    return sorted(
        games,
        key=lambda game: getattr(game, state.field.value),
        reverse=state.direction is SortDirection.DESCENDING,
    )


def count_pages(item_count: int, page_size: int = PAGE_SIZE, max_pages: int = MAX_PAGES) -> int:
    """Number of reachable pages; never more than ``max_pages``."""
    if item_count <= 0:
        return 0
    return min(math.ceil(item_count / page_size), max_pages)


class LeaderboardView:
    """Current ordering, sort state and page of an aggregate.

    Items ranked past ``page_size * max_pages`` stay in the ordering but are
    not reachable through pagination.
    """

    def __init__(
        self,
        games: Sequence[AggregatedGame] = (),
        page_size: int = PAGE_SIZE,
        max_pages: int = MAX_PAGES,
    ) -> None:
        self.page_size = page_size
        self.max_pages = max_pages
        self._games: list[AggregatedGame] = list(games)
        self._sort_state = SortState()
        self._current_page = 1

    @property
    def games(self) -> list[AggregatedGame]:
        return list(self._games)

    @property
    def sort_state(self) -> SortState:
        return self._sort_state

    @property
    def current_page(self) -> int:
        return self._current_page

    @property
    def total_pages(self) -> int:
        return count_pages(len(self._games), self.page_size, self.max_pages)

    @property
    def page_offset(self) -> int:
        """Zero-based rank of the first item on the current page."""
        return (self._current_page - 1) * self.page_size

    @property
    def has_previous(self) -> bool:
        return self._current_page > 1

    @property
    def has_next(self) -> bool:
        return self._current_page < self.total_pages

    def load(self, games: Sequence[AggregatedGame]) -> None:
        """Show a fresh aggregate in its ranked order."""
        self._games = list(games)
        self._sort_state = SortState()
        self._current_page = 1
        log.debug("Leaderboard loaded", games=len(self._games), pages=self.total_pages)

    def toggle_sort(self, field: SortField) -> SortState:
        """Apply a click on ``field`` and go back to the first page."""
        self._sort_state = next_sort_state(self._sort_state, field)
        self._games = sort_games(self._games, self._sort_state)
        self._current_page = 1
        log.debug(
            "Leaderboard sorted",
            field=self._sort_state.field.value,
            direction=self._sort_state.direction.value,
        )
        return self._sort_state

    def go_to_page(self, page: int) -> int:
        """Move to ``page``, clamped to the reachable range."""
        self._current_page = max(1, min(page, max(self.total_pages, 1)))
        return self._current_page

    def next_page(self) -> int:
        return self.go_to_page(self._current_page + 1)

    def previous_page(self) -> int:
        return self.go_to_page(self._current_page - 1)

    def page_items(self) -> list[AggregatedGame]:
        """Items on the current page."""
        if self.total_pages == 0:
            return []
        start = self.page_offset
        return self._games[start:start + self.page_size]
