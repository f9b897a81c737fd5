"""Tests for leaderboard sorting and pagination."""

import pytest
from hypothesis import given, settings, strategies as st

from steam_group_stats.models.game import AggregatedGame
from steam_group_stats.models.view import SortDirection, SortField, SortState
from steam_group_stats.services.leaderboard import (
    MAX_PAGES,
    PAGE_SIZE,
    LeaderboardView,
    count_pages,
    next_sort_state,
    sort_games,
)


sort_fields = st.sampled_from(list(SortField))

aggregated_games = st.lists(
    st.builds(
        AggregatedGame,
        game_id=st.integers(min_value=1, max_value=1_000_000),
        name=st.text(min_size=1, max_size=30),
        total_hours=st.floats(min_value=0, max_value=100_000, allow_nan=False),
        player_count=st.integers(min_value=1, max_value=500),
    ),
    max_size=60,
)


def make_games(count: int) -> list[AggregatedGame]:
    """``count`` games ranked by descending total hours."""
    return [
        AggregatedGame(game_id=i, name=f"Game {i}", total_hours=float(count - i), player_count=1 + i % 7)
        for i in range(count)
    ]


class TestSortToggle:
    """Clicking headers flips or resets the direction."""

    @given(sort_fields, st.sampled_from(list(SortDirection)))
    def test_same_field_flips_direction(self, field: SortField, direction: SortDirection) -> None:
        state = next_sort_state(SortState(field, direction), field)

        assert state.field is field
        assert state.direction is direction.flipped()

    @given(sort_fields, sort_fields, st.sampled_from(list(SortDirection)))
    def test_other_field_starts_descending(
        self,
        current: SortField,
        clicked: SortField,
        direction: SortDirection,
    ) -> None:
        if current is clicked:
            return
        state = next_sort_state(SortState(current, direction), clicked)

        assert state == SortState(clicked, SortDirection.DESCENDING)

    @given(sort_fields)
    def test_double_toggle_restores_state(self, field: SortField) -> None:
        start = SortState(field, SortDirection.DESCENDING)
        assert next_sort_state(next_sort_state(start, field), field) == start

    def test_default_state_is_total_hours_descending(self) -> None:
        assert SortState() == SortState(SortField.TOTAL_HOURS, SortDirection.DESCENDING)


class TestSortGames:
    """Ordering by each sortable column."""

    @given(aggregated_games, sort_fields)
    @settings(max_examples=100)
    def test_descending_order(self, games: list[AggregatedGame], field: SortField) -> None:
        ordered = sort_games(games, SortState(field, SortDirection.DESCENDING))
        values = [getattr(game, field.value) for game in ordered]
        assert values == sorted(values, reverse=True)

    @given(aggregated_games, sort_fields)
    @settings(max_examples=100)
    def test_ascending_order(self, games: list[AggregatedGame], field: SortField) -> None:
        ordered = sort_games(games, SortState(field, SortDirection.ASCENDING))
        values = [getattr(game, field.value) for game in ordered]
        assert values == sorted(values)

    def test_sort_is_stable(self) -> None:
        games = [
            AggregatedGame(1, "A", 10.0, 2),
            AggregatedGame(2, "B", 4.0, 2),
            AggregatedGame(3, "C", 6.0, 2),
        ]

        ordered = sort_games(games, SortState(SortField.PLAYER_COUNT, SortDirection.DESCENDING))

        assert [game.name for game in ordered] == ["A", "B", "C"]

    def test_sort_by_average(self) -> None:
        games = [
            AggregatedGame(1, "Broad", 10.0, 10),
            AggregatedGame(2, "Deep", 9.0, 1),
        ]

        ordered = sort_games(games, SortState(SortField.AVERAGE_HOURS, SortDirection.DESCENDING))

        assert [game.name for game in ordered] == ["Deep", "Broad"]


class TestPagination:
    """Page counting and navigation."""

    @pytest.mark.parametrize(
        ("item_count", "expected"),
        [(0, 0), (1, 1), (20, 1), (21, 2), (200, 10), (201, 10), (1000, 10)],
    )
    def test_count_pages(self, item_count: int, expected: int) -> None:
        assert count_pages(item_count) == expected

    @given(st.integers(min_value=0, max_value=5000))
    def test_page_count_never_exceeds_cap(self, item_count: int) -> None:
        pages = count_pages(item_count)
        assert 0 <= pages <= MAX_PAGES
        assert pages * PAGE_SIZE >= min(item_count, PAGE_SIZE * MAX_PAGES)

    def test_thousand_games_show_ten_pages(self) -> None:
        """Games ranked past 200 cannot be reached."""
        view = LeaderboardView(make_games(1000))

        assert view.total_pages == 10

        reachable: list[AggregatedGame] = []
        for page in range(1, 12):
            view.go_to_page(page)
            reachable.extend(view.page_items())

        assert view.current_page == 10
        assert len({game.name for game in reachable}) == 200
        assert "Game 200" not in {game.name for game in reachable}

    def test_page_items(self) -> None:
        view = LeaderboardView(make_games(45))

        assert [game.name for game in view.page_items()][:2] == ["Game 0", "Game 1"]
        assert len(view.page_items()) == 20

        view.go_to_page(3)
        assert [game.name for game in view.page_items()] == [f"Game {i}" for i in range(40, 45)]
        assert view.page_offset == 40

    def test_go_to_page_clamps(self) -> None:
        view = LeaderboardView(make_games(30))

        assert view.go_to_page(0) == 1
        assert view.go_to_page(-5) == 1
        assert view.go_to_page(99) == 2

    def test_next_and_previous(self) -> None:
        view = LeaderboardView(make_games(50))

        assert view.has_previous is False
        assert view.has_next is True
        assert view.next_page() == 2
        assert view.next_page() == 3
        assert view.has_next is False
        assert view.next_page() == 3
        assert view.previous_page() == 2
        assert view.has_previous is True

    def test_empty_view(self) -> None:
        view = LeaderboardView()

        assert view.total_pages == 0
        assert view.page_items() == []
        assert view.go_to_page(3) == 1
        assert view.has_next is False


class TestLeaderboardView:
    """Interplay of sorting and pagination."""

    def test_toggle_resets_to_first_page(self) -> None:
        view = LeaderboardView(make_games(100))
        view.go_to_page(4)

        state = view.toggle_sort(SortField.PLAYER_COUNT)

        assert state == SortState(SortField.PLAYER_COUNT, SortDirection.DESCENDING)
        assert view.current_page == 1

    def test_toggle_same_field_twice(self) -> None:
        view = LeaderboardView(make_games(5))

        first = view.toggle_sort(SortField.TOTAL_HOURS)
        assert first.direction is SortDirection.ASCENDING
        assert [game.name for game in view.page_items()][0] == "Game 4"

        second = view.toggle_sort(SortField.TOTAL_HOURS)
        assert second.direction is SortDirection.DESCENDING
        assert [game.name for game in view.page_items()][0] == "Game 0"

    def test_load_resets_sort_and_page(self) -> None:
        view = LeaderboardView(make_games(60))
        view.toggle_sort(SortField.AVERAGE_HOURS)
        view.go_to_page(2)

        fresh = make_games(3)
        view.load(fresh)

        assert view.sort_state == SortState()
        assert view.current_page == 1
        assert view.games == fresh

    def test_games_returns_copy(self) -> None:
        view = LeaderboardView(make_games(3))
        games = view.games
        games.clear()
        assert len(view.games) == 3
