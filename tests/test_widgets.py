"""Tests for the analysis progress widgets."""

from hypothesis import given, strategies as st

from steam_group_stats.models import ProgressState
from steam_group_stats.ui.widgets.progress import format_progress


class TestFormatProgress:

    def test_nothing_shown_before_members_are_known(self) -> None:
        assert format_progress(ProgressState()) == ""

    def test_partial_progress(self) -> None:
        assert format_progress(ProgressState(processed=20, total=45)) == "Processed: 20/45 members (44%)"

    def test_complete(self) -> None:
        assert format_progress(ProgressState(processed=3, total=3)) == "Processed: 3/3 members (100%)"

    @given(st.integers(min_value=1, max_value=10_000).flatmap(
        lambda total: st.tuples(st.integers(min_value=0, max_value=total), st.just(total))
    ))
    def test_percentage_stays_in_range(self, counts: tuple[int, int]) -> None:
        processed, total = counts
        progress = ProgressState(processed=processed, total=total)

        assert 0.0 <= progress.percentage <= 100.0
        assert f"{processed}/{total}" in format_progress(progress)
