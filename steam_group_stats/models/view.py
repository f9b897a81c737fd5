"""Leaderboard ordering models."""

from dataclasses import dataclass
from enum import Enum


class SortField(Enum):
    """Sortable leaderboard columns, valued by AggregatedGame attribute."""
    TOTAL_HOURS = "total_hours"
    PLAYER_COUNT = "player_count"
    AVERAGE_HOURS = "average_hours"


class SortDirection(Enum):
    ASCENDING = "asc"
    DESCENDING = "desc"

    def flipped(self) -> "SortDirection":
        if self is SortDirection.ASCENDING:
            return SortDirection.DESCENDING
        return SortDirection.ASCENDING


@dataclass(frozen=True)
class SortState:
    """Active sort column and direction."""
    field: SortField = SortField.TOTAL_HOURS
    direction: SortDirection = SortDirection.DESCENDING
