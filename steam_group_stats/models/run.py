"""Outcome models for batch fetches and full analysis runs."""

from dataclasses import dataclass, field
from enum import Enum

from .game import AggregatedGame, PlayerLibrary


class RunStatus(Enum):
    """How an analysis run ended."""
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass(frozen=True)
class BatchResult:
    """Libraries collected by the batch coordinator.

    A cancelled batch is a distinct outcome; its libraries must not be
    aggregated or shown.
    """
    libraries: list[PlayerLibrary]
    cancelled: bool = False


@dataclass(frozen=True)
class RunResult:
    """Final result of one analysis run."""
    status: RunStatus
    games: list[AggregatedGame] = field(default_factory=list)
    error: str | None = None
    members_total: int = 0
    players_included: int = 0
