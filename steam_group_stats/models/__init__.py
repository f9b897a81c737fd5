"""Data models for the Steam group stats application."""

from .config import AppConfig
from .game import AggregatedGame, GameEntry, PlayerLibrary
from .progress import ProgressState, WaveReport
from .run import BatchResult, RunResult, RunStatus
from .steam import OwnedGame, PlayerSummary, PUBLIC_VISIBILITY_STATE
from .view import SortDirection, SortField, SortState

__all__ = [
    "AggregatedGame",
    "AppConfig",
    "BatchResult",
    "GameEntry",
    "OwnedGame",
    "PlayerLibrary",
    "PlayerSummary",
    "ProgressState",
    "PUBLIC_VISIBILITY_STATE",
    "RunResult",
    "RunStatus",
    "SortDirection",
    "SortField",
    "SortState",
    "WaveReport",
]
