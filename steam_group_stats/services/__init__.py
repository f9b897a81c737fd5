"""Service layer for business logic and external integrations."""

from .aggregator import aggregate_games
from .batch_coordinator import BATCH_SIZE, BatchCoordinator, ProgressCallback
from .cancellation import CancellationToken, OperationCancelled
from .config import ConfigurationService, ValidationResult
from .errors import (
    AppError,
    ConfigurationError,
    ErrorCategory,
    ErrorHandlingService,
    ErrorSeverity,
    NetworkError,
    PlayerFetchFailure,
    ResolutionError,
    UserFriendlyError,
    ValidationError,
    get_error_service,
    handle_error,
)
from .group_stats import GroupStatsService
from .http_client import HttpClientService, redact_url
from .leaderboard import MAX_PAGES, PAGE_SIZE, LeaderboardView, next_sort_state, sort_games
from .member_resolver import MemberResolver, extract_group_id
from .player_fetcher import PlayerFetcher
from .steam_api import SteamApiClient

__all__ = [
    "AppError",
    "BATCH_SIZE",
    "BatchCoordinator",
    "CancellationToken",
    "ConfigurationError",
    "ConfigurationService",
    "ErrorCategory",
    "ErrorHandlingService",
    "ErrorSeverity",
    "GroupStatsService",
    "HttpClientService",
    "LeaderboardView",
    "MAX_PAGES",
    "MemberResolver",
    "NetworkError",
    "OperationCancelled",
    "PAGE_SIZE",
    "PlayerFetcher",
    "PlayerFetchFailure",
    "ProgressCallback",
    "ResolutionError",
    "SteamApiClient",
    "UserFriendlyError",
    "ValidationError",
    "ValidationResult",
    "aggregate_games",
    "extract_group_id",
    "get_error_service",
    "handle_error",
    "next_sort_state",
    "redact_url",
    "sort_games",
]
