"""Runs one group analysis end to end: resolve, fetch, aggregate."""

import uuid

import structlog

from ..models.game import AggregatedGame
from ..models.progress import ProgressState, WaveReport
from ..models.run import RunResult, RunStatus
from .aggregator import aggregate_games
from .batch_coordinator import BatchCoordinator, ProgressCallback
from .cancellation import CancellationToken
from .errors import AppError, ValidationError, get_error_service, handle_error
from .member_resolver import MemberResolver, extract_group_id
from .player_fetcher import PlayerFetcher
from .steam_api import SteamApiClient

log = structlog.stdlib.get_logger()


class GroupStatsService:
    """Owns the state of the current analysis run.

    At most one run is active. Starting a run cancels the previous one, and
    state updates coming from a run that is no longer active are ignored, so
    a cancelled run leaves no error, no loading flag and no games behind.
    """

    def __init__(
        self,
        steam_api: SteamApiClient,
        resolver: MemberResolver | None = None,
        coordinator: BatchCoordinator | None = None,
    ) -> None:
        self._resolver = resolver or MemberResolver(steam_api)
        self._coordinator = coordinator or BatchCoordinator(PlayerFetcher(steam_api))

        self._active_token: CancellationToken | None = None
        self._progress = ProgressState()
        self._activity_log: list[str] = []
        self._games: list[AggregatedGame] = []
        self._last_error: str | None = None
        self._loading = False

    @property
    def progress(self) -> ProgressState:
        return self._progress

    @property
    def activity_log(self) -> list[str]:
        return self._activity_log.copy()

    @property
    def games(self) -> list[AggregatedGame]:
        return self._games.copy()

    @property
    def last_error(self) -> str | None:
        return self._last_error

    @property
    def is_loading(self) -> bool:
        return self._loading

    def cancel(self) -> None:
        """Cancel the active run, if any, without surfacing anything."""
        token = self._active_token
        if token is None:
            return
        token.cancel()
        self._active_token = None
        self._loading = False
        log.info("Active run cancelled")

    async def run_analysis(
        self,
        group_input: str,
        api_key: str,
        on_progress: ProgressCallback | None = None,
    ) -> RunResult:
        """Analyze every member library of a group.

        Args:
            group_input: Group identifier or community URL
            api_key: Steam Web API key
            on_progress: Called after each wave while this run is active

        Returns:
            COMPLETED with the ranked games, FAILED with a user-facing message,
            or CANCELLED with neither
        """
        if self._active_token is not None:
            log.info("Cancelling previous run before starting a new one")
            self._active_token.cancel()

        run_id = uuid.uuid4().hex[:8]
        token = CancellationToken(name=run_id)
        self._active_token = token
        self._reset_state()

        structlog.contextvars.bind_contextvars(run_id=run_id)
        try:
            return await self._execute(token, group_input, api_key, on_progress)
        finally:
            structlog.contextvars.unbind_contextvars("run_id")

    async def _execute(
        self,
        token: CancellationToken,
        group_input: str,
        api_key: str,
        on_progress: ProgressCallback | None,
    ) -> RunResult:
        if not api_key.strip():
            return self._fail(token, ValidationError("Please enter a Steam Web API key", field="api_key"))

        group_id = extract_group_id(group_input)
        if not group_id:
            return self._fail(token, ValidationError("Please enter a Steam group ID or URL", field="group"))

        log.info("Analysis started", group_id=group_id)

        try:
            member_ids = await self._resolver.resolve(group_input, token)
        except AppError as e:
            if token.cancelled:
                return self._cancelled(token)
            return self._fail(token, e)

        if token.cancelled:
            return self._cancelled(token)

        if self._is_active(token):
            self._progress = ProgressState(processed=0, total=len(member_ids))

        def handle_wave(report: WaveReport) -> None:
            if not self._is_active(token):
                return
            self._progress = report.progress
            self._activity_log.extend(report.log_lines)
            if on_progress is not None:
                on_progress(report)

        batch = await self._coordinator.run(member_ids, api_key.strip(), token, on_progress=handle_wave)
        if batch.cancelled or token.cancelled:
            return self._cancelled(token)

        games = aggregate_games(batch.libraries)

        if self._is_active(token):
            self._games = games
            self._loading = False
            self._active_token = None

        log.info(
            "Analysis completed",
            group_id=group_id,
            members=len(member_ids),
            players=len(batch.libraries),
            games=len(games),
        )
        return RunResult(
            status=RunStatus.COMPLETED,
            games=games,
            members_total=len(member_ids),
            players_included=len(batch.libraries),
        )

    def _is_active(self, token: CancellationToken) -> bool:
        return self._active_token is token and not token.cancelled

    def _reset_state(self) -> None:
        self._progress = ProgressState()
        self._activity_log = []
        self._games = []
        self._last_error = None
        self._loading = True

    def _fail(self, token: CancellationToken, error: Exception) -> RunResult:
        user_error = handle_error(error, operation="run_analysis", component="group_stats")
        message = get_error_service().create_user_message(user_error, include_suggestions=False)
        if self._is_active(token):
            self._last_error = message
            self._loading = False
            self._active_token = None
        return RunResult(status=RunStatus.FAILED, error=message)

    def _cancelled(self, token: CancellationToken) -> RunResult:
        if self._active_token is token:
            self._active_token = None
            self._loading = False
        log.info("Analysis cancelled")
        return RunResult(status=RunStatus.CANCELLED)
