"""Bounded-concurrency fan-out of player fetches in sequential waves."""

import asyncio
from collections.abc import Callable

import structlog

from ..models.game import PlayerLibrary
from ..models.progress import ProgressState, WaveReport
from ..models.run import BatchResult
from .cancellation import CancellationToken, OperationCancelled
from .player_fetcher import PlayerFetcher

log = structlog.stdlib.get_logger()

BATCH_SIZE = 20

ProgressCallback = Callable[[WaveReport], None]


def format_library_line(library: PlayerLibrary) -> str:
    """Activity log line for one fetched member."""
    return f"{library.display_name}: {len(library.games)} games"


class BatchCoordinator:
    """Drives the player fetcher over all members, one wave at a time.

    Waves run strictly one after another; the fetches inside a wave run
    concurrently and all settle before the next wave starts. Progress is
    reported once per wave, never per fetch.
    """

    def __init__(self, fetcher: PlayerFetcher, batch_size: int = BATCH_SIZE) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be a positive integer")
        self._fetcher = fetcher
        self.batch_size = batch_size

    async def run(
        self,
        member_ids: list[str],
        api_key: str,
        token: CancellationToken,
        on_progress: ProgressCallback | None = None,
    ) -> BatchResult:
        """Fetch every member's library.

        Args:
            member_ids: Members to fetch, in group order
            api_key: Steam Web API key
            token: Cancellation token shared with every fetch
            on_progress: Called after each completed wave

        Returns:
            Libraries in settlement order, or a cancelled result
        """
        total = len(member_ids)
        processed = 0
        collected: list[PlayerLibrary] = []

        log.info("Starting batch fetch", total_members=total, batch_size=self.batch_size)

        for wave_number, start in enumerate(range(0, total, self.batch_size), start=1):
            if token.cancelled:
                log.info("Batch fetch cancelled before wave", wave=wave_number, processed=processed)
                return BatchResult(libraries=[], cancelled=True)

            wave = member_ids[start:start + self.batch_size]
            settled = await self._run_wave(wave, api_key, token)

            if token.cancelled:
                log.info("Batch fetch cancelled during wave", wave=wave_number, processed=processed)
                return BatchResult(libraries=[], cancelled=True)

            processed += len(wave)
            collected.extend(settled)

            log.debug(
                "Wave completed",
                wave=wave_number,
                wave_size=len(wave),
                fetched=len(settled),
                progress=f"{processed}/{total}",
            )

            if on_progress is not None:
                on_progress(WaveReport(
                    wave_number=wave_number,
                    progress=ProgressState(processed=processed, total=total),
                    log_lines=[format_library_line(library) for library in settled],
                ))

        log.info("Batch fetch completed", total_members=total, players_fetched=len(collected))
        return BatchResult(libraries=collected, cancelled=False)

    async def _run_wave(
        self,
        wave: list[str],
        api_key: str,
        token: CancellationToken,
    ) -> list[PlayerLibrary]:
        """Run one wave and return its libraries in the order they settled."""
        settled: list[PlayerLibrary] = []

        async def fetch_one(member_id: str) -> None:
            library = await self._fetcher.fetch(member_id, api_key, token)
            if library is not None:
                settled.append(library)

        outcomes = await asyncio.gather(
            *(fetch_one(member_id) for member_id in wave),
            return_exceptions=True,
        )

        for member_id, outcome in zip(wave, outcomes):
            if isinstance(outcome, BaseException) and not isinstance(
                outcome, (OperationCancelled, asyncio.CancelledError)
            ):
                log.warning("Unexpected fetch error", member_id=member_id, error=str(outcome))

        return settled
