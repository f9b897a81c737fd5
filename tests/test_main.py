"""Tests for the command-line entry point."""

import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from steam_group_stats.main import (
    EXIT_CANCELLED,
    EXIT_FAILED,
    EXIT_OK,
    EXIT_USAGE,
    ApplicationContext,
    exit_code_for,
    format_leaderboard_page,
    main,
    parse_arguments,
    run_headless,
    summarize_result,
)
from steam_group_stats.models import AggregatedGame, RunResult, RunStatus
from steam_group_stats.services.group_stats import GroupStatsService
from steam_group_stats.services.leaderboard import LeaderboardView


GAMES = [
    AggregatedGame(game_id=10, name="X", total_hours=3.0, player_count=2),
    AggregatedGame(game_id=20, name="Y", total_hours=0.5, player_count=1),
]


class TestParseArguments:

    def test_defaults(self) -> None:
        args = parse_arguments([])

        assert args.config is None
        assert args.log_level == "INFO"
        assert args.log_dir is None
        assert args.no_tui is False
        assert args.group is None
        assert args.api_key is None

    def test_headless_flags(self, tmp_path: Path) -> None:
        args = parse_arguments([
            "--no-tui",
            "--group", "https://steamcommunity.com/groups/mygroup",
            "--api-key", "KEY",
            "--config", str(tmp_path / "config.json"),
            "--log-level", "DEBUG",
            "--log-dir", str(tmp_path / "logs"),
        ])

        assert args.no_tui is True
        assert args.group == "https://steamcommunity.com/groups/mygroup"
        assert args.api_key == "KEY"
        assert args.config == tmp_path / "config.json"
        assert args.log_level == "DEBUG"
        assert args.log_dir == tmp_path / "logs"

    def test_invalid_log_level_is_rejected(self) -> None:
        with pytest.raises(SystemExit):
            parse_arguments(["--log-level", "LOUD"])


class TestSummaries:

    def test_completed_run(self) -> None:
        lines = summarize_result(RunResult(RunStatus.COMPLETED, GAMES, None, 3, 2))

        assert lines[0] == "2 games from 2 public profiles out of 3 members"
        assert lines[2].split()[:2] == ["1", "X"]
        assert lines[3].split()[:2] == ["2", "Y"]

    def test_completed_run_without_games(self) -> None:
        lines = summarize_result(RunResult(RunStatus.COMPLETED, [], None, 0, 0))

        assert lines == ["0 games from 0 public profiles out of 0 members"]

    def test_failed_run(self) -> None:
        result = RunResult(RunStatus.FAILED, error="Error fetching members of group 'x'")
        assert summarize_result(result) == ["Error: Error fetching members of group 'x'"]

    def test_cancelled_run(self) -> None:
        assert summarize_result(RunResult(RunStatus.CANCELLED)) == ["Analysis cancelled"]

    @pytest.mark.parametrize(
        ("status", "code"),
        [(RunStatus.COMPLETED, EXIT_OK), (RunStatus.FAILED, EXIT_FAILED), (RunStatus.CANCELLED, EXIT_CANCELLED)],
    )
    def test_exit_codes(self, status: RunStatus, code: int) -> None:
        assert exit_code_for(RunResult(status)) == code

    def test_page_lists_first_twenty(self) -> None:
        games = [AggregatedGame(i, f"Game {i}", float(100 - i), 1) for i in range(30)]

        lines = format_leaderboard_page(LeaderboardView(games))

        assert len(lines) == 21
        assert "Game 0" in lines[1]
        assert "Game 19" in lines[-1]

    def test_long_names_are_truncated(self) -> None:
        lines = format_leaderboard_page(LeaderboardView([AggregatedGame(1, "N" * 80, 1.0, 1)]))
        assert "N" * 41 not in lines[1]


class TestApplicationContext:

    def test_services_are_built_once(self, tmp_path: Path) -> None:
        context = ApplicationContext(config_path=tmp_path / "config.json")

        assert context.group_stats is context.group_stats
        assert context.steam_api is context.steam_api
        assert context.config_service.config_path == tmp_path / "config.json"

    def test_http_client_uses_configured_timeout(self, tmp_path: Path) -> None:
        config_path = tmp_path / "config.json"
        config_path.write_text(
            json.dumps({"api_key": "", "last_group": "", "request_timeout": 12.0, "log_level": "INFO"}),
            encoding="utf-8",
        )

        context = ApplicationContext(config_path=config_path)

        assert context.http_client.timeout == 12.0
        assert context.http_client.proxy_url is None

    def test_request_shutdown_cancels_active_run(self, tmp_path: Path) -> None:
        context = ApplicationContext(config_path=tmp_path / "config.json")
        group_stats = AsyncMock(spec=GroupStatsService)
        context._group_stats = group_stats

        context.request_shutdown()

        assert context.shutdown_requested is True
        group_stats.cancel.assert_called_once()

    @pytest.mark.asyncio
    async def test_cleanup_without_services(self, tmp_path: Path) -> None:
        context = ApplicationContext(config_path=tmp_path / "config.json")
        await context.cleanup()


class TestRunHeadless:

    @pytest.mark.asyncio
    async def test_prints_leaderboard_and_stores_key(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        config_path = tmp_path / "config.json"
        context = ApplicationContext(config_path=config_path)
        group_stats = AsyncMock(spec=GroupStatsService)
        group_stats.run_analysis.return_value = RunResult(RunStatus.COMPLETED, GAMES, None, 3, 2)
        context._group_stats = group_stats

        with patch("steam_group_stats.main.setup_signal_handlers"):
            code = await run_headless(context, "mygroup", "KEY")

        assert code == EXIT_OK
        out = capsys.readouterr().out
        assert "2 games from 2 public profiles out of 3 members" in out
        stored = json.loads(config_path.read_text(encoding="utf-8"))
        assert stored["api_key"] == "KEY"
        assert stored["last_group"] == "mygroup"
        group_stats.run_analysis.assert_awaited_once()
        assert group_stats.run_analysis.await_args.args[:2] == ("mygroup", "KEY")

    @pytest.mark.asyncio
    async def test_failure_goes_to_stderr(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        context = ApplicationContext(config_path=tmp_path / "config.json")
        group_stats = AsyncMock(spec=GroupStatsService)
        group_stats.run_analysis.return_value = RunResult(RunStatus.FAILED, error="Please enter an API key.")
        context._group_stats = group_stats

        with patch("steam_group_stats.main.setup_signal_handlers"):
            code = await run_headless(context, "mygroup", None)

        assert code == EXIT_FAILED
        assert "Error: Please enter an API key." in capsys.readouterr().err


def test_headless_without_group_is_a_usage_error(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as exc_info:
        main(["--no-tui", "--config", str(tmp_path / "config.json")])

    assert exc_info.value.code == EXIT_USAGE
