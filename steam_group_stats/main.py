"""Main entry point for the Steam Group Stats application.

This module provides the application entry point with:
- Command-line argument parsing
- Application initialization and dependency injection
- A headless mode that runs one analysis and prints the first page
- Signal handling that cancels the active run
"""

import argparse
import asyncio
import signal
import sys
from collections.abc import Sequence
from pathlib import Path

import structlog

from steam_group_stats import __version__
from steam_group_stats.models import AppConfig, RunResult, RunStatus
from steam_group_stats.services.config import ConfigurationService
from steam_group_stats.services.errors import ConfigurationError
from steam_group_stats.services.group_stats import GroupStatsService
from steam_group_stats.services.http_client import HttpClientService
from steam_group_stats.services.leaderboard import LeaderboardView
from steam_group_stats.services.logging import setup_logging
from steam_group_stats.services.steam_api import SteamApiClient


log = structlog.stdlib.get_logger()

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2
EXIT_CANCELLED = 130  # Standard exit code for SIGINT


class ApplicationContext:
    """Container for application services and state.

    Services are built lazily from the loaded configuration and shared by the
    TUI and the headless runner.
    """

    def __init__(
        self,
        config_path: Path | None = None,
        log_level: str = "INFO",
        log_dir: Path | None = None,
    ) -> None:
        """Initialize the application context.

        Args:
            config_path: Path to configuration file
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (None for console only)
        """
        self._config_path: Path | None = config_path
        self._log_level: str = log_level
        self._log_dir: Path | None = log_dir

        self._config_service: ConfigurationService | None = None
        self._http_client: HttpClientService | None = None
        self._steam_api: SteamApiClient | None = None
        self._group_stats: GroupStatsService | None = None

        self._config: AppConfig | None = None
        self._shutdown_requested: bool = False

    @property
    def config_service(self) -> ConfigurationService:
        if self._config_service is None:
            self._config_service = ConfigurationService(config_path=self._config_path)
        return self._config_service

    @property
    def config(self) -> AppConfig:
        """Get the current application configuration."""
        if self._config is None:
            self._config = self.config_service.load_config()
        return self._config

    @property
    def http_client(self) -> HttpClientService:
        if self._http_client is None:
            self._http_client = HttpClientService(
                timeout=self.config.request_timeout,
                proxy_url=self.config.proxy_url,
                verify_ssl=self.config.verify_ssl,
            )
        return self._http_client

    @property
    def steam_api(self) -> SteamApiClient:
        if self._steam_api is None:
            self._steam_api = SteamApiClient(self.http_client)
        return self._steam_api

    @property
    def group_stats(self) -> GroupStatsService:
        """Get the analysis service (lazy initialization)."""
        if self._group_stats is None:
            self._group_stats = GroupStatsService(self.steam_api)
        return self._group_stats

    def request_shutdown(self) -> None:
        """Request shutdown; cancels the active run, if any."""
        self._shutdown_requested = True
        log.info("Shutdown requested")
        if self._group_stats is not None:
            self._group_stats.cancel()

    @property
    def shutdown_requested(self) -> bool:
        return self._shutdown_requested

    async def cleanup(self) -> None:
        """Cancel any active run and close connections."""
        log.info("Cleaning up application resources")

        if self._group_stats is not None:
            self._group_stats.cancel()

        if self._http_client is not None:
            await self._http_client.close()

        log.info("Application cleanup complete")


class ParsedArgs:
    """Type-safe container for parsed command-line arguments."""

    def __init__(
        self,
        config: Path | None,
        log_level: str,
        log_dir: Path | None,
        no_tui: bool,
        group: str | None,
        api_key: str | None,
    ) -> None:
        self.config: Path | None = config
        self.log_level: str = log_level
        self.log_dir: Path | None = log_dir
        self.no_tui: bool = no_tui
        self.group: str | None = group
        self.api_key: str | None = api_key


def parse_arguments(argv: Sequence[str] | None = None) -> ParsedArgs:
    """Parse command-line arguments.

    Args:
        argv: Arguments to parse; defaults to ``sys.argv[1:]``

    Returns:
        Parsed arguments container
    """
    parser = argparse.ArgumentParser(
        prog="steam-group-stats",
        description="Rank the games a Steam group plays the most",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  steam-group-stats                                  Start the TUI application
  steam-group-stats --log-level DEBUG                Start with debug logging
  steam-group-stats --no-tui --group mygroup         Print the top games of a group
  steam-group-stats --config ./my-config.json        Use custom config file
        """
    )

    _ = parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    _ = parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: ~/.config/steam-group-stats/config.json)"
    )

    _ = parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="INFO",
        help="Set the logging level (default: INFO)"
    )

    _ = parser.add_argument(
        "--log-dir",
        type=Path,
        default=None,
        help="Directory for log files (default: ./logs with the TUI, console only without)"
    )

    _ = parser.add_argument(
        "--no-tui",
        action="store_true",
        help="Run one analysis without the TUI and print the first leaderboard page"
    )

    _ = parser.add_argument(
        "--group",
        default=None,
        help="Steam group id or community URL to analyze (with --no-tui)"
    )

    _ = parser.add_argument(
        "--api-key",
        default=None,
        help="Steam Web API key (default: the key stored in the configuration file)"
    )

    ns = parser.parse_args(argv)

    config_val: Path | None = ns.config
    log_level_val: str = ns.log_level if ns.log_level else "INFO"
    log_dir_val: Path | None = ns.log_dir
    no_tui_val: bool = bool(ns.no_tui)
    group_val: str | None = ns.group
    api_key_val: str | None = ns.api_key

    return ParsedArgs(
        config=config_val,
        log_level=log_level_val,
        log_dir=log_dir_val,
        no_tui=no_tui_val,
        group=group_val,
        api_key=api_key_val,
    )


def setup_signal_handlers(context: ApplicationContext) -> None:
    """Cancel the active run on SIGINT/SIGTERM.

    Must be called from inside the running event loop.

    Args:
        context: Application context for shutdown coordination
    """
    loop = asyncio.get_running_loop()

    def signal_handler(signum: int) -> None:
        signal_name = signal.Signals(signum).name
        log.info("Received signal", signal=signal_name)
        context.request_shutdown()

    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, signal_handler, signum)
        except NotImplementedError:
            # Windows event loops do not support signal handlers
            log.debug("Signal handler not supported", signal=signal.Signals(signum).name)
            return

    log.debug("Signal handlers registered")


def format_leaderboard_page(view: LeaderboardView) -> list[str]:
    """Plain-text lines for the current page of ``view``."""
    lines = [f"{'#':>4}  {'Game':<40} {'Total h':>10} {'Avg h':>8} {'Players':>8}"]
    offset = view.page_offset
    for index, game in enumerate(view.page_items()):
        lines.append(
            f"{offset + index + 1:>4}  {game.name[:40]:<40} "
            f"{game.total_hours:>10.1f} {game.average_hours:>8.1f} {game.player_count:>8}"
        )
    return lines


def summarize_result(result: RunResult) -> list[str]:
    """Human-readable lines describing a finished run."""
    if result.status is RunStatus.FAILED:
        return [f"Error: {result.error}"]
    if result.status is RunStatus.CANCELLED:
        return ["Analysis cancelled"]

    view = LeaderboardView(result.games)
    lines = [
        f"{len(result.games)} games from {result.players_included} public profiles "
        f"out of {result.members_total} members",
    ]
    if result.games:
        lines.extend(format_leaderboard_page(view))
    return lines


def exit_code_for(result: RunResult) -> int:
    if result.status is RunStatus.COMPLETED:
        return EXIT_OK
    if result.status is RunStatus.CANCELLED:
        return EXIT_CANCELLED
    return EXIT_FAILED


async def run_headless(context: ApplicationContext, group: str, api_key: str | None) -> int:
    """Run one analysis and print the first leaderboard page.

    Args:
        context: Application context with lazily built services
        group: Group id or community URL
        api_key: Web API key; the stored key is used when None

    Returns:
        Exit code
    """
    setup_signal_handlers(context)
    key = api_key if api_key is not None else context.config.api_key

    try:
        _ = context.config_service.remember_run(key, group)
    except (ConfigurationError, OSError) as e:
        log.warning("Could not store API key", error=str(e))

    try:
        result = await context.group_stats.run_analysis(
            group,
            key,
            on_progress=lambda report: log.info(
                "Wave completed",
                wave=report.wave_number,
                processed=report.progress.processed,
                total=report.progress.total,
            ),
        )
    finally:
        await context.cleanup()

    output = sys.stdout if result.status is not RunStatus.FAILED else sys.stderr
    for line in summarize_result(result):
        print(line, file=output)
    return exit_code_for(result)


async def run_tui(context: ApplicationContext) -> int:
    """Run the TUI application.

    Args:
        context: Application context with initialized services

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    from steam_group_stats.ui.app import GroupStatsApp

    log.info("Starting TUI application")

    try:
        app = GroupStatsApp(config_service=context.config_service)
        app.set_app_context(context)
        await app.run_async()

        log.info("TUI application exited normally")
        return EXIT_OK

    except Exception as e:
        log.error("TUI application error", error=str(e), exc_info=True)
        return EXIT_FAILED
    finally:
        await context.cleanup()


def main(argv: Sequence[str] | None = None) -> None:
    """Main entry point for the application."""
    args = parse_arguments(argv)

    log_dir = args.log_dir
    if log_dir is None and not args.no_tui:
        log_dir = Path("logs")

    _ = setup_logging(
        log_level=args.log_level,
        log_dir=log_dir,
        tui_mode=not args.no_tui,
    )

    log.info(
        "Starting Steam Group Stats",
        version=__version__,
        log_level=args.log_level,
        config_path=str(args.config) if args.config else "default"
    )

    context = ApplicationContext(
        config_path=args.config,
        log_level=args.log_level,
        log_dir=log_dir
    )

    try:
        if args.no_tui:
            group = args.group or context.config.last_group
            if not group:
                print("No group given; use --group <id or URL>", file=sys.stderr)
                exit_code = EXIT_USAGE
            else:
                log.info("Running in non-TUI mode")
                exit_code = asyncio.run(run_headless(context, group, args.api_key))
        else:
            exit_code = asyncio.run(run_tui(context))

    except KeyboardInterrupt:
        log.info("Application interrupted by user")
        exit_code = EXIT_CANCELLED

    except Exception as e:
        log.error("Unhandled exception", error=str(e), exc_info=True)
        print(f"Fatal error: {e}", file=sys.stderr)
        exit_code = EXIT_FAILED

    log.info("Application exiting", exit_code=exit_code)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
