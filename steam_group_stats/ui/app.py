"""Main Textual application with screen management and reactive state."""

from dataclasses import dataclass, field, replace
from typing import Any, ClassVar, override

from textual.app import App, ComposeResult
from textual.binding import Binding, BindingType
from textual.reactive import reactive
from textual.widgets import Footer, Header

import structlog

from steam_group_stats.models.config import AppConfig
from steam_group_stats.models.game import AggregatedGame
from steam_group_stats.models.run import RunResult
from steam_group_stats.services.config import ConfigurationService
from steam_group_stats.services.group_stats import GroupStatsService


log = structlog.stdlib.get_logger()

DARK_THEME = "textual-dark"
LIGHT_THEME = "textual-light"


@dataclass
class AppState:
    """Application state container for reactive state management."""

    games: list[AggregatedGame] = field(default_factory=list)
    run_active: bool = False
    current_config: AppConfig | None = None
    last_result: RunResult | None = None


class GroupStatsApp(App[None]):
    """Main TUI application for Steam group game statistics.

    Holds the screens, the navigation stack and the aggregate of the last
    completed run, which the leaderboard screen reads.
    """

    CSS: ClassVar[str] = """
    Screen {
        background: $surface;
    }

    #main-content {
        width: 100%;
        height: 100%;
        padding: 1 2;
    }

    .title {
        text-align: center;
        text-style: bold;
        color: $primary;
        margin-bottom: 1;
    }
    """

    BINDINGS: ClassVar[list[BindingType]] = [
        Binding("q", "quit", "Quit", show=True, priority=True),
        Binding("escape", "go_back", "Back", show=True),
        Binding("d", "toggle_theme", "Dark/Light", show=True),
        Binding("?", "show_help", "Help", show=True),
    ]

    app_state: reactive[AppState] = reactive(AppState, init=False)

    _config_service: ConfigurationService | None
    _group_stats: GroupStatsService | None
    _navigation_stack: list[str]
    _app_context: Any  # ApplicationContext from steam_group_stats.main (avoid circular import)

    def __init__(
        self,
        config_service: ConfigurationService | None = None,
        group_stats: GroupStatsService | None = None,
    ) -> None:
        """Initialize the application with optional service injection.

        Args:
            config_service: Configuration service for loading/saving settings
            group_stats: Service running group analyses
        """
        super().__init__()
        self.title = "Steam Group Stats"  # type: ignore[assignment]
        self.sub_title = "Most played games across a Steam group"  # type: ignore[assignment]
        self._config_service = config_service
        self._group_stats = group_stats
        self._navigation_stack = []
        self._app_context = None
        self.app_state = AppState()

        log.info("GroupStatsApp initialized")

    @property
    def app_context(self) -> Any:
        """Get the application context."""
        return self._app_context

    def set_app_context(self, context: Any) -> None:
        self._app_context = context

    @property
    def config_service(self) -> ConfigurationService | None:
        """Get the configuration service."""
        return self._config_service

    @property
    def group_stats(self) -> GroupStatsService | None:
        """Get the analysis service, from injection or the application context."""
        if self._group_stats is not None:
            return self._group_stats
        if self._app_context is not None:
            return self._app_context.group_stats
        return None

    @property
    def navigation_stack(self) -> list[str]:
        """Get the current navigation stack."""
        return self._navigation_stack.copy()

    @override
    def compose(self) -> ComposeResult:
        yield Header()
        yield Footer()

    async def on_mount(self) -> None:
        """Load configuration and show the main menu."""
        log.info("Application mounted, loading configuration")

        if self._config_service:
            try:
                config = self._config_service.load_config()
                self.app_state = AppState(current_config=config)
                log.info("Configuration loaded successfully")
            except OSError as e:
                log.error("Failed to load configuration", error=str(e))

        await self.push_screen_with_tracking("main_menu")

    async def push_screen_with_tracking(self, screen_name: str) -> None:
        """Push a screen and track it in the navigation stack.

        Args:
            screen_name: Name of the screen to push
        """
        from steam_group_stats.ui.screens import get_screen_by_name

        screen = get_screen_by_name(screen_name)
        if screen:
            self._navigation_stack.append(screen_name)
            await self.push_screen(screen)
            log.info("Screen pushed", screen=screen_name, stack_depth=len(self._navigation_stack))
        else:
            log.warning("Unknown screen requested", screen=screen_name)

    async def action_go_back(self) -> None:
        """Navigate back to the previous screen."""
        if len(self._navigation_stack) > 1:
            current = self._navigation_stack.pop()
            log.info("Navigating back", from_screen=current, stack_depth=len(self._navigation_stack))
            _ = self.pop_screen()
        else:
            log.debug("Already at root screen, cannot go back")

    def action_toggle_theme(self) -> None:
        """Switch between the dark and light themes."""
        self.theme = LIGHT_THEME if self.theme == DARK_THEME else DARK_THEME
        log.info("Theme toggled", theme=self.theme)

    async def action_show_help(self) -> None:
        log.info("Help requested")
        self.notify(
            "1: Analyze group, 2: Leaderboard, 3: Settings, d: toggle theme, "
            "escape: back, q: quit"
        )

    def update_config(self, config: AppConfig) -> None:
        """Replace the configuration held in application state."""
        self.app_state = replace(self.app_state, current_config=config)
        log.info("Configuration state updated")

    def clear_games(self) -> None:
        """Drop the previous run's games when a new run starts."""
        self.app_state = replace(self.app_state, games=[], last_result=None)
        log.info("Leaderboard cleared")

    def record_result(self, result: RunResult) -> None:
        """Store the outcome of a finished run.

        A failed run carries no games, so recording it leaves the leaderboard empty.
        """
        self.app_state = replace(
            self.app_state,
            games=list(result.games),
            run_active=False,
            last_result=result,
        )
        log.info("Run result recorded", status=result.status.value, game_count=len(result.games))

    def set_run_active(self, active: bool) -> None:
        """Set whether an analysis run is in progress.

        Args:
            active: Whether a run is currently active
        """
        self.app_state = replace(self.app_state, run_active=active)
        log.info("Run state changed", active=active)
