"""Analysis screen for starting and monitoring a group analysis run."""

from typing import ClassVar, override

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, Vertical
from textual.message import Message
from textual.widgets import Button, Input, Label, Static
from textual.worker import Worker, WorkerState

import structlog

from steam_group_stats.models.config import AppConfig
from steam_group_stats.models.progress import WaveReport
from steam_group_stats.models.run import RunResult, RunStatus
from steam_group_stats.services.errors import ConfigurationError
from steam_group_stats.ui.widgets.progress import ActivityLogWidget, AnalysisProgressWidget

from .base import BaseScreen

log = structlog.stdlib.get_logger()


class AnalysisScreen(BaseScreen):
    """Screen for running an analysis of a Steam group.

    The user enters a Web API key and a group id or URL. Progress is shown
    once per wave. Leaving the screen cancels the run without reporting an
    error.
    """

    class WaveCompleted(Message):
        """Message posted after each wave of member fetches."""

        report: WaveReport

        def __init__(self, report: WaveReport) -> None:
            super().__init__()
            self.report = report

    class AnalysisComplete(Message):
        """Message posted when a run finishes with games."""

        result: RunResult

        def __init__(self, result: RunResult) -> None:
            super().__init__()
            self.result = result

    class AnalysisFailed(Message):
        """Message posted when a run fails with a user-facing message."""

        result: RunResult

        def __init__(self, result: RunResult) -> None:
            super().__init__()
            self.result = result

        @property
        def error(self) -> str:
            return self.result.error or "Analysis failed"

    SCREEN_TITLE: ClassVar[str] = "Analyze Group"
    SCREEN_NAME: ClassVar[str] = "analysis"

    CSS: ClassVar[str] = """
    AnalysisScreen {
        align: center middle;
    }

    #analysis-container {
        width: 90;
        height: auto;
        max-height: 95%;
        padding: 1 2;
        border: solid $primary;
        background: $surface;
    }

    #analysis-title {
        text-align: center;
        text-style: bold;
        color: $primary;
        margin-bottom: 1;
    }

    .form-group {
        margin-bottom: 1;
        height: auto;
    }

    .form-label {
        margin-bottom: 0;
        color: $text;
    }

    .form-input {
        width: 100%;
    }

    .form-hint {
        color: $text-muted;
        text-style: italic;
        margin-top: 0;
    }

    #error-message {
        color: $error;
        text-style: bold;
        margin-top: 1;
        display: none;
    }

    #error-message.has-error {
        display: block;
    }

    #button-row {
        margin-top: 1;
        height: auto;
        align: center middle;
    }

    #button-row Button {
        margin: 0 1;
    }
    """

    BINDINGS: ClassVar[list[Binding]] = [
        Binding("escape", "go_back", "Back", show=True),
        Binding("ctrl+s", "start_analysis", "Start", show=True),
        Binding("ctrl+x", "cancel_analysis", "Cancel", show=True),
    ]

    _analysis_worker: Worker[None] | None
    _is_running: bool

    def __init__(self) -> None:
        super().__init__()
        self._analysis_worker = None
        self._is_running = False

    @override
    def compose(self) -> ComposeResult:
        with Container(id="analysis-container"):
            yield Static("🎮 Analyze Steam Group", id="analysis-title")

            with Vertical(id="analysis-form"):
                with Vertical(classes="form-group"):
                    yield Label("Steam Web API key:", classes="form-label")
                    yield Input(
                        placeholder="Your Steam Web API key",
                        password=True,
                        id="input-api-key",
                        classes="form-input",
                    )
                    yield Static(
                        "Get one at https://steamcommunity.com/dev/apikey",
                        classes="form-hint",
                    )

                with Vertical(classes="form-group"):
                    yield Label("Group:", classes="form-label")
                    yield Input(
                        placeholder="group id or https://steamcommunity.com/groups/<id>",
                        id="input-group",
                        classes="form-input",
                    )

            yield AnalysisProgressWidget(title="Progress", id="analysis-progress")
            yield ActivityLogWidget(id="activity-log")
            yield Static("", id="error-message")

            with Horizontal(id="button-row"):
                yield Button("Analyze", id="btn-start", variant="primary")
                yield Button("Cancel", id="btn-cancel", variant="error", disabled=True)
                yield Button("Leaderboard", id="btn-results", variant="success")
                yield Button("Back", id="btn-back", variant="default")

    @override
    async def on_mount(self) -> None:
        """Populate the form from the stored configuration."""
        await super().on_mount()
        config = self.game_app.app_state.current_config
        if config is None and self.game_app.config_service:
            config = self.game_app.config_service.load_config()
        if config is not None:
            self._populate_form(config)

    @override
    async def on_unmount(self) -> None:
        """Cancel a run still in flight when the screen goes away."""
        if self._is_running:
            self._cancel_run(notify=False)
        await super().on_unmount()

    def _populate_form(self, config: AppConfig) -> None:
        self.query_one("#input-api-key", Input).value = config.api_key
        self.query_one("#input-group", Input).value = config.last_group

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id

        if button_id == "btn-start":
            await self._start_analysis()
        elif button_id == "btn-cancel":
            self._cancel_run(notify=True)
        elif button_id == "btn-results":
            await self.game_app.push_screen_with_tracking("leaderboard")
        elif button_id == "btn-back":
            await self.action_go_back()

    async def on_input_submitted(self, event: Input.Submitted) -> None:
        """Enter in either field starts a run."""
        _ = event
        await self._start_analysis()

    async def _start_analysis(self) -> None:
        """Validate the form, store the credential and start the worker."""
        service = self.game_app.group_stats
        if service is None:
            self.notify_error("Analysis service is not available")
            return

        api_key = self.query_one("#input-api-key", Input).value.strip()
        group_input = self.query_one("#input-group", Input).value.strip()

        if not api_key or not group_input:
            self._show_error("Please enter both a Steam Web API key and a group")
            return

        self._remember_run(api_key, group_input)
        self.game_app.clear_games()

        log.info("Starting analysis from screen")
        self._show_error(None)
        self.query_one("#analysis-progress", AnalysisProgressWidget).reset()
        self.query_one("#activity-log", ActivityLogWidget).clear_lines()
        self.query_one("#analysis-progress", AnalysisProgressWidget).set_status("Loading group members...")
        self._set_running(True)

        self._analysis_worker = self.run_worker(
            self._run_analysis(group_input, api_key),
            name="analysis_worker",
            exclusive=True,
        )

    def _remember_run(self, api_key: str, group_input: str) -> None:
        config_service = self.game_app.config_service
        if config_service is None:
            return
        try:
            config = config_service.remember_run(api_key, group_input)
            self.game_app.update_config(config)
        except (ConfigurationError, OSError) as e:
            _ = self.handle_exception(e, "save API key")

    async def _run_analysis(self, group_input: str, api_key: str) -> None:
        """Run the analysis (executed in a worker)."""
        service = self.game_app.group_stats
        if service is None:
            return

        result = await service.run_analysis(
            group_input,
            api_key,
            on_progress=lambda report: self.post_message(self.WaveCompleted(report)),
        )

        if result.status is RunStatus.COMPLETED:
            self.post_message(self.AnalysisComplete(result))
        elif result.status is RunStatus.FAILED:
            self.post_message(self.AnalysisFailed(result))
        else:
            log.info("Analysis worker finished after cancellation")

    def on_analysis_screen_wave_completed(self, event: WaveCompleted) -> None:
        self.query_one("#analysis-progress", AnalysisProgressWidget).update_progress(event.report.progress)
        self.query_one("#activity-log", ActivityLogWidget).add_lines(event.report.log_lines)

    def on_analysis_screen_analysis_complete(self, event: AnalysisComplete) -> None:
        result = event.result
        self._set_running(False)
        self.game_app.record_result(result)

        progress_widget = self.query_one("#analysis-progress", AnalysisProgressWidget)
        progress_widget.set_status(
            f"✓ {len(result.games)} games from {result.players_included} public profiles"
        )
        self.notify_success(f"Analysis complete: {len(result.games)} games")
        log.info("Analysis shown", games=len(result.games), players=result.players_included)

    def on_analysis_screen_analysis_failed(self, event: AnalysisFailed) -> None:
        self._set_running(False)
        self.game_app.record_result(event.result)
        self.query_one("#analysis-progress", AnalysisProgressWidget).set_status("✗ Analysis failed")
        self._show_error(event.error)
        log.warning("Analysis failed on screen", error=event.error)

    def _cancel_run(self, notify: bool) -> None:
        """Cancel the active run; nothing is reported as an error."""
        if not self._is_running:
            return

        log.info("Cancelling analysis from screen")
        service = self.game_app.group_stats
        if service is not None:
            service.cancel()

        if not notify:
            self._is_running = False
            self.game_app.set_run_active(False)
            return

        self._set_running(False)
        self.query_one("#analysis-progress", AnalysisProgressWidget).reset()
        self.notify_warning("Analysis cancelled")

    def _set_running(self, running: bool) -> None:
        self._is_running = running
        if self.is_mounted:
            self.query_one("#btn-start", Button).disabled = running
            self.query_one("#btn-cancel", Button).disabled = not running
            self.query_one("#input-api-key", Input).disabled = running
            self.query_one("#input-group", Input).disabled = running
        self.game_app.set_run_active(running)

    def _show_error(self, message: str | None) -> None:
        error_widget = self.query_one("#error-message", Static)
        if message:
            error_widget.update(message)
            _ = error_widget.add_class("has-error")
        else:
            error_widget.update("")
            _ = error_widget.remove_class("has-error")

    async def action_start_analysis(self) -> None:
        await self._start_analysis()

    async def action_cancel_analysis(self) -> None:
        self._cancel_run(notify=True)

    def on_worker_state_changed(self, event: Worker.StateChanged) -> None:
        """Reset controls if the worker dies."""
        if event.worker.name != "analysis_worker":
            return
        log.debug("Analysis worker state changed", state=event.state)
        if event.state in (WorkerState.CANCELLED, WorkerState.ERROR) and self._is_running:
            self._set_running(False)
            if event.state == WorkerState.ERROR and event.worker.error is not None:
                _ = self.handle_exception(event.worker.error, "run analysis")
