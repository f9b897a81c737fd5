"""Settings screen for configuring application settings."""

from dataclasses import replace
from typing import ClassVar, override

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, Vertical
from textual.widgets import Button, Input, Label, Select, Static, Switch

import structlog

from steam_group_stats.models.config import AppConfig
from steam_group_stats.services.config import VALID_LOG_LEVELS, ConfigurationService
from steam_group_stats.services.errors import ConfigurationError

from .base import BaseScreen

log = structlog.stdlib.get_logger()


LOG_LEVELS: list[tuple[str, str]] = [(level, level) for level in VALID_LOG_LEVELS]


def validate_settings_form(values: dict[str, str]) -> dict[str, str]:
    """Validate raw form values.

    Args:
        values: Field name to raw text for api_key, request_timeout,
            proxy_url and log_level

    Returns:
        Field name to error message; empty when the form is valid
    """
    errors: dict[str, str] = {}

    api_key = values.get("api_key", "").strip()
    if api_key and not api_key.isalnum():
        errors["api_key"] = "API key must contain only letters and digits"

    timeout_str = values.get("request_timeout", "").strip()
    if not timeout_str:
        errors["request_timeout"] = "Request timeout is required"
    else:
        try:
            timeout = float(timeout_str)
            if timeout < 1:
                errors["request_timeout"] = "Must be at least 1 second"
            elif timeout > 120:
                errors["request_timeout"] = "Cannot exceed 120 seconds"
        except ValueError:
            errors["request_timeout"] = "Must be a valid number"

    proxy_url = values.get("proxy_url", "").strip()
    if proxy_url and not proxy_url.startswith(("http://", "https://")):
        errors["proxy_url"] = "Proxy must start with http:// or https://"

    if values.get("log_level", "") not in VALID_LOG_LEVELS:
        errors["log_level"] = f"Must be one of: {', '.join(VALID_LOG_LEVELS)}"

    return errors


class SettingsScreen(BaseScreen):
    """Settings screen for the API key and HTTP options.

    Changes to the timeout, proxy and SSL options apply to the next start of
    the application; the API key is used by the next run.
    """

    SCREEN_TITLE: ClassVar[str] = "Settings"
    SCREEN_NAME: ClassVar[str] = "settings"

    CSS: ClassVar[str] = """
    SettingsScreen {
        align: center middle;
    }

    #settings-container {
        width: 80;
        height: auto;
        max-height: 90%;
        padding: 1 2;
        border: solid $primary;
        background: $surface;
    }

    #settings-title {
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

    .validation-error {
        color: $error;
        margin-top: 0;
    }

    .validation-success {
        color: $success;
        margin-top: 0;
    }

    #button-row {
        margin-top: 2;
        height: auto;
        align: center middle;
    }

    #button-row Button {
        margin: 0 1;
    }

    #validation-status {
        text-align: center;
        margin-top: 1;
        height: 1;
    }
    """

    BINDINGS: ClassVar[list[Binding]] = [
        Binding("escape", "go_back", "Back", show=True),
        Binding("ctrl+s", "save_settings", "Save", show=True),
        Binding("ctrl+r", "reset_settings", "Reset", show=True),
    ]

    _original_config: AppConfig | None
    _has_changes: bool
    _validation_errors: dict[str, str]

    def __init__(self) -> None:
        super().__init__()
        self._original_config = None
        self._has_changes = False
        self._validation_errors = {}

    @override
    def compose(self) -> ComposeResult:
        with Container(id="settings-container"):
            yield Static("⚙️ Settings", id="settings-title")

            with Vertical(id="settings-form"):
                with Vertical(classes="form-group"):
                    yield Label("Steam Web API key:", classes="form-label")
                    yield Input(
                        placeholder="Your Steam Web API key",
                        password=True,
                        id="input-api-key",
                        classes="form-input",
                    )
                    yield Static(
                        "Stored in the configuration file",
                        classes="form-hint",
                    )

                with Vertical(classes="form-group"):
                    yield Label("Request Timeout (seconds):", classes="form-label")
                    yield Input(
                        placeholder="30",
                        id="input-timeout",
                        classes="form-input",
                        type="number",
                    )
                    yield Static("Per-request timeout (1-120 seconds)", classes="form-hint")

                with Vertical(classes="form-group"):
                    yield Label("Proxy URL:", classes="form-label")
                    yield Input(
                        placeholder="https://proxy.example/?url=",
                        id="input-proxy",
                        classes="form-input",
                    )
                    yield Static(
                        "Optional prefix; the encoded Steam URL is appended to it",
                        classes="form-hint",
                    )

                with Horizontal(classes="form-group"):
                    yield Label("Verify SSL certificates ", classes="form-label")
                    yield Switch(value=True, id="switch-verify-ssl")

                with Vertical(classes="form-group"):
                    yield Label("Log Level:", classes="form-label")
                    yield Select(
                        LOG_LEVELS,
                        id="select-log-level",
                        allow_blank=False,
                        value="INFO",
                    )

            yield Static("", id="validation-status")

            with Horizontal(id="button-row"):
                yield Button("Save", id="btn-save", variant="primary")
                yield Button("Reset", id="btn-reset", variant="default")
                yield Button("Cancel", id="btn-cancel", variant="error")

    @override
    async def on_mount(self) -> None:
        """Load the current configuration into the form."""
        await super().on_mount()
        config_service = self._get_config_service()
        if config_service is None:
            config_service = ConfigurationService()
        config = config_service.load_config()
        self._original_config = config
        self._populate_form(config)
        log.info("Settings loaded", has_api_key=bool(config.api_key))

    def _get_config_service(self) -> ConfigurationService | None:
        try:
            return self.game_app.config_service
        except RuntimeError:
            return None

    def _populate_form(self, config: AppConfig) -> None:
        self.query_one("#input-api-key", Input).value = config.api_key
        self.query_one("#input-timeout", Input).value = str(config.request_timeout)
        self.query_one("#input-proxy", Input).value = config.proxy_url or ""
        self.query_one("#switch-verify-ssl", Switch).value = config.verify_ssl
        log_select = self.query_one("#select-log-level", Select)  # type: ignore[type-arg]
        log_select.value = config.log_level

        self._has_changes = False
        self._update_validation_status()

    def _get_form_values(self) -> dict[str, str]:
        log_select = self.query_one("#select-log-level", Select)  # type: ignore[type-arg]
        log_value = log_select.value
        return {
            "api_key": self.query_one("#input-api-key", Input).value,
            "request_timeout": self.query_one("#input-timeout", Input).value,
            "proxy_url": self.query_one("#input-proxy", Input).value,
            "log_level": str(log_value) if log_value else "INFO",
        }

    def _update_validation_status(self) -> None:
        status_widget = self.query_one("#validation-status", Static)
        self._validation_errors = validate_settings_form(self._get_form_values())

        if not self._validation_errors:
            if self._has_changes:
                status_widget.update("✓ Valid - Press Save to apply changes")
                _ = status_widget.remove_class("validation-error")
                _ = status_widget.add_class("validation-success")
            else:
                status_widget.update("")
                _ = status_widget.remove_class("validation-error")
                _ = status_widget.remove_class("validation-success")
        else:
            error_msg = next(iter(self._validation_errors.values()))
            status_widget.update(f"✗ {error_msg}")
            _ = status_widget.add_class("validation-error")
            _ = status_widget.remove_class("validation-success")

    def _build_config_from_form(self) -> AppConfig | None:
        """Build an AppConfig from form values, or None if invalid."""
        values = self._get_form_values()
        if validate_settings_form(values):
            return None

        base = self._original_config or AppConfig(
            api_key="", last_group="", request_timeout=30.0, log_level="INFO"
        )
        proxy_url = values["proxy_url"].strip()
        return replace(
            base,
            api_key=values["api_key"].strip(),
            request_timeout=float(values["request_timeout"]),
            proxy_url=proxy_url or None,
            verify_ssl=self.query_one("#switch-verify-ssl", Switch).value,
            log_level=values["log_level"],
        )

    async def on_input_changed(self, event: Input.Changed) -> None:
        self._has_changes = True
        self._update_validation_status()
        log.debug("Input changed", input_id=event.input.id)

    async def on_select_changed(self, event: Select.Changed) -> None:
        self._has_changes = True
        self._update_validation_status()
        log.debug("Select changed", select_id=str(event.select.id), value=str(event.value))

    async def on_switch_changed(self, event: Switch.Changed) -> None:
        self._has_changes = True
        self._update_validation_status()
        log.debug("Switch changed", switch_id=str(event.switch.id), value=event.value)

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        button_id = event.button.id

        if button_id == "btn-save":
            await self._save_settings()
        elif button_id == "btn-reset":
            await self._reset_settings()
        elif button_id == "btn-cancel":
            await self._cancel_settings()

    async def _save_settings(self) -> None:
        config = self._build_config_from_form()
        if not config:
            self.notify_error("Cannot save: Please fix validation errors")
            return

        config_service = self._get_config_service()
        if config_service:
            try:
                config_service.save_config(config)
            except (ConfigurationError, OSError) as e:
                _ = self.handle_exception(e, "save settings")
                return
            self.game_app.update_config(config)
            self._original_config = config
            self._has_changes = False
            self._update_validation_status()
            self.notify_success("Settings saved successfully")
            log.info("Settings saved", has_api_key=bool(config.api_key))
        else:
            self._original_config = config
            self._has_changes = False
            self._update_validation_status()
            self.notify_success("Settings updated (not persisted)")

    async def _reset_settings(self) -> None:
        if self._original_config:
            self._populate_form(self._original_config)
            self.notify_success("Settings reset to last saved values")
            log.info("Settings reset")

    async def _cancel_settings(self) -> None:
        if self._has_changes:
            log.info("Discarding unsaved changes")
        await self.action_go_back()

    async def action_save_settings(self) -> None:
        await self._save_settings()

    async def action_reset_settings(self) -> None:
        await self._reset_settings()
