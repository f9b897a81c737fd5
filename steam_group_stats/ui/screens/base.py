"""Base screen class with common functionality for all screens."""

from typing import TYPE_CHECKING, ClassVar

from textual.binding import Binding
from textual.screen import Screen

import structlog

from steam_group_stats.services.errors import (
    ErrorSeverity,
    UserFriendlyError,
    get_error_service,
    handle_error,
)

if TYPE_CHECKING:
    from steam_group_stats.ui.app import GroupStatsApp

log = structlog.stdlib.get_logger()


class BaseScreen(Screen[None]):
    """Base class for the application's screens.

    Gives every screen the back binding, typed access to the
    ``GroupStatsApp`` and notification helpers that go through the error
    handling service.
    """

    BINDINGS: ClassVar[list[Binding]] = [
        Binding("escape", "go_back", "Back", show=True),
    ]

    # Subclasses override these
    SCREEN_TITLE: ClassVar[str] = "Screen"
    SCREEN_NAME: ClassVar[str] = "base"

    def __init__(self, name: str | None = None) -> None:
        super().__init__(name=name or self.SCREEN_NAME)

    @property
    def game_app(self) -> "GroupStatsApp":
        """The parent application.

        Raises:
            RuntimeError: If the screen is not attached to a GroupStatsApp
        """
        from steam_group_stats.ui.app import GroupStatsApp

        if isinstance(self.app, GroupStatsApp):
            return self.app
        raise RuntimeError("Screen is not attached to a GroupStatsApp")

    async def on_mount(self) -> None:
        log.info("Screen mounted", screen=self.SCREEN_NAME, title=self.SCREEN_TITLE)

    async def on_unmount(self) -> None:
        log.info("Screen unmounted", screen=self.SCREEN_NAME)

    def on_screen_resume(self) -> None:
        """Called when the screen is shown again after another was popped."""
        log.debug("Screen resumed", screen=self.SCREEN_NAME)

    def on_screen_suspend(self) -> None:
        log.debug("Screen suspended", screen=self.SCREEN_NAME)

    async def action_go_back(self) -> None:
        await self.game_app.action_go_back()

    def notify_error(self, message: str) -> None:
        self.notify(message, severity="error")
        log.error("User notification", message=message, screen=self.SCREEN_NAME)

    def notify_success(self, message: str) -> None:
        self.notify(message, severity="information")
        log.info("User notification", message=message, screen=self.SCREEN_NAME)

    def notify_warning(self, message: str) -> None:
        self.notify(message, severity="warning")
        log.warning("User notification", message=message, screen=self.SCREEN_NAME)

    def handle_exception(
        self,
        error: Exception,
        operation: str,
        context: dict[str, str | int | float | bool] | None = None,
    ) -> UserFriendlyError:
        """Convert an exception, log it and notify the user.

        Args:
            error: The exception that occurred
            operation: Description of the operation that failed
            context: Additional context information

        Returns:
            The UserFriendlyError that was shown
        """
        user_error = handle_error(
            error=error,
            operation=operation,
            component=self.SCREEN_NAME,
            context=context,
        )
        message = get_error_service().create_user_message(user_error, include_suggestions=False)

        if user_error.severity == ErrorSeverity.WARNING:
            self.notify_warning(message)
        else:
            self.notify_error(message)

        return user_error
