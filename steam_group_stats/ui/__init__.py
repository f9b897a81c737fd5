"""User interface components using Textual framework."""

from .app import AppState, GroupStatsApp
from .screens import (
    BaseScreen,
    MainMenuScreen,
    get_registered_screens,
    get_screen_by_name,
    register_screen,
)

__all__ = [
    "AppState",
    "BaseScreen",
    "GroupStatsApp",
    "MainMenuScreen",
    "get_registered_screens",
    "get_screen_by_name",
    "register_screen",
]
