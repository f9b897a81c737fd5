"""Screen components for the TUI application."""

from .base import BaseScreen
from .main_menu import MainMenuScreen
from .analysis import AnalysisScreen
from .leaderboard import LeaderboardScreen
from .settings import SettingsScreen

# Screen registry for navigation
_SCREEN_REGISTRY: dict[str, type[BaseScreen]] = {
    "main_menu": MainMenuScreen,
    "analysis": AnalysisScreen,
    "leaderboard": LeaderboardScreen,
    "settings": SettingsScreen,
}


def get_screen_by_name(name: str) -> BaseScreen | None:
    """Get a screen instance by its registered name.

    Args:
        name: The registered name of the screen

    Returns:
        A new instance of the screen, or None if not found
    """
    screen_class = _SCREEN_REGISTRY.get(name)
    if screen_class:
        return screen_class()
    return None


def register_screen(name: str, screen_class: type[BaseScreen]) -> None:
    """Register a screen class with a name for navigation."""
    _SCREEN_REGISTRY[name] = screen_class


def get_registered_screens() -> list[str]:
    return list(_SCREEN_REGISTRY.keys())


__all__ = [
    "AnalysisScreen",
    "BaseScreen",
    "LeaderboardScreen",
    "MainMenuScreen",
    "SettingsScreen",
    "get_registered_screens",
    "get_screen_by_name",
    "register_screen",
]
