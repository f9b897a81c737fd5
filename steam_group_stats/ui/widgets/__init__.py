"""Custom widgets for the TUI application."""

from .progress import (
    ActivityLogWidget,
    AnalysisProgressWidget,
    format_progress,
)

__all__ = [
    "ActivityLogWidget",
    "AnalysisProgressWidget",
    "format_progress",
]
