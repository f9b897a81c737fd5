"""Progress tracking data models."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ProgressState:
    """Members attempted so far out of the group total."""
    processed: int = 0
    total: int = 0

    @property
    def percentage(self) -> float:
        if self.total <= 0:
            return 0.0
        return min(self.processed / self.total * 100, 100.0)


@dataclass(frozen=True)
class WaveReport:
    """Progress emitted once a wave of concurrent fetches has settled."""
    wave_number: int
    progress: ProgressState
    log_lines: list[str] = field(default_factory=list)
