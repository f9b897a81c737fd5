"""Game-related data models."""

from dataclasses import dataclass

MINUTES_PER_HOUR = 60
HEADER_IMAGE_URL = "https://cdn.cloudflare.steamstatic.com/steam/apps/{appid}/header.jpg"


@dataclass(frozen=True)
class GameEntry:
    """One game in a single player's library."""
    game_id: int
    name: str
    hours_played: float

    @classmethod
    def from_minutes(cls, game_id: int, name: str, minutes: int | float) -> "GameEntry":
        """Build an entry from the raw minutes-played counter."""
        return cls(
            game_id=game_id,
            name=name,
            hours_played=max(float(minutes), 0.0) / MINUTES_PER_HOUR,
        )


@dataclass(frozen=True)
class PlayerLibrary:
    """Games owned by one group member with a public profile."""
    member_id: str
    display_name: str
    games: list[GameEntry]


@dataclass(frozen=True)
class AggregatedGame:
    """Per-game totals across every fetched player library.

    The average is derived from the totals on access so it can never drift
    from the pair it is computed from.
    """
    game_id: int
    name: str
    total_hours: float
    player_count: int

    @property
    def average_hours(self) -> float:
        return self.total_hours / self.player_count

    @property
    def header_image_url(self) -> str:
        return HEADER_IMAGE_URL.format(appid=self.game_id)
