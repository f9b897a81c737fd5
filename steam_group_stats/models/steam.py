"""Records decoded from Steam Web API payloads."""

from dataclasses import dataclass

# communityvisibilitystate value Steam uses for a public profile
PUBLIC_VISIBILITY_STATE = 3


@dataclass(frozen=True)
class PlayerSummary:
    """Subset of GetPlayerSummaries used to gate library access."""
    steam_id: str
    visibility_state: int
    persona_name: str | None = None

    @property
    def is_public(self) -> bool:
        return self.visibility_state == PUBLIC_VISIBILITY_STATE


@dataclass(frozen=True)
class OwnedGame:
    """One GetOwnedGames record."""
    appid: int
    name: str
    playtime_minutes: int
