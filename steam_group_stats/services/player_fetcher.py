"""Fetches one member's visibility-gated game library."""

import structlog

from ..models.game import GameEntry, PlayerLibrary
from .cancellation import CancellationToken, OperationCancelled
from .errors import PlayerFetchFailure
from .steam_api import SteamApiClient

log = structlog.stdlib.get_logger()


class PlayerFetcher:
    """Fetches profile and owned games for a single member.

    A private profile, a missing profile or any fetch failure all yield
    ``None`` so that one member can never abort a batch. Only cancellation
    propagates.
    """

    def __init__(self, steam_api: SteamApiClient) -> None:
        self._steam_api = steam_api

    async def fetch(
        self,
        member_id: str,
        api_key: str,
        token: CancellationToken,
    ) -> PlayerLibrary | None:
        try:
            summary = await token.guard(self._steam_api.get_player_summary(member_id, api_key))
            if summary is None or not summary.is_public:
                log.debug(
                    "Profile not public, skipping",
                    member_id=member_id,
                    visibility_state=summary.visibility_state if summary else None,
                )
                return None

            owned_games = await token.guard(self._steam_api.get_owned_games(member_id, api_key))

        except OperationCancelled:
            raise
        except Exception as e:
            failure = PlayerFetchFailure(member_id, original_error=e)
            log.warning(
                "Player fetch failed",
                member_id=member_id,
                technical_details=failure.technical_details,
            )
            return None

        games = [
            GameEntry.from_minutes(game.appid, game.name, game.playtime_minutes)
            for game in owned_games
        ]
        return PlayerLibrary(
            member_id=member_id,
            display_name=summary.persona_name or member_id,
            games=games,
        )
