"""Steam community and Web API endpoints used by an analysis run."""

from typing import Any

import structlog
from bs4 import BeautifulSoup

from ..models.steam import OwnedGame, PlayerSummary
from .http_client import HttpClientService

log = structlog.stdlib.get_logger()

COMMUNITY_BASE_URL = "https://steamcommunity.com"
WEB_API_BASE_URL = "https://api.steampowered.com"


def parse_member_ids(document: str) -> list[str]:
    """Extract member ids from a group ``memberslistxml`` document, in order.

    html.parser lowercases tag names, hence ``steamid64``.
    """
    soup = BeautifulSoup(document, "html.parser")
    member_ids: list[str] = []
    for tag in soup.find_all("steamid64"):
        value = tag.get_text(strip=True)
        if value.isdigit():
            member_ids.append(value)
    return member_ids


def parse_player_summary(payload: dict[str, Any]) -> PlayerSummary | None:
    """Decode the first player of a GetPlayerSummaries response."""
    players = payload.get("response", {}).get("players") or []
    if not players:
        return None
    player = players[0]
    return PlayerSummary(
        steam_id=str(player.get("steamid", "")),
        visibility_state=int(player.get("communityvisibilitystate", 0)),
        persona_name=player.get("personaname") or None,
    )


def parse_owned_games(payload: dict[str, Any]) -> list[OwnedGame]:
    """Decode the games of a GetOwnedGames response.

    Private libraries come back as an empty ``response`` object.
    """
    raw_games = payload.get("response", {}).get("games") or []
    return [
        OwnedGame(
            appid=int(raw["appid"]),
            name=str(raw.get("name") or f"App {raw['appid']}"),
            playtime_minutes=int(raw.get("playtime_forever") or 0),
        )
        for raw in raw_games
    ]


class SteamApiClient:
    """Thin wrapper over the three Steam endpoints the pipeline needs."""

    def __init__(self, http_client: HttpClientService) -> None:
        self.http_client: HttpClientService = http_client

    async def get_group_members(self, group_id: str) -> list[str]:
        """Fetch the ordered member ids of a group (first member page)."""
        url = f"{COMMUNITY_BASE_URL}/groups/{group_id}/memberslistxml/"
        document = await self.http_client.get_text(url, params={"xml": "1"})
        member_ids = parse_member_ids(document)
        log.info("Group members fetched", group_id=group_id, member_count=len(member_ids))
        return member_ids

    async def get_player_summary(self, steam_id: str, api_key: str) -> PlayerSummary | None:
        url = f"{WEB_API_BASE_URL}/ISteamUser/GetPlayerSummaries/v2/"
        payload = await self.http_client.get_json(url, params={"key": api_key, "steamids": steam_id})
        return parse_player_summary(payload)

    async def get_owned_games(self, steam_id: str, api_key: str) -> list[OwnedGame]:
        url = f"{WEB_API_BASE_URL}/IPlayerService/GetOwnedGames/v1/"
        payload = await self.http_client.get_json(
            url,
            params={
                "key": api_key,
                "steamid": steam_id,
                "include_appinfo": "1",
                "include_played_free_games": "1",
            },
        )
        return parse_owned_games(payload)
