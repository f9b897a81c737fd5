"""Tests for the per-member library fetch."""

import asyncio
from unittest.mock import AsyncMock

import httpx
import pytest
from hypothesis import given, settings, strategies as st

from steam_group_stats.models.steam import OwnedGame, PlayerSummary
from steam_group_stats.services.cancellation import CancellationToken, OperationCancelled
from steam_group_stats.services.player_fetcher import PlayerFetcher
from steam_group_stats.services.steam_api import SteamApiClient


def make_steam_api(
    visibility: int = 3,
    persona_name: str | None = "Alice",
    games: list[OwnedGame] | None = None,
) -> AsyncMock:
    steam_api = AsyncMock(spec=SteamApiClient)
    steam_api.get_player_summary.return_value = PlayerSummary("1", visibility, persona_name)
    steam_api.get_owned_games.return_value = games if games is not None else [
        OwnedGame(appid=10, name="X", playtime_minutes=120),
    ]
    return steam_api


class TestPlayerFetcher:
    """Visibility gating and failure absorption."""

    @pytest.mark.asyncio
    async def test_public_profile_returns_library(self) -> None:
        steam_api = make_steam_api(games=[
            OwnedGame(appid=10, name="X", playtime_minutes=120),
            OwnedGame(appid=20, name="Y", playtime_minutes=30),
        ])

        library = await PlayerFetcher(steam_api).fetch("1", "KEY", CancellationToken())

        assert library is not None
        assert library.member_id == "1"
        assert library.display_name == "Alice"
        assert [(g.game_id, g.name, g.hours_played) for g in library.games] == [
            (10, "X", 2.0),
            (20, "Y", 0.5),
        ]
        steam_api.get_player_summary.assert_awaited_once_with("1", "KEY")
        steam_api.get_owned_games.assert_awaited_once_with("1", "KEY")

    @given(st.integers(min_value=0, max_value=10).filter(lambda v: v != 3))
    @settings(max_examples=20)
    def test_non_public_profile_returns_none(self, visibility: int) -> None:
        steam_api = make_steam_api(visibility=visibility)

        library = asyncio.run(PlayerFetcher(steam_api).fetch("1", "KEY", CancellationToken()))

        assert library is None
        steam_api.get_owned_games.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_profile_returns_none(self) -> None:
        steam_api = make_steam_api()
        steam_api.get_player_summary.return_value = None

        assert await PlayerFetcher(steam_api).fetch("1", "KEY", CancellationToken()) is None
        steam_api.get_owned_games.assert_not_called()

    @pytest.mark.asyncio
    async def test_display_name_falls_back_to_member_id(self) -> None:
        steam_api = make_steam_api(persona_name=None)

        library = await PlayerFetcher(steam_api).fetch("765", "KEY", CancellationToken())

        assert library is not None
        assert library.display_name == "765"

    @pytest.mark.asyncio
    async def test_empty_library_is_still_a_library(self) -> None:
        steam_api = make_steam_api(games=[])

        library = await PlayerFetcher(steam_api).fetch("1", "KEY", CancellationToken())

        assert library is not None
        assert library.games == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [
            httpx.ConnectError("refused"),
            httpx.ReadTimeout("slow"),
            ValueError("bad json"),
            KeyError("appid"),
        ],
    )
    async def test_summary_failure_is_absorbed(self, error: Exception) -> None:
        steam_api = make_steam_api()
        steam_api.get_player_summary.side_effect = error

        assert await PlayerFetcher(steam_api).fetch("1", "KEY", CancellationToken()) is None

    @pytest.mark.asyncio
    async def test_owned_games_failure_is_absorbed(self) -> None:
        steam_api = make_steam_api()
        request = httpx.Request("GET", "https://api.steampowered.com/")
        steam_api.get_owned_games.side_effect = httpx.HTTPStatusError(
            "500", request=request, response=httpx.Response(500, request=request)
        )

        assert await PlayerFetcher(steam_api).fetch("1", "KEY", CancellationToken()) is None

    @pytest.mark.asyncio
    async def test_cancelled_token_propagates(self) -> None:
        steam_api = make_steam_api()
        token = CancellationToken()
        token.cancel()

        with pytest.raises(OperationCancelled):
            await PlayerFetcher(steam_api).fetch("1", "KEY", token)

        steam_api.get_owned_games.assert_not_called()

    @pytest.mark.asyncio
    async def test_cancel_between_calls_propagates(self) -> None:
        steam_api = make_steam_api()
        token = CancellationToken()

        async def summary_then_cancel(steam_id: str, api_key: str) -> PlayerSummary:
            token.cancel()
            return PlayerSummary(steam_id, 3, "Alice")

        steam_api.get_player_summary.side_effect = summary_then_cancel

        with pytest.raises(OperationCancelled):
            await PlayerFetcher(steam_api).fetch("1", "KEY", token)
