"""Reduces player libraries into ranked per-game statistics."""

from collections.abc import Iterable
from dataclasses import dataclass

from ..models.game import AggregatedGame, PlayerLibrary


@dataclass
class _GameAccumulator:
    game_id: int
    total_hours: float
    player_count: int


def aggregate_games(libraries: Iterable[PlayerLibrary]) -> list[AggregatedGame]:
    """Merge every library's games by exact name.

    The first occurrence of a name fixes its game id. Each occurrence adds its
    hours and counts as one more player, including repeats from the same
    library. The result is ordered by total hours, descending; ties keep the
    order in which names were first seen.

    Args:
        libraries: Player libraries in the order they were collected

    Returns:
        One AggregatedGame per distinct game name
    """
    # dict keeps insertion order, which is the tie-break for the final sort
    accumulators: dict[str, _GameAccumulator] = {}

    for library in libraries:
        for entry in library.games:
            accumulator = accumulators.get(entry.name)
            if accumulator is None:
                accumulators[entry.name] = _GameAccumulator(
                    game_id=entry.game_id,
                    total_hours=entry.hours_played,
                    player_count=1,
                )
            else:
                accumulator.total_hours += entry.hours_played
                accumulator.player_count += 1

    games = [
        AggregatedGame(
            game_id=accumulator.game_id,
            name=name,
            total_hours=accumulator.total_hours,
            player_count=accumulator.player_count,
        )
        for name, accumulator in accumulators.items()
    ]
    return sorted(games, key=lambda game: game.total_hours, reverse=True)
