"""
Player ledger: cross-game statistics keyed by player identity.

The ledger is the only writer of Player statistics. Lifetime scores track
the net of all currently applied rounds; games played and wins change once
per completed game.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import uuid4

from scorekeeper.logic.exceptions import InvalidInputError
from scorekeeper.logic.state import Player, PlayerLedger
from scorekeeper.logic.state_utils import update_player

if TYPE_CHECKING:
    from collections.abc import Mapping

    from scorekeeper.logic.state import Team


def _clean_name(name: str) -> str:
    cleaned = name.strip()
    if not cleaned:
        raise InvalidInputError("player name must not be blank")
    return cleaned


def get_player(ledger: PlayerLedger, player_id: str) -> Player:
    """Look up a player by id. Raises InvalidInputError if unknown."""
    player = ledger.find(player_id)
    if player is None:
        raise InvalidInputError(f"unknown player {player_id!r}")
    return player


def create_player(
    ledger: PlayerLedger,
    name: str,
    player_id: str | None = None,
) -> tuple[PlayerLedger, Player]:
    """
    Add a player with zeroed statistics.

    A fresh uuid4 identity is assigned unless player_id is given.
    Returns (new_ledger, player).
    """
    player_id = player_id or str(uuid4())
    if ledger.find(player_id) is not None:
        raise InvalidInputError(f"player {player_id!r} already exists")
    player = Player(player_id=player_id, name=_clean_name(name))
    return ledger.model_copy(update={"players": (*ledger.players, player)}), player


def rename_player(ledger: PlayerLedger, player_id: str, name: str) -> PlayerLedger:
    """Return new ledger with the player's display name changed."""
    get_player(ledger, player_id)
    return update_player(ledger, player_id, name=_clean_name(name))


def delete_player(ledger: PlayerLedger, player_id: str) -> PlayerLedger:
    """Remove a player permanently together with their statistics."""
    get_player(ledger, player_id)
    return ledger.model_copy(update={"players": tuple(p for p in ledger.players if p.player_id != player_id)})


def apply_round_delta(ledger: PlayerLedger, player_scores: Mapping[str, int]) -> PlayerLedger:
    """
    Add each signed amount to the matching player's lifetime score.

    Called with a round's player scores on commit and with the negated
    scores on undo. Ids not in the ledger (deleted players) are skipped.
    """
    new_ledger = ledger
    for player_id, amount in player_scores.items():
        player = new_ledger.find(player_id)
        if player is None or amount == 0:
            continue
        new_ledger = update_player(new_ledger, player_id, lifetime_score=player.lifetime_score + amount)
    return new_ledger


def negate_scores(player_scores: Mapping[str, int]) -> dict[str, int]:
    return {player_id: -amount for player_id, amount in player_scores.items()}


def record_game_completion(ledger: PlayerLedger, winning_team: Team, losing_team: Team) -> PlayerLedger:
    """
    Count a finished game for all four participants and a win for the winners.

    Does not detect repeated calls for the same game; the lifecycle
    controller invokes it once per completed game.
    """
    new_ledger = ledger
    for team, won in ((winning_team, True), (losing_team, False)):
        for player_id in team.player_ids:
            player = new_ledger.find(player_id)
            if player is None:
                continue
            new_ledger = update_player(
                new_ledger,
                player_id,
                games_played=player.games_played + 1,
                wins=player.wins + 1 if won else player.wins,
            )
    return new_ledger
