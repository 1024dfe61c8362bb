"""
Immutable state update utilities using Pydantic model_copy.

These functions never mutate the input state - they always return new
state objects with the requested changes applied.
"""

from scorekeeper.logic.enums import TeamSlot
from scorekeeper.logic.state import GameState, Player, PlayerLedger, RoundHistoryEntry, Teams

_PLAYER_FIELDS = set(Player.model_fields)


def add_team_scores(teams: Teams, deltas: dict[TeamSlot, int]) -> Teams:
    """
    Return new teams with each slot's delta added to its score.

    Args:
        teams: Current teams
        deltas: Signed score change per slot; missing slots are unchanged

    Returns:
        New Teams with updated scores

    """
    new_teams = teams
    for slot, delta in deltas.items():
        team = new_teams.get(slot)
        new_teams = new_teams.replace(slot, team.model_copy(update={"score": team.score + delta}))
    return new_teams


def append_history(game_state: GameState, entry: RoundHistoryEntry) -> GameState:
    """Return new game state with entry appended to the round history."""
    return game_state.model_copy(update={"history": (*game_state.history, entry)})


def update_player(ledger: PlayerLedger, player_id: str, **updates: object) -> PlayerLedger:
    """
    Return new ledger with the player identified by player_id updated.

    Args:
        ledger: Current ledger
        player_id: Player to update
        **updates: Fields to update on the player

    Returns:
        New PlayerLedger with the updated player in its original position

    Raises:
        ValueError: If the player is unknown or update fields are invalid

    """
    invalid_fields = set(updates) - _PLAYER_FIELDS
    if invalid_fields:
        raise ValueError(f"Invalid player fields: {invalid_fields}")
    players = list(ledger.players)
    for i, p in enumerate(players):
        if p.player_id == player_id:
            # validate through the constructor so wins <= games_played still holds
            players[i] = Player.model_validate({**p.model_dump(), **updates})
            return ledger.model_copy(update={"players": tuple(players)})
    raise ValueError(f"Unknown player {player_id!r}")
