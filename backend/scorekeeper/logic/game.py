"""
Game state store for Binokel.

Owns the single GameState value: starting a game, committing rounds,
undoing the most recent round and detecting the winner. Every operation
takes the current state and returns a new one.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from scorekeeper.logic.enums import TEAM_PRIORITY, LifecycleAction, TeamSlot
from scorekeeper.logic.exceptions import IllegalTransitionError, InvalidInputError
from scorekeeper.logic.scoring import compute_round
from scorekeeper.logic.settings import NUM_TEAMS, PLAYERS_PER_TEAM
from scorekeeper.logic.state import GameState, PlayerRef, RoundHistoryEntry, Team, Teams
from scorekeeper.logic.state_utils import add_team_scores, append_history

if TYPE_CHECKING:
    from collections.abc import Sequence

    from scorekeeper.logic.settings import GameSettings
    from scorekeeper.logic.types import RoundInput


def build_team(first: PlayerRef, second: PlayerRef) -> Team:
    """Create a zero-score team named after its two players."""
    return Team(name=f"{first.name} & {second.name}", players=(first, second))


def _validate_teams(teams: Sequence[Team]) -> None:
    if len(teams) != NUM_TEAMS:
        raise InvalidInputError(f"a game needs exactly {NUM_TEAMS} teams, got {len(teams)}")
    seen: set[str] = set()
    for team in teams:
        if len(team.players) != PLAYERS_PER_TEAM:
            raise InvalidInputError(
                f"team {team.name!r} needs exactly {PLAYERS_PER_TEAM} players, got {len(team.players)}",
            )
        for player_id in team.player_ids:
            if player_id in seen:
                raise InvalidInputError(f"player {player_id!r} is seated more than once")
            seen.add(player_id)


def start_game(teams: Sequence[Team], target_score: int) -> GameState:
    """
    Start a new game with scores reset to 0 and an empty history.

    Raises InvalidInputError unless there are exactly two teams of two
    distinct players each, all four players distinct, and a positive target.
    """
    _validate_teams(teams)
    if target_score <= 0:
        raise InvalidInputError(f"target score must be positive, got {target_score}")
    team1, team2 = (team.model_copy(update={"score": 0}) for team in teams)
    return GameState(teams=Teams(team1=team1, team2=team2), target_score=target_score)


def add_round(
    game_state: GameState | None,
    round_input: RoundInput,
    settings: GameSettings | None = None,
) -> GameState:
    """
    Score a round and commit it to the game.

    Applies the round's team deltas to the cumulative scores and appends a
    history entry numbered len(history) + 1.
    """
    if game_state is None:
        raise IllegalTransitionError(action=LifecycleAction.ADD_ROUND.value, reason="no active game")

    teams = game_state.teams
    result = compute_round(round_input, teams, settings)
    new_teams = add_team_scores(
        teams,
        {TeamSlot.TEAM1: result.team1_round_score, TeamSlot.TEAM2: result.team2_round_score},
    )
    bidder = next(p for p in teams.all_players() if p.player_id == round_input.bidder_id)

    entry = RoundHistoryEntry(
        round_number=game_state.round_count + 1,
        bidder_id=bidder.player_id,
        bidder_name=bidder.name,
        bid_value=round_input.bid_value,
        team1_round_score=result.team1_round_score,
        team2_round_score=result.team2_round_score,
        team1_total=new_teams.team1.score,
        team2_total=new_teams.team2.score,
        player_scores=dict(result.player_scores),
        reason=result.reason,
        outcome=result.outcome,
    )
    return append_history(game_state.model_copy(update={"teams": new_teams}), entry)


def undo_last_round(game_state: GameState | None) -> tuple[GameState, RoundHistoryEntry]:
    """
    Remove the most recent round and subtract its recorded team deltas.

    Single-level: each call peels exactly one round. Returns the new state
    together with the removed entry so callers can revert side effects.
    """
    action = LifecycleAction.UNDO_ROUND.value
    if game_state is None:
        raise IllegalTransitionError(action=action, reason="no active game")
    if not game_state.history:
        raise IllegalTransitionError(action=action, reason="no rounds to undo")

    last = game_state.history[-1]
    new_teams = add_team_scores(
        game_state.teams,
        {TeamSlot.TEAM1: -last.team1_round_score, TeamSlot.TEAM2: -last.team2_round_score},
    )
    new_state = game_state.model_copy(update={"teams": new_teams, "history": game_state.history[:-1]})
    return new_state, last


def check_winner(game_state: GameState) -> TeamSlot | None:
    """
    Return the slot of the team that reached the target score, if any.

    When both teams reach the target in the same round, team1 wins because it
    is checked first. This keeps compatibility with established scoresheets;
    a margin-based tie-break would be a deliberate policy change.
    """
    for slot in TEAM_PRIORITY:
        if game_state.teams.get(slot).score >= game_state.target_score:
            return slot
    return None


def team_for_player(teams: Teams, player_id: str) -> TeamSlot | None:
    """Slot of the team seating player_id, or None for players on neither team."""
    return teams.slot_of(player_id)


def team_totals_from_history(game_state: GameState) -> dict[TeamSlot, int]:
    """Recompute each team's score from its round history deltas."""
    return {slot: sum(entry.round_score(slot) for entry in game_state.history) for slot in TeamSlot}
