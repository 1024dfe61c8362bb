"""
Game lifecycle controller.

Composes the game state store and the player ledger into a state machine
over one active-game slot:

    NO_GAME --start_game--> IN_PROGRESS
    IN_PROGRESS --add_round--> IN_PROGRESS | WON (target reached)
    IN_PROGRESS --undo_last_round--> IN_PROGRESS
    IN_PROGRESS --forfeit--> WON
    IN_PROGRESS --discard--> NO_GAME
    any --reset--> NO_GAME

WON is terminal until reset; undo never reopens a won game. The ledger
records a completed game exactly once, on the transition into WON.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

import structlog

from scorekeeper.logic import game, ledger
from scorekeeper.logic.enums import LifecycleAction, LifecyclePhase, TeamSlot, WinReason
from scorekeeper.logic.events import (
    GameDiscardedEvent,
    GameResetEvent,
    GameStartedEvent,
    GameWonEvent,
    PlayerCreatedEvent,
    PlayerDeletedEvent,
    PlayerRenamedEvent,
    RoundCommittedEvent,
    RoundUndoneEvent,
    ScorekeeperEvent,
)
from scorekeeper.logic.exceptions import IllegalTransitionError, InvalidInputError
from scorekeeper.logic.settings import PLAYERS_PER_TEAM
from scorekeeper.logic.state import PlayerRef, ScorekeeperState

if TYPE_CHECKING:
    from collections.abc import Sequence

    from scorekeeper.logic.settings import GameSettings
    from scorekeeper.logic.state import GameState
    from scorekeeper.logic.types import RoundInput

logger = structlog.get_logger()


class TransitionResult(NamedTuple):
    """
    New state after a lifecycle transition plus the events it produced.

    The input state is never modified; callers replace their stored state
    with ``state``.
    """

    state: ScorekeeperState
    events: list[ScorekeeperEvent]


def _require_phase(state: ScorekeeperState, action: LifecycleAction, *allowed: LifecyclePhase) -> None:
    if state.phase not in allowed:
        raise IllegalTransitionError(action=action.value, reason=f"not allowed in phase {state.phase.value}")


def _active_game(state: ScorekeeperState, action: LifecycleAction) -> GameState:
    _require_phase(state, action, LifecyclePhase.IN_PROGRESS)
    if state.game is None:  # pragma: no cover - guarded by the phase validator
        raise IllegalTransitionError(action=action.value, reason="no active game")
    return state.game


# ---------------------------------------------------------------------------
# Roster
# ---------------------------------------------------------------------------


def create_player(state: ScorekeeperState, name: str, player_id: str | None = None) -> TransitionResult:
    """Add a player to the ledger. Allowed in every phase."""
    new_ledger, player = ledger.create_player(state.ledger, name, player_id)
    logger.info("player created", player_id=player.player_id, name=player.name)
    return TransitionResult(
        state=state.model_copy(update={"ledger": new_ledger}),
        events=[PlayerCreatedEvent(player=player)],
    )


def rename_player(state: ScorekeeperState, player_id: str, name: str) -> TransitionResult:
    """Change a player's display name; seated team snapshots keep the old name."""
    new_ledger = ledger.rename_player(state.ledger, player_id, name)
    renamed = ledger.get_player(new_ledger, player_id)
    return TransitionResult(
        state=state.model_copy(update={"ledger": new_ledger}),
        events=[PlayerRenamedEvent(player_id=player_id, name=renamed.name)],
    )


def delete_player(state: ScorekeeperState, player_id: str) -> TransitionResult:
    """
    Remove a player and their statistics from the ledger.

    Players seated in an unfinished game cannot be deleted, since undo and
    completion still need to update them.
    """
    if state.phase == LifecyclePhase.IN_PROGRESS and state.game is not None:
        if game.team_for_player(state.game.teams, player_id) is not None:
            raise IllegalTransitionError(
                action=LifecycleAction.DELETE_PLAYER.value,
                reason=f"player {player_id!r} is seated in the active game",
            )
    new_ledger = ledger.delete_player(state.ledger, player_id)
    logger.info("player deleted", player_id=player_id)
    return TransitionResult(
        state=state.model_copy(update={"ledger": new_ledger}),
        events=[PlayerDeletedEvent(player_id=player_id)],
    )


# ---------------------------------------------------------------------------
# Game transitions
# ---------------------------------------------------------------------------


def start_game(
    state: ScorekeeperState,
    team_player_ids: Sequence[Sequence[str]],
    target_score: int,
) -> TransitionResult:
    """
    Seat two teams of ledger players and start a game.

    ``team_player_ids`` lists the player ids of team1 and team2 in seat
    order. Unknown ids raise InvalidInputError.
    """
    _require_phase(state, LifecycleAction.START_GAME, LifecyclePhase.NO_GAME)

    teams = []
    for player_ids in team_player_ids:
        refs = [PlayerRef.of(ledger.get_player(state.ledger, pid)) for pid in player_ids]
        if len(refs) != PLAYERS_PER_TEAM:
            raise InvalidInputError(f"a team needs exactly {PLAYERS_PER_TEAM} players, got {len(refs)}")
        teams.append(game.build_team(*refs))

    game_state = game.start_game(teams, target_score)
    logger.info(
        "game started",
        team1=game_state.teams.team1.name,
        team2=game_state.teams.team2.name,
        target_score=target_score,
    )
    new_state = state.model_copy(update={"game": game_state, "phase": LifecyclePhase.IN_PROGRESS})
    return TransitionResult(
        state=new_state,
        events=[GameStartedEvent(teams=game_state.teams, target_score=target_score)],
    )


def _win(state: ScorekeeperState, game_state: GameState, winner: TeamSlot, reason: WinReason) -> TransitionResult:
    """Enter WON and record the completed game in the ledger."""
    teams = game_state.teams
    winning_team = teams.get(winner)
    new_ledger = ledger.record_game_completion(state.ledger, winning_team, teams.get(winner.other))
    logger.info(
        "game won",
        winner=winner,
        team=winning_team.name,
        reason=reason,
        rounds=game_state.round_count,
    )
    new_state = state.model_copy(
        update={
            "ledger": new_ledger,
            "game": game_state,
            "phase": LifecyclePhase.WON,
            "winner": winner,
            "win_reason": reason,
        },
    )
    event = GameWonEvent(
        winner=winner,
        team_name=winning_team.name,
        reason=reason,
        team1_score=teams.team1.score,
        team2_score=teams.team2.score,
    )
    return TransitionResult(state=new_state, events=[event])


def add_round(
    state: ScorekeeperState,
    round_input: RoundInput,
    settings: GameSettings | None = None,
) -> TransitionResult:
    """
    Commit a round, update lifetime scores and check for a winner.

    When either team reaches the target the game moves to WON in the same
    transition, with team1 taking priority if both qualify.
    """
    game_state = _active_game(state, LifecycleAction.ADD_ROUND)
    new_game = game.add_round(game_state, round_input, settings)
    entry = new_game.history[-1]
    new_ledger = ledger.apply_round_delta(state.ledger, entry.player_scores)

    logger.info(
        "round committed",
        round_number=entry.round_number,
        bidder=entry.bidder_name,
        bid_value=entry.bid_value,
        outcome=entry.outcome,
        team1_delta=entry.team1_round_score,
        team2_delta=entry.team2_round_score,
    )
    committed = state.model_copy(update={"ledger": new_ledger, "game": new_game})
    events: list[ScorekeeperEvent] = [RoundCommittedEvent(entry=entry)]

    winner = game.check_winner(new_game)
    if winner is None:
        return TransitionResult(state=committed, events=events)

    won = _win(committed, new_game, winner, WinReason.TARGET_REACHED)
    return TransitionResult(state=won.state, events=events + won.events)


def undo_last_round(state: ScorekeeperState) -> TransitionResult:
    """Remove the most recent round and revert its lifetime score changes."""
    game_state = _active_game(state, LifecycleAction.UNDO_ROUND)
    new_game, removed = game.undo_last_round(game_state)
    new_ledger = ledger.apply_round_delta(state.ledger, ledger.negate_scores(removed.player_scores))
    logger.info("round undone", round_number=removed.round_number)
    return TransitionResult(
        state=state.model_copy(update={"ledger": new_ledger, "game": new_game}),
        events=[RoundUndoneEvent(entry=removed)],
    )


def forfeit(state: ScorekeeperState, winner: TeamSlot) -> TransitionResult:
    """End the game manually in favor of ``winner`` regardless of scores."""
    game_state = _active_game(state, LifecycleAction.FORFEIT)
    return _win(state, game_state, winner, WinReason.FORFEIT)


def discard(state: ScorekeeperState) -> TransitionResult:
    """Abandon the active game without recording games played or wins."""
    game_state = _active_game(state, LifecycleAction.DISCARD)
    logger.info("game discarded", rounds=game_state.round_count)
    return TransitionResult(
        state=state.model_copy(update={"game": None, "phase": LifecyclePhase.NO_GAME}),
        events=[GameDiscardedEvent(rounds_played=game_state.round_count)],
    )


def reset(state: ScorekeeperState) -> TransitionResult:
    """Clear the active-game slot and any win marker. Allowed in every phase."""
    new_state = state.model_copy(
        update={
            "game": None,
            "phase": LifecyclePhase.NO_GAME,
            "winner": None,
            "win_reason": None,
        },
    )
    return TransitionResult(state=new_state, events=[GameResetEvent()])
