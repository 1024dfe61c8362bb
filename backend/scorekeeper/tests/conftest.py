from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from scorekeeper.logic import lifecycle
from scorekeeper.logic.game import build_team, start_game
from scorekeeper.logic.state import PlayerLedger, PlayerRef, ScorekeeperState, Teams
from scorekeeper.logic.types import RoundInput

if TYPE_CHECKING:
    from collections.abc import Mapping

    from scorekeeper.logic.state import GameState


# ============================================================================
# Test State Builder Helpers
# ============================================================================

# team1: Anna & Ben, team2: Clara & Dieter
PLAYER_NAMES: dict[str, str] = {"a": "Anna", "b": "Ben", "c": "Clara", "d": "Dieter"}
TEAM1_IDS = ("a", "b")
TEAM2_IDS = ("c", "d")


def create_teams(*, team1_score: int = 0, team2_score: int = 0) -> Teams:
    """Create Anna & Ben vs Clara & Dieter with the given running scores."""
    team1 = build_team(*(PlayerRef(player_id=pid, name=PLAYER_NAMES[pid]) for pid in TEAM1_IDS))
    team2 = build_team(*(PlayerRef(player_id=pid, name=PLAYER_NAMES[pid]) for pid in TEAM2_IDS))
    return Teams(
        team1=team1.model_copy(update={"score": team1_score}),
        team2=team2.model_copy(update={"score": team2_score}),
    )


def create_game_state(*, target_score: int = 1500) -> GameState:
    teams = create_teams()
    return start_game([teams.team1, teams.team2], target_score)


def make_round(
    bidder_id: str = "a",
    bid_value: int = 150,
    *,
    meld: Mapping[str, int] | None = None,
    tricks: Mapping[str, int] | None = None,
    abandoned: bool = False,
) -> RoundInput:
    """Create a RoundInput; unspecified players have 0 meld and 0 tricks."""
    return RoundInput(
        bidder_id=bidder_id,
        bid_value=bid_value,
        meld_points=dict(meld or {}),
        trick_points=dict(tricks or {}),
        abandoned=abandoned,
    )


def create_scorekeeper_state() -> ScorekeeperState:
    """Create a state whose ledger holds the four standard players and no game."""
    state = ScorekeeperState(ledger=PlayerLedger())
    for player_id, name in PLAYER_NAMES.items():
        state = lifecycle.create_player(state, name, player_id).state
    return state


def create_in_progress_state(*, target_score: int = 1500) -> ScorekeeperState:
    state = create_scorekeeper_state()
    return lifecycle.start_game(state, [TEAM1_IDS, TEAM2_IDS], target_score).state


@pytest.fixture
def teams() -> Teams:
    return create_teams()


@pytest.fixture
def game_state() -> GameState:
    return create_game_state()
