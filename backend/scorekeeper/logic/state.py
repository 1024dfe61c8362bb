"""
Immutable state models for Binokel scorekeeping.

Every model is frozen. State transitions return new objects built with
model_copy, so earlier states stay valid for undo and review.
"""

from __future__ import annotations

from typing import Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from scorekeeper.logic.enums import LifecyclePhase, RoundOutcome, TeamSlot, WinReason
from scorekeeper.logic.types import PointsMap  # noqa: TC001


class Player(BaseModel):
    """A person tracked across games. Only the ledger mutates statistics."""

    model_config = ConfigDict(frozen=True)

    player_id: str
    name: str
    lifetime_score: int = 0
    games_played: int = Field(default=0, ge=0)
    wins: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _validate_wins(self) -> Self:
        if self.wins > self.games_played:
            raise ValueError(f"wins ({self.wins}) cannot exceed games_played ({self.games_played})")
        return self


class PlayerRef(BaseModel):
    """Identity and name snapshot of a player seated in a team."""

    model_config = ConfigDict(frozen=True)

    player_id: str
    name: str

    @classmethod
    def of(cls, player: Player) -> PlayerRef:
        return cls(player_id=player.player_id, name=player.name)


class Team(BaseModel):
    """Two seated players and their running score for one game."""

    model_config = ConfigDict(frozen=True)

    name: str
    players: tuple[PlayerRef, ...]
    score: int = 0

    @property
    def player_ids(self) -> tuple[str, ...]:
        return tuple(p.player_id for p in self.players)

    def has_player(self, player_id: str) -> bool:
        return any(p.player_id == player_id for p in self.players)


class Teams(BaseModel):
    """Both teams of a game, addressed by slot."""

    model_config = ConfigDict(frozen=True)

    team1: Team
    team2: Team

    def get(self, slot: TeamSlot) -> Team:
        return self.team1 if slot is TeamSlot.TEAM1 else self.team2

    def replace(self, slot: TeamSlot, team: Team) -> Teams:
        return self.model_copy(update={slot.value: team})

    def slot_of(self, player_id: str) -> TeamSlot | None:
        """Return the slot of the team seating player_id, or None."""
        for slot in TeamSlot:
            if self.get(slot).has_player(player_id):
                return slot
        return None

    def all_players(self) -> tuple[PlayerRef, ...]:
        return (*self.team1.players, *self.team2.players)


class RoundHistoryEntry(BaseModel):
    """
    Immutable record of one committed round.

    round_number is 1-based and equals the history length at insertion.
    """

    model_config = ConfigDict(frozen=True)

    round_number: int = Field(ge=1)
    bidder_id: str
    bidder_name: str
    bid_value: int
    team1_round_score: int
    team2_round_score: int
    team1_total: int
    team2_total: int
    player_scores: PointsMap
    reason: str
    outcome: RoundOutcome

    def round_score(self, slot: TeamSlot) -> int:
        return self.team1_round_score if slot is TeamSlot.TEAM1 else self.team2_round_score


class GameState(BaseModel):
    """
    One game in progress: teams, target and committed round history.

    Each team's score equals the sum of its round scores over history.
    """

    model_config = ConfigDict(frozen=True)

    teams: Teams
    target_score: int = Field(gt=0)
    history: tuple[RoundHistoryEntry, ...] = ()

    @property
    def round_count(self) -> int:
        return len(self.history)


class PlayerLedger(BaseModel):
    """Cross-game player collection, ordered by creation."""

    model_config = ConfigDict(frozen=True)

    players: tuple[Player, ...] = ()

    def find(self, player_id: str) -> Player | None:
        return next((p for p in self.players if p.player_id == player_id), None)


class ScorekeeperState(BaseModel):
    """
    Top-level state: the player ledger plus the single active-game slot.

    ``game`` is None exactly in the NO_GAME phase; ``winner`` and
    ``win_reason`` are set exactly in the WON phase.
    """

    model_config = ConfigDict(frozen=True)

    ledger: PlayerLedger = Field(default_factory=PlayerLedger)
    game: GameState | None = None
    phase: LifecyclePhase = LifecyclePhase.NO_GAME
    winner: TeamSlot | None = None
    win_reason: WinReason | None = None

    @model_validator(mode="after")
    def _validate_phase(self) -> Self:
        if (self.game is None) != (self.phase == LifecyclePhase.NO_GAME):
            raise ValueError(f"phase {self.phase.value} does not match game presence")
        is_won = self.phase == LifecyclePhase.WON
        if is_won != (self.winner is not None) or is_won != (self.win_reason is not None):
            raise ValueError(f"winner must be set exactly in the won phase, got phase {self.phase.value}")
        return self
