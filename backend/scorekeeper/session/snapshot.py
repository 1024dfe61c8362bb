"""Flat snapshot format for persisting scorekeeper state.

The core performs no I/O: it converts state to a JSON document and back.
Dumping a loaded snapshot reproduces the original text exactly.
"""

from pydantic import BaseModel, ConfigDict

from scorekeeper.logic.enums import LifecyclePhase, TeamSlot, WinReason
from scorekeeper.logic.game import team_totals_from_history
from scorekeeper.logic.state import GameState, Player, PlayerLedger, ScorekeeperState

SNAPSHOT_VERSION = 1


class Snapshot(BaseModel):
    """Persisted form of ScorekeeperState: players plus the active-game slot."""

    model_config = ConfigDict(frozen=True)

    version: int = SNAPSHOT_VERSION
    players: tuple[Player, ...] = ()
    active_game: GameState | None = None
    phase: LifecyclePhase = LifecyclePhase.NO_GAME
    winner: TeamSlot | None = None
    win_reason: WinReason | None = None

    @classmethod
    def from_state(cls, state: ScorekeeperState) -> "Snapshot":
        return cls(
            players=state.ledger.players,
            active_game=state.game,
            phase=state.phase,
            winner=state.winner,
            win_reason=state.win_reason,
        )

    def to_state(self) -> ScorekeeperState:
        return ScorekeeperState(
            ledger=PlayerLedger(players=self.players),
            game=self.active_game,
            phase=self.phase,
            winner=self.winner,
            win_reason=self.win_reason,
        )


def dump_snapshot(state: ScorekeeperState) -> str:
    return Snapshot.from_state(state).model_dump_json(indent=2)


def load_snapshot(content: str) -> ScorekeeperState:
    """
    Rebuild state from snapshot JSON.

    Raises ValueError for malformed content, unknown versions,
    inconsistent lifecycle fields, or team scores that differ from the
    sum of their round history.
    """
    snapshot = Snapshot.model_validate_json(content)
    if snapshot.version != SNAPSHOT_VERSION:
        raise ValueError(f"Unsupported snapshot version {snapshot.version}, expected {SNAPSHOT_VERSION}")
    game_state = snapshot.active_game
    if game_state is not None:
        for slot, total in team_totals_from_history(game_state).items():
            score = game_state.teams.get(slot).score
            if score != total:
                raise ValueError(f"{slot.value} score {score} does not match round history total {total}")
    return snapshot.to_state()
