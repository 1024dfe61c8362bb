"""Scorekeeping session: the composition root used by a front end.

Holds the current ScorekeeperState and the round awaiting confirmation,
delegates every transition to the lifecycle controller, and saves a
snapshot after each successful change.

Rounds follow a two-phase flow: ``preview_round`` scores the input without
committing it, and ``commit_round`` commits exactly the previewed input.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from scorekeeper.logic import lifecycle
from scorekeeper.logic.enums import ErrorCode, LifecycleAction, LifecyclePhase
from scorekeeper.logic.events import ErrorEvent, ScorekeeperEvent
from scorekeeper.logic.exceptions import IllegalTransitionError
from scorekeeper.logic.scoring import check_trick_pool, compute_round, remaining_trick_points
from scorekeeper.logic.settings import GameSettings, validate_settings
from scorekeeper.logic.state import ScorekeeperState
from scorekeeper.logic.types import RoundInput
from scorekeeper.session.snapshot import dump_snapshot, load_snapshot

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from scorekeeper.logic.enums import TeamSlot
    from scorekeeper.logic.types import RoundResult
    from shared.storage import SnapshotStorage

logger = structlog.get_logger()

DEFAULT_SNAPSHOT_NAME = "scorekeeper"


@dataclass(frozen=True)
class RoundPreview:
    """A scored but uncommitted round awaiting confirmation."""

    round_input: RoundInput
    result: RoundResult
    remaining_trick_points: int


class ScorekeeperSession:
    """Single-user scorekeeping session.

    Transitions run one at a time to completion. InvalidInputError
    propagates to the caller; IllegalTransitionError is converted into an
    ErrorEvent and the state is left unchanged.
    """

    def __init__(
        self,
        settings: GameSettings | None = None,
        storage: SnapshotStorage | None = None,
        snapshot_name: str = DEFAULT_SNAPSHOT_NAME,
    ) -> None:
        self._settings = settings or GameSettings()
        validate_settings(self._settings)
        self._storage = storage
        self._snapshot_name = snapshot_name
        self._state = ScorekeeperState()
        self._pending: RoundPreview | None = None

    @property
    def state(self) -> ScorekeeperState:
        return self._state

    @property
    def settings(self) -> GameSettings:
        return self._settings

    @property
    def pending(self) -> RoundPreview | None:
        return self._pending

    def restore(self) -> bool:
        """Load the saved snapshot, if any. Returns True when state was restored."""
        if self._storage is None:
            return False
        content = self._storage.load_snapshot(self._snapshot_name)
        if content is None:
            return False
        self._state = load_snapshot(content)
        self._pending = None
        logger.info(
            "session restored",
            players=len(self._state.ledger.players),
            phase=self._state.phase,
        )
        return True

    # ------------------------------------------------------------------
    # Roster
    # ------------------------------------------------------------------

    def create_player(self, name: str, player_id: str | None = None) -> list[ScorekeeperEvent]:
        return self._run(LifecycleAction.CREATE_PLAYER, lambda s: lifecycle.create_player(s, name, player_id))

    def rename_player(self, player_id: str, name: str) -> list[ScorekeeperEvent]:
        return self._run(LifecycleAction.RENAME_PLAYER, lambda s: lifecycle.rename_player(s, player_id, name))

    def delete_player(self, player_id: str) -> list[ScorekeeperEvent]:
        return self._run(LifecycleAction.DELETE_PLAYER, lambda s: lifecycle.delete_player(s, player_id))

    # ------------------------------------------------------------------
    # Game
    # ------------------------------------------------------------------

    def start_game(
        self,
        team_player_ids: Sequence[Sequence[str]],
        target_score: int | None = None,
    ) -> list[ScorekeeperEvent]:
        target = self._settings.default_target_score if target_score is None else target_score
        return self._run(
            LifecycleAction.START_GAME,
            lambda s: lifecycle.start_game(s, team_player_ids, target),
            clears_preview=True,
        )

    def new_round(self, bidder_id: str) -> RoundInput:
        """Blank round for bidder_id at the default bid, ready to be filled in and previewed."""
        return RoundInput(bidder_id=bidder_id, bid_value=self._settings.default_bid_value)

    def preview_round(self, round_input: RoundInput) -> RoundPreview | ErrorEvent:
        """Score a round without committing it and remember it for commit_round.

        Runs the trick pool admission check first when enabled in settings.
        The pending round is a validated copy, so later changes to the
        caller's input cannot alter what commit_round commits.
        """
        if self._state.phase != LifecyclePhase.IN_PROGRESS or self._state.game is None:
            return self._error_event(
                IllegalTransitionError(
                    action=LifecycleAction.ADD_ROUND.value,
                    reason=f"not allowed in phase {self._state.phase.value}",
                ),
            )
        round_input = RoundInput.model_validate(round_input.model_dump())
        if self._settings.enforce_trick_pool:
            check_trick_pool(round_input, self._settings)
        result = compute_round(round_input, self._state.game.teams, self._settings)
        self._pending = RoundPreview(
            round_input=round_input,
            result=result,
            remaining_trick_points=remaining_trick_points(round_input.trick_points, self._settings),
        )
        return self._pending

    def cancel_preview(self) -> None:
        self._pending = None

    def commit_round(self) -> list[ScorekeeperEvent]:
        """Commit the previewed round. Without a preview, returns an ErrorEvent."""
        if self._pending is None:
            logger.warning("commit without preview rejected")
            return [
                ErrorEvent(
                    code=ErrorCode.NO_PENDING_PREVIEW,
                    action=LifecycleAction.COMMIT_ROUND.value,
                    message="no previewed round to commit",
                ),
            ]
        round_input = self._pending.round_input
        return self._run(
            LifecycleAction.COMMIT_ROUND,
            lambda s: lifecycle.add_round(s, round_input, self._settings),
            clears_preview=True,
        )

    def undo_last_round(self) -> list[ScorekeeperEvent]:
        return self._run(LifecycleAction.UNDO_ROUND, lifecycle.undo_last_round, clears_preview=True)

    def forfeit(self, winner: TeamSlot) -> list[ScorekeeperEvent]:
        return self._run(LifecycleAction.FORFEIT, lambda s: lifecycle.forfeit(s, winner), clears_preview=True)

    def discard(self) -> list[ScorekeeperEvent]:
        return self._run(LifecycleAction.DISCARD, lifecycle.discard, clears_preview=True)

    def reset(self) -> list[ScorekeeperEvent]:
        return self._run(LifecycleAction.RESET, lifecycle.reset, clears_preview=True)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _run(
        self,
        action: LifecycleAction,
        transition: Callable[[ScorekeeperState], lifecycle.TransitionResult],
        *,
        clears_preview: bool = False,
    ) -> list[ScorekeeperEvent]:
        try:
            result = transition(self._state)
        except IllegalTransitionError as e:
            return [self._error_event(e)]
        self._state = result.state
        if clears_preview:
            self._pending = None
        self._persist(action)
        return result.events

    def _error_event(self, error: IllegalTransitionError) -> ErrorEvent:
        logger.warning("transition rejected", action=error.action, reason=error.reason)
        return ErrorEvent(code=ErrorCode.ILLEGAL_TRANSITION, action=error.action, message=str(error))

    def _persist(self, action: LifecycleAction) -> None:
        """Save a snapshot of the current state; failures are logged, not raised."""
        if self._storage is None:
            return
        try:
            self._storage.save_snapshot(self._snapshot_name, dump_snapshot(self._state))
        except (OSError, ValueError):
            logger.exception("failed to save snapshot", action=action, name=self._snapshot_name)
