"""Domain event models emitted by lifecycle transitions.

Every successful transition returns the events it produced; the session
boundary adds ErrorEvent for rejected transitions. Callers render, persist or
animate from these events without inspecting state diffs.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict

from scorekeeper.logic.enums import ErrorCode, TeamSlot, WinReason
from scorekeeper.logic.state import Player, RoundHistoryEntry, Teams  # noqa: TC001


class EventType(StrEnum):
    """Types of scorekeeping events."""

    PLAYER_CREATED = "player_created"
    PLAYER_RENAMED = "player_renamed"
    PLAYER_DELETED = "player_deleted"
    GAME_STARTED = "game_started"
    ROUND_COMMITTED = "round_committed"
    ROUND_UNDONE = "round_undone"
    GAME_WON = "game_won"
    GAME_DISCARDED = "game_discarded"
    GAME_RESET = "game_reset"
    ERROR = "error"


class ScorekeeperEvent(BaseModel):
    """Base class for all domain events."""

    model_config = ConfigDict(frozen=True)

    type: EventType


class PlayerCreatedEvent(ScorekeeperEvent):
    type: Literal[EventType.PLAYER_CREATED] = EventType.PLAYER_CREATED
    player: Player


class PlayerRenamedEvent(ScorekeeperEvent):
    type: Literal[EventType.PLAYER_RENAMED] = EventType.PLAYER_RENAMED
    player_id: str
    name: str


class PlayerDeletedEvent(ScorekeeperEvent):
    type: Literal[EventType.PLAYER_DELETED] = EventType.PLAYER_DELETED
    player_id: str


class GameStartedEvent(ScorekeeperEvent):
    """Event emitted when both teams are seated and scoring begins."""

    type: Literal[EventType.GAME_STARTED] = EventType.GAME_STARTED
    teams: Teams
    target_score: int


class RoundCommittedEvent(ScorekeeperEvent):
    """Event emitted when a round is added to the history."""

    type: Literal[EventType.ROUND_COMMITTED] = EventType.ROUND_COMMITTED
    entry: RoundHistoryEntry


class RoundUndoneEvent(ScorekeeperEvent):
    """Event emitted when the most recent round is removed."""

    type: Literal[EventType.ROUND_UNDONE] = EventType.ROUND_UNDONE
    entry: RoundHistoryEntry


class GameWonEvent(ScorekeeperEvent):
    """Event emitted once per game when a winner is determined."""

    type: Literal[EventType.GAME_WON] = EventType.GAME_WON
    winner: TeamSlot
    team_name: str
    reason: WinReason
    team1_score: int
    team2_score: int


class GameDiscardedEvent(ScorekeeperEvent):
    """Event emitted when a game is abandoned without recording statistics."""

    type: Literal[EventType.GAME_DISCARDED] = EventType.GAME_DISCARDED
    rounds_played: int


class GameResetEvent(ScorekeeperEvent):
    type: Literal[EventType.GAME_RESET] = EventType.GAME_RESET


class ErrorEvent(ScorekeeperEvent):
    """Event returned instead of raising when a transition is rejected."""

    type: Literal[EventType.ERROR] = EventType.ERROR
    code: ErrorCode
    action: str
    message: str
