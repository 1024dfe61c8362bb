"""
String enum definitions for Binokel scorekeeping concepts.
"""

from enum import Enum


class TeamSlot(str, Enum):
    """Position of a team within a game."""

    TEAM1 = "team1"
    TEAM2 = "team2"

    @property
    def other(self) -> "TeamSlot":
        return TeamSlot.TEAM2 if self is TeamSlot.TEAM1 else TeamSlot.TEAM1


# win detection checks team1 before team2
TEAM_PRIORITY: tuple[TeamSlot, ...] = (TeamSlot.TEAM1, TeamSlot.TEAM2)


class RoundOutcome(str, Enum):
    """How the bidding team fared in a round."""

    BID_MADE = "bid_made"
    BID_FAILED = "bid_failed"
    ABANDONED = "abandoned"


class LifecyclePhase(str, Enum):
    """Phase of the single active-game slot."""

    NO_GAME = "no_game"
    IN_PROGRESS = "in_progress"
    WON = "won"


class WinReason(str, Enum):
    """Why a game reached the won phase."""

    TARGET_REACHED = "target_reached"
    FORFEIT = "forfeit"


class LifecycleAction(str, Enum):
    """Transitions accepted by the lifecycle controller."""

    START_GAME = "start_game"
    ADD_ROUND = "add_round"
    UNDO_ROUND = "undo_round"
    FORFEIT = "forfeit"
    DISCARD = "discard"
    RESET = "reset"
    CREATE_PLAYER = "create_player"
    DELETE_PLAYER = "delete_player"
    RENAME_PLAYER = "rename_player"
    COMMIT_ROUND = "commit_round"


class ErrorCode(str, Enum):
    """Error codes attached to error events at the session boundary."""

    ILLEGAL_TRANSITION = "illegal_transition"
    NO_PENDING_PREVIEW = "no_pending_preview"
