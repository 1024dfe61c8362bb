"""Typed domain exceptions for scorekeeping rule violations.

All domain-level violations use subclasses of ScorekeeperError rather than
raw ValueError. InvalidInputError always propagates to the caller;
IllegalTransitionError is caught at the session boundary and converted to
an ErrorEvent with the state left unchanged.
"""


class ScorekeeperError(Exception):
    """Base exception for scorekeeping rule violations."""


class InvalidInputError(ScorekeeperError):
    """Round, team, player or target input violates the game rules."""


class UnsupportedSettingsError(ScorekeeperError):
    """Game settings contain values the rule engine cannot honor."""


class IllegalTransitionError(ScorekeeperError):
    """Raised when an operation is not valid in the current lifecycle phase.

    The operation is a no-op: the state passed in is never modified.

    Attributes:
        action: The attempted transition (e.g. "undo_round", "add_round").
        reason: Human-readable explanation of why it was rejected.

    """

    def __init__(self, *, action: str, reason: str) -> None:
        self.action = action
        self.reason = reason
        super().__init__(f"illegal {action}: {reason}")
