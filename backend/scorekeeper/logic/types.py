"""
Pydantic models for round data crossing component boundaries.

Contains the raw round input collected by a caller and the round result
produced by the rule engine. Both are plain values: results are never stored
outside the history entry that carries them.
"""

from collections.abc import Mapping
from types import MappingProxyType
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, PlainSerializer

from scorekeeper.logic.enums import RoundOutcome, TeamSlot


def points_for(points: Mapping[str, int], player_id: str) -> int:
    """Per-player lookup where a missing entry counts as 0."""
    return points.get(player_id, 0)


def _freeze_points(points: Mapping[str, int]) -> Mapping[str, int]:
    return MappingProxyType(dict(points))


# read-only per-player points, serialized as a plain dict
PointsMap = Annotated[
    Mapping[str, int],
    AfterValidator(_freeze_points),
    PlainSerializer(dict, return_type=dict[str, int]),
]


class RoundInput(BaseModel):
    """Raw facts of one round as entered by the scorekeeper."""

    model_config = ConfigDict(frozen=True)

    bidder_id: str
    bid_value: int
    meld_points: PointsMap = Field(default_factory=dict, validate_default=True)
    trick_points: PointsMap = Field(default_factory=dict, validate_default=True)
    abandoned: bool = False

    def meld_for(self, player_id: str) -> int:
        return points_for(self.meld_points, player_id)

    def tricks_for(self, player_id: str) -> int:
        return points_for(self.trick_points, player_id)


class RoundResult(BaseModel):
    """Scores and rationale computed for one round."""

    model_config = ConfigDict(frozen=True)

    team1_round_score: int
    team2_round_score: int
    player_scores: PointsMap
    reason: str
    outcome: RoundOutcome

    def round_score(self, slot: TeamSlot) -> int:
        return self.team1_round_score if slot is TeamSlot.TEAM1 else self.team2_round_score
