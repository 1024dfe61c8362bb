"""
Round scoring for Binokel.

Evaluates the bidding team against its bid and scores both teams:

- bid made: each player scores meld + tricks, team scores the sum
- bid failed: bidding team scores minus twice the bid, its players 0
- abandoned: bidding team scores minus the bid, everyone else 0

A player who took no tricks scores 0 for the round regardless of meld.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from scorekeeper.logic.enums import RoundOutcome, TeamSlot
from scorekeeper.logic.exceptions import InvalidInputError
from scorekeeper.logic.settings import GameSettings
from scorekeeper.logic.types import RoundResult, points_for

if TYPE_CHECKING:
    from collections.abc import Mapping

    from scorekeeper.logic.state import Team, Teams
    from scorekeeper.logic.types import RoundInput

logger = logging.getLogger(__name__)

ABANDONED_REASON = "bidder abandoned"

_DEFAULT_SETTINGS = GameSettings()


@dataclass(frozen=True)
class BidContext:
    """Bidding team, defending team and their slots for one round."""

    bid_slot: TeamSlot
    bid_team: Team
    other_team: Team

    @property
    def other_slot(self) -> TeamSlot:
        return self.bid_slot.other


def team_meld(team: Team, meld_points: Mapping[str, int]) -> int:
    """Sum of declared-combination points over a team's players."""
    return sum(points_for(meld_points, p.player_id) for p in team.players)


def team_tricks(team: Team, trick_points: Mapping[str, int]) -> int:
    """Sum of trick points over a team's players."""
    return sum(points_for(trick_points, p.player_id) for p in team.players)


def player_round_score(round_input: RoundInput, player_id: str) -> int:
    """
    Score of one player in a normally played round.

    Zero trick points means zero for the round, even with declared meld.
    """
    tricks = round_input.tricks_for(player_id)
    if tricks == 0:
        return 0
    return round_input.meld_for(player_id) + tricks


def validate_round_input(round_input: RoundInput, teams: Teams) -> BidContext:
    """
    Check round input against the seated teams and locate the bidder.

    Raises InvalidInputError for a non-positive bid, negative point entries,
    or a bidder who is not seated in either team.
    """
    if round_input.bid_value <= 0:
        raise InvalidInputError(f"bid value must be positive, got {round_input.bid_value}")
    for label, points in (("meld", round_input.meld_points), ("trick", round_input.trick_points)):
        negative = sorted(pid for pid, value in points.items() if value < 0)
        if negative:
            raise InvalidInputError(f"{label} points must be non-negative, got negative entries for {negative}")

    bid_slot = teams.slot_of(round_input.bidder_id)
    if bid_slot is None:
        raise InvalidInputError(f"bidder {round_input.bidder_id!r} is not a member of either team")
    return BidContext(
        bid_slot=bid_slot,
        bid_team=teams.get(bid_slot),
        other_team=teams.get(bid_slot.other),
    )


def compute_round(
    round_input: RoundInput,
    teams: Teams,
    settings: GameSettings | None = None,
) -> RoundResult:
    """
    Compute team deltas, per-player scores and rationale for one round.

    Pure: neither argument is modified, and calling it again with the same
    input yields the same result. Used both for previewing a round and for
    committing it.
    """
    settings = settings or _DEFAULT_SETTINGS
    ctx = validate_round_input(round_input, teams)
    bid_value = round_input.bid_value

    player_scores: dict[str, int] = {}

    if round_input.abandoned:
        # abandonment short-circuits normal scoring for everyone
        for p in teams.all_players():
            player_scores[p.player_id] = 0
        bid_team_score = -settings.abandoned_bid_multiplier * bid_value
        return _build_result(
            ctx,
            bid_team_score=bid_team_score,
            other_team_score=0,
            player_scores=player_scores,
            reason=ABANDONED_REASON,
            outcome=RoundOutcome.ABANDONED,
        )

    bid_total = team_meld(ctx.bid_team, round_input.meld_points) + team_tricks(
        ctx.bid_team,
        round_input.trick_points,
    )

    if bid_total >= bid_value:
        outcome = RoundOutcome.BID_MADE
        reason = f"bid made ({bid_total} >= {bid_value})"
        for p in ctx.bid_team.players:
            player_scores[p.player_id] = player_round_score(round_input, p.player_id)
        bid_team_score = sum(player_scores[pid] for pid in ctx.bid_team.player_ids)
    else:
        outcome = RoundOutcome.BID_FAILED
        reason = f"bid failed ({bid_total} < {bid_value})"
        for p in ctx.bid_team.players:
            player_scores[p.player_id] = 0
        bid_team_score = -settings.failed_bid_multiplier * bid_value

    for p in ctx.other_team.players:
        player_scores[p.player_id] = player_round_score(round_input, p.player_id)
    other_team_score = sum(player_scores[pid] for pid in ctx.other_team.player_ids)

    return _build_result(
        ctx,
        bid_team_score=bid_team_score,
        other_team_score=other_team_score,
        player_scores=player_scores,
        reason=reason,
        outcome=outcome,
    )


def _build_result(
    ctx: BidContext,
    *,
    bid_team_score: int,
    other_team_score: int,
    player_scores: dict[str, int],
    reason: str,
    outcome: RoundOutcome,
) -> RoundResult:
    """Map bid/other team scores back to team1/team2 positions."""
    scores = {ctx.bid_slot: bid_team_score, ctx.other_slot: other_team_score}
    logger.debug(
        "round scored: outcome=%s bid_slot=%s team1=%d team2=%d",
        outcome.value,
        ctx.bid_slot.value,
        scores[TeamSlot.TEAM1],
        scores[TeamSlot.TEAM2],
    )
    return RoundResult(
        team1_round_score=scores[TeamSlot.TEAM1],
        team2_round_score=scores[TeamSlot.TEAM2],
        player_scores=player_scores,
        reason=reason,
        outcome=outcome,
    )


def remaining_trick_points(trick_points: Mapping[str, int], settings: GameSettings | None = None) -> int:
    """Trick points still unassigned out of the round's trick pool."""
    settings = settings or _DEFAULT_SETTINGS
    return settings.trick_pool_total - sum(trick_points.values())


def check_trick_pool(round_input: RoundInput, settings: GameSettings | None = None) -> None:
    """
    Caller-side admission check for a played round.

    The trick points of a non-abandoned round must add up to the full trick
    pool. compute_round does not enforce this; callers run it before preview.
    """
    if round_input.abandoned:
        return
    remaining = remaining_trick_points(round_input.trick_points, settings)
    if remaining != 0:
        raise InvalidInputError(f"trick points must add up to the trick pool, {remaining} remaining")


def score_progress(score: int, target_score: int) -> float:
    """Scoreboard progress towards the target in percent, clamped to 0-100."""
    if score <= 0 or target_score <= 0:
        return 0.0
    return min(score / target_score * 100, 100.0)
